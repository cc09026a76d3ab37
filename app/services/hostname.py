"""
Hostname normalization and claim checks.

Every entry point (claim, verify, tenant routing) canonicalizes hosts
through ``normalize_domain`` so the registry only ever sees one form.
"""
import re

from app.config import settings

_SCHEME_RE = re.compile(r"^https?://")
_WWW_RE = re.compile(r"^www\.")
_PATH_RE = re.compile(r"/.*\Z", re.S)
_PORT_RE = re.compile(r":\d*\Z")

# Labels of letters/digits/hyphens without a leading hyphen, alphabetic TLD
_HOSTNAME_RE = re.compile(r"^(?:(?!-)[a-z0-9-]{1,63}\.)+[a-z]{2,63}\Z")
_MAX_HOSTNAME_LENGTH = 253


def _strip_once(value: str) -> str:
    value = value.strip().lower()
    value = _SCHEME_RE.sub("", value)
    value = _WWW_RE.sub("", value)
    value = _PATH_RE.sub("", value)
    value = _PORT_RE.sub("", value)
    return value.rstrip(".")


def normalize_domain(raw: str) -> str:
    """
    Reduce a Host header or user-typed domain to its canonical form.

    ``HTTPS://WWW.Example.com:8443/imoveis`` -> ``example.com``.
    Each pass only removes characters, so repeating until nothing changes
    terminates and makes the result idempotent.
    """
    current = raw
    while True:
        stripped = _strip_once(current)
        if stripped == current:
            return stripped
        current = stripped


def is_valid_hostname(domain: str) -> bool:
    if not domain or len(domain) > _MAX_HOSTNAME_LENGTH:
        return False
    return bool(_HOSTNAME_RE.match(domain))


def _under_local_suffix(domain: str) -> bool:
    suffix = settings.LOCAL_DEV_SUFFIX.lower()
    if not suffix:
        return False
    return domain.endswith(suffix) or domain == suffix.lstrip(".")


def is_local_host(domain: str) -> bool:
    """Development hosts never go through tenant routing."""
    return domain in settings.passthrough_hosts or _under_local_suffix(domain)


def is_blocked_domain(domain: str) -> bool:
    """Platform-owned domains and local-development hosts cannot be claimed."""
    reserved = set(settings.blocked_domains)
    reserved.add(normalize_domain(settings.DEFAULT_DOMAIN))
    reserved.add(normalize_domain(settings.PLATFORM_CANONICAL_HOST))
    return domain in reserved or _under_local_suffix(domain)
