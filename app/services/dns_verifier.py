"""
DNS verification for custom domains.

A claimed domain is considered to point at the platform when either its
A record contains the platform IP or one of its CNAMEs is the platform's
canonical hostname. ``verify_domain`` never raises: every path returns a
``DnsCheckResult`` the caller can persist and show to the broker.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

import dns.exception
import dns.resolver

from app.config import settings
from app.middleware.metrics import DNS_VERIFICATIONS

logger = logging.getLogger("imobhub.dns")

MSG_MISMATCH = "Domínio não aponta para o IP ou CNAME esperado"
MSG_NO_RECORD = "Nenhum registro DNS encontrado"
MSG_UNKNOWN = "Erro desconhecido ao verificar DNS"


@dataclass
class DnsCheckResult:
    ok: bool
    expected: str
    found: Optional[str] = None
    error: Optional[str] = None

    def as_details(self) -> Dict[str, Optional[str]]:
        return {"error": self.error, "expected": self.expected, "found": self.found}


class DnsResolver(Protocol):
    """Lookups used by the verifier; failures raise ``dns.exception.DNSException``."""

    def resolve_a(self, host: str) -> List[str]: ...

    def resolve_cname(self, host: str) -> List[str]: ...


class DnsPythonResolver:
    """dnspython-backed resolver with a hard per-call time limit."""

    def __init__(self, timeout: Optional[float] = None):
        limit = timeout if timeout is not None else settings.DNS_TIMEOUT_SECONDS
        self._resolver = dns.resolver.Resolver()
        self._resolver.timeout = limit
        self._resolver.lifetime = limit

    def resolve_a(self, host: str) -> List[str]:
        answers = self._resolver.resolve(host, "A")
        return [rdata.address for rdata in answers]

    def resolve_cname(self, host: str) -> List[str]:
        answers = self._resolver.resolve(host, "CNAME")
        return [rdata.target.to_text() for rdata in answers]


def _dns_error_code(exc: dns.exception.DNSException) -> str:
    if isinstance(exc, dns.resolver.NXDOMAIN):
        return "NXDOMAIN"
    if isinstance(exc, dns.resolver.NoNameservers):
        return "SERVFAIL"
    if isinstance(exc, dns.exception.Timeout):
        return "TIMEOUT"
    return type(exc).__name__


def _result(outcome: str, domain: str, result: DnsCheckResult) -> DnsCheckResult:
    DNS_VERIFICATIONS.labels(outcome=outcome).inc()
    if result.ok:
        logger.info("DNS check ok for %s via %s (%s)", domain, outcome, result.found)
    else:
        logger.info(
            "DNS check failed for %s: %s (found=%s, expected=%s)",
            domain, result.error, result.found, result.expected,
        )
    return result


def verify_domain(domain: str, resolver: Optional[DnsResolver] = None) -> DnsCheckResult:
    """Check that ``domain`` points at the platform by A record or CNAME."""
    canonical = settings.PLATFORM_CANONICAL_HOST
    target_ip = settings.PLATFORM_TARGET_IP

    try:
        resolver = resolver or DnsPythonResolver()

        # 1) A record: a match is enough; failures are only inconclusive
        try:
            addresses = resolver.resolve_a(domain)
        except dns.exception.DNSException as exc:
            logger.debug("A lookup for %s inconclusive: %s", domain, _dns_error_code(exc))
            addresses = []
        if target_ip in addresses:
            return _result("a_record", domain, DnsCheckResult(ok=True, found=target_ip, expected=target_ip))

        # 2) CNAME
        try:
            cnames = resolver.resolve_cname(domain)
        except dns.resolver.NoAnswer:
            return _result("no_record", domain, DnsCheckResult(
                ok=False, expected=f"{target_ip} ou {canonical}", error=MSG_NO_RECORD,
            ))
        except dns.exception.DNSException as exc:
            return _result("dns_error", domain, DnsCheckResult(
                ok=False, expected=f"{target_ip} ou {canonical}", error=_dns_error_code(exc),
            ))
        if not cnames:
            return _result("no_record", domain, DnsCheckResult(
                ok=False, expected=f"{target_ip} ou {canonical}", error=MSG_NO_RECORD,
            ))

        for cname in cnames:
            stripped = cname.rstrip(".")
            if stripped == canonical:
                return _result("cname", domain, DnsCheckResult(ok=True, found=stripped, expected=canonical))

        # 3) CNAMEs exist but none is ours
        return _result("mismatch", domain, DnsCheckResult(
            ok=False, found=", ".join(cnames), expected=canonical, error=MSG_MISMATCH,
        ))
    except Exception:
        logger.exception("Unexpected error verifying DNS for %s", domain)
        return _result("unknown_error", domain, DnsCheckResult(
            ok=False, expected=canonical, error=MSG_UNKNOWN,
        ))
