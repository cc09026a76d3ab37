"""
Tenant routing by Host header.

Decides whether a request belongs to the platform itself or to a broker's
verified custom domain, in which case it is served from the broker's
storefront route (``/corretor/<slug>/...``).
"""
import enum
from dataclasses import dataclass
from typing import Callable, Optional

from app.config import settings
from app.crud.crud_custom_domain import ActiveDomain
from app.services.hostname import is_local_host, normalize_domain

DomainLookup = Callable[[str], Optional[ActiveDomain]]


class RouteKind(str, enum.Enum):
    PASS_THROUGH = "pass_through"
    REWRITE = "rewrite"
    NOT_FOUND_PAGE = "not_found_page"


@dataclass(frozen=True)
class RouteDecision:
    kind: RouteKind
    path: Optional[str] = None
    domain: Optional[str] = None
    slug: Optional[str] = None

    @classmethod
    def pass_through(cls) -> "RouteDecision":
        return cls(RouteKind.PASS_THROUGH)

    @classmethod
    def rewrite(cls, path: str, domain: str, slug: str) -> "RouteDecision":
        return cls(RouteKind.REWRITE, path=path, domain=domain, slug=slug)

    @classmethod
    def not_found_page(cls, domain: str) -> "RouteDecision":
        return cls(RouteKind.NOT_FOUND_PAGE, path=settings.DOMAIN_NOT_FOUND_PATH, domain=domain)


def is_excluded_path(path: str) -> bool:
    """Dashboard, API, internal assets and static files are never tenant-routed.

    ``RESERVED_PATHS`` match whole segments only, so a storefront page such
    as ``/healthcare`` is still routed.
    """
    return (
        path.startswith(settings.reserved_path_prefixes)
        or any(path == p or path.startswith(p + "/") for p in settings.reserved_paths)
        or path == "/favicon.ico"
        or "." in path
    )


def storefront_path(slug: str, path: str) -> str:
    base = f"{settings.STOREFRONT_BASE_PATH.rstrip('/')}/{slug}"
    return base if path in ("", "/") else f"{base}{path}"


def route(host: str, path: str, lookup: DomainLookup) -> RouteDecision:
    """
    Route one request.

    ``lookup`` is the registry's active-domain query; its errors propagate
    so a broken registry surfaces as a server error instead of serving the
    platform site on a broker's domain.
    """
    if is_excluded_path(path):
        return RouteDecision.pass_through()

    domain = normalize_domain(host or "")
    if not domain or domain == normalize_domain(settings.DEFAULT_DOMAIN) or is_local_host(domain):
        return RouteDecision.pass_through()

    tenant = lookup(domain)
    if tenant is None:
        return RouteDecision.not_found_page(domain)

    return RouteDecision.rewrite(storefront_path(tenant.slug, path), domain, tenant.slug)
