"""
Custom Domain Routing Middleware

Serves a broker's storefront when a request arrives on their verified
custom domain: ``meusite.com.br/imoveis/5`` is handled as
``/corretor/<slug>/imoveis/5``. Unknown or unverified domains get the
"domain not found" page. Registry errors are not swallowed.
"""

import logging

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.crud import crud_custom_domain
from app.db import session as db_session
from app.logging_config import custom_domain_ctx
from app.middleware.metrics import ROUTE_DECISIONS
from app.services.tenant_router import RouteDecision, RouteKind, route

logger = logging.getLogger("imobhub.domain")


def _decide(host: str, path: str) -> RouteDecision:
    db = db_session.SessionLocal()
    try:
        return route(host, path, lambda domain: crud_custom_domain.find_active_by_domain(db, domain))
    finally:
        db.close()


class CustomDomainMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        host = request.headers.get("host", "")
        path = request.url.path

        decision = await run_in_threadpool(_decide, host, path)
        ROUTE_DECISIONS.labels(decision=decision.kind.value).inc()

        if decision.kind is RouteKind.PASS_THROUGH:
            return await call_next(request)

        custom_domain_ctx.set(decision.domain or "-")
        request.state.custom_domain = decision.domain
        if decision.kind is RouteKind.REWRITE:
            request.state.storefront_slug = decision.slug
            logger.debug("Rewriting %s%s → %s", decision.domain, path, decision.path)
        else:
            logger.info("No active custom domain for host %s", decision.domain)

        request.scope["path"] = decision.path
        request.scope["raw_path"] = decision.path.encode("utf-8")
        return await call_next(request)
