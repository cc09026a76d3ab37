"""
Request Logging Middleware

- Assigns a unique request_id to every request
- Sets broker_id context from the bearer token
- Logs request start & end with timing
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.security import InvalidTokenError, decode_access_token
from app.logging_config import (
    broker_id_ctx,
    custom_domain_ctx,
    generate_request_id,
    request_id_ctx,
)

logger = logging.getLogger("imobhub.request")


def _extract_broker_id(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if not auth.startswith("Bearer "):
        return "-"
    try:
        payload = decode_access_token(auth[7:], verify_exp=False)
    except InvalidTokenError:
        return "-"
    return str(payload["sub"])


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        rid = generate_request_id()
        request_id_ctx.set(rid)
        broker_id_ctx.set(_extract_broker_id(request))
        custom_domain_ctx.set("-")

        method = request.method
        path = request.url.path
        host = request.headers.get("host", "-")
        client_ip = request.client.host if request.client else "-"

        logger.info("→ %s %s%s from %s", method, host, path, client_ip)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.exception("✗ %s %s%s — %.1fms (unhandled exception)", method, host, path, elapsed)
            raise

        elapsed = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = rid

        logger.info(
            "← %s %s%s — %d — %.1fms",
            method, host, path, response.status_code, elapsed,
        )
        return response
