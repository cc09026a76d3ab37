"""
Logging for the ImobHub domain service.

Every line carries the request id, the authenticated broker and, when the
request arrived on a broker's own hostname, that custom domain. Staging and
production emit one JSON object per line; development gets a compact text
line. Credentials and e-mail addresses are masked before anything is written.
"""

import json
import logging
import re
import sys
import uuid
from contextvars import ContextVar
from typing import Any

from app.config import settings

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")
broker_id_ctx: ContextVar[str] = ContextVar("broker_id", default="-")
custom_domain_ctx: ContextVar[str] = ContextVar("custom_domain", default="-")

_CONTEXT = (
    ("request_id", request_id_ctx),
    ("broker_id", broker_id_ctx),
    ("custom_domain", custom_domain_ctx),
)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


# ── Masking ──

_SECRET_FIELD_RE = re.compile(r'("?(?:password|senha|token|authorization)"?\s*[:=]\s*)"[^"]*"', re.I)
_BEARER_RE = re.compile(r'(Bearer\s+)[A-Za-z0-9._-]+')
_EMAIL_RE = re.compile(r'([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})')


def _hide_mailbox(match: re.Match) -> str:
    user, host = match.group(1), match.group(2)
    tail = user[-1] if len(user) > 2 else ""
    return f"{user[0]}***{tail}@{host}"


def mask_pii(text: str) -> str:
    """Hide secrets, bearer tokens and mailbox names in ``text``."""
    text = _SECRET_FIELD_RE.sub(r'\1"***"', text)
    text = _BEARER_RE.sub(r'\1***', text)
    return _EMAIL_RE.sub(_hide_mailbox, text)


def current_context() -> dict[str, str]:
    """Request-scoped fields that are set, without the ``-`` placeholders."""
    return {name: var.get() for name, var in _CONTEXT if var.get() != "-"}


# ── Formatters ──

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": mask_pii(record.getMessage()),
            **current_context(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = mask_pii(self.formatException(record.exc_info))
        return json.dumps(entry, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """``12:00:01 | INFO | imobhub.dns | [ab12cd34 meusite.com.br] message``"""

    FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-18s | [%(context)s] %(message)s"

    def format(self, record: logging.LogRecord) -> str:
        record.context = " ".join(
            value for value in (request_id_ctx.get(), custom_domain_ctx.get()) if value != "-"
        ) or "-"
        return mask_pii(super().format(record))


def setup_logging() -> None:
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if settings.is_production or settings.is_staging:
        handler.setFormatter(JSONFormatter())
        root.setLevel(logging.INFO)
    else:
        handler.setFormatter(HumanFormatter(HumanFormatter.FORMAT, datefmt="%H:%M:%S"))
        root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    # dnspython and the HTTP stack are chatty at DEBUG
    for name in ("uvicorn.access", "httpcore", "httpx", "asyncio", "sqlalchemy.engine", "dns"):
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
