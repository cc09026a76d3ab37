"""Pytest configuration and fixtures."""
import os

# Must be set before app.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")

from typing import Dict, List, Optional

import dns.resolver
import pytest
from httpx import AsyncClient, ASGITransport

from app.core.security import create_access_token
from app.db.base_class import Base
from app.db.session import SessionLocal, engine
from app.services import dns_verifier

# --- Constants ---
DEFAULT_HOST = "imobhub.automatech.app.br"
CANONICAL = "imobhub.automatech.app.br"
TARGET_IP = "76.76.21.21"


class FakeResolver:
    """
    In-memory DNS: ``a`` / ``cname`` map hostnames to answers or to an
    exception instance to raise. Unknown names raise NXDOMAIN.
    """

    def __init__(self, a: Optional[Dict] = None, cname: Optional[Dict] = None):
        self.a = a or {}
        self.cname = cname or {}
        self.calls: List[tuple] = []

    def _answer(self, table: Dict, host: str) -> List[str]:
        value = table.get(host, dns.resolver.NXDOMAIN())
        if isinstance(value, BaseException):
            raise value
        return list(value)

    def resolve_a(self, host: str) -> List[str]:
        self.calls.append(("A", host))
        return self._answer(self.a, host)

    def resolve_cname(self, host: str) -> List[str]:
        self.calls.append(("CNAME", host))
        return self._answer(self.cname, host)


@pytest.fixture
def db():
    """Fresh schema per test on the shared in-memory SQLite engine."""
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_dns(monkeypatch):
    """Route every DnsPythonResolver() built by the app to one FakeResolver."""
    resolver = FakeResolver()
    monkeypatch.setattr(dns_verifier, "DnsPythonResolver", lambda timeout=None: resolver)
    return resolver


@pytest.fixture
async def client(db):
    from app.main import app as fastapi_app

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url=f"http://{DEFAULT_HOST}") as ac:
        yield ac


# --- Helpers ---

def create_broker(db, *, owner_id: str, slug: str, plan: str = "EXPERT", name: Optional[str] = None):
    from app.models.broker import BrokerProfile

    broker = BrokerProfile(owner_id=owner_id, slug=slug, plan=plan, name=name or slug.title())
    db.add(broker)
    db.commit()
    db.refresh(broker)
    return broker


def auth_headers(owner_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(owner_id)}"}
