from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DomainClaim(BaseModel):
    dominio: Optional[str] = None


class DnsDetails(BaseModel):
    error: Optional[str] = None
    expected: str
    found: Optional[str] = None


class DomainActivated(BaseModel):
    ok: bool
    domain: str
    status: str
    mensagem: str


class DomainPending(DomainActivated):
    dnsDetalhes: DnsDetails


class DomainInfo(BaseModel):
    domain: Optional[str] = None
    status: Optional[str] = None
    verifiedAt: Optional[datetime] = None
    lastCheckedAt: Optional[datetime] = None
    expectedCname: str
    expectedIp: str


class StorefrontPublic(BaseModel):
    slug: str
    name: str
    path: str
    customDomain: Optional[str] = None
