"""
Custom domain claim / re-verification workflow.

Invoked from the broker dashboard on explicit user action, never from the
request hot path. Validation and conflict failures raise before any DNS
query is made; DNS problems only ever downgrade the claim to PENDING.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.crud import crud_custom_domain
from app.crud.crud_custom_domain import DomainTakenError
from app.models.custom_domain import DomainStatus
from app.services.dns_verifier import DnsCheckResult, verify_domain
from app.services.hostname import is_blocked_domain, is_valid_hostname, normalize_domain

logger = logging.getLogger("imobhub.domain_claims")

Verifier = Callable[[str], DnsCheckResult]


class DomainValidationError(ValueError):
    message = "Domínio inválido"


class DomainRequiredError(DomainValidationError):
    message = "Domínio é obrigatório"


class InvalidDomainError(DomainValidationError):
    message = "Domínio inválido"


class BlockedDomainError(DomainValidationError):
    message = "Este domínio não pode ser utilizado"


class NoDomainToVerifyError(LookupError):
    message = "Nenhum domínio para verificar"


@dataclass
class DomainOutcome:
    domain: str
    status: DomainStatus
    check: DnsCheckResult

    @property
    def ok(self) -> bool:
        return self.status == DomainStatus.ACTIVE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def claim_domain(
    db: Session,
    *,
    owner_id: str,
    raw_domain: Optional[str],
    verifier: Verifier = verify_domain,
) -> DomainOutcome:
    """Register ``raw_domain`` for ``owner_id``, replacing any previous claim."""
    if not raw_domain or not raw_domain.strip():
        raise DomainRequiredError()

    domain = normalize_domain(raw_domain)
    if not is_valid_hostname(domain):
        raise InvalidDomainError(domain)
    if is_blocked_domain(domain):
        raise BlockedDomainError(domain)

    if crud_custom_domain.get_by_domain_excluding_owner(db, domain, owner_id):
        logger.info("Domain %s already claimed by another broker", domain)
        raise DomainTakenError(domain)

    check = verifier(domain)
    now = _utcnow()
    status = DomainStatus.ACTIVE if check.ok else DomainStatus.PENDING

    crud_custom_domain.upsert(
        db,
        owner_id=owner_id,
        domain=domain,
        status=status,
        verified_at=now if check.ok else None,
        last_checked_at=now,
    )
    logger.info("Domain %s claimed by %s (%s)", domain, owner_id, status.value)
    return DomainOutcome(domain=domain, status=status, check=check)


def reverify_domain(
    db: Session,
    *,
    owner_id: str,
    verifier: Verifier = verify_domain,
) -> DomainOutcome:
    """Re-run the DNS check for the owner's current claim."""
    record = crud_custom_domain.get_by_owner(db, owner_id)
    if record is None:
        raise NoDomainToVerifyError(owner_id)

    check = verifier(record.domain)
    record = crud_custom_domain.record_check(db, db_obj=record, ok=check.ok, checked_at=_utcnow())
    logger.info("Domain %s re-verified: %s", record.domain, record.status.value)
    return DomainOutcome(domain=record.domain, status=record.status, check=check)
