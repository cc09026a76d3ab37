"""
Domain registry: persistence for broker profiles and their custom domains.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.broker import BrokerProfile
from app.models.custom_domain import CustomDomain, DomainStatus

logger = logging.getLogger("imobhub.domain")


class DomainTakenError(Exception):
    """The domain is already held by another broker."""

    def __init__(self, domain: str):
        super().__init__(domain)
        self.domain = domain


@dataclass(frozen=True)
class ActiveDomain:
    slug: str
    owner_id: str


# ═══════════════════════════════════════════
#  Broker profiles
# ═══════════════════════════════════════════

def get_broker_by_owner(db: Session, owner_id: str) -> Optional[BrokerProfile]:
    return db.query(BrokerProfile).filter(BrokerProfile.owner_id == owner_id).first()


def get_broker_by_slug(db: Session, slug: str) -> Optional[BrokerProfile]:
    return db.query(BrokerProfile).filter(BrokerProfile.slug == slug).first()


# ═══════════════════════════════════════════
#  Custom domains
# ═══════════════════════════════════════════

def find_active_by_domain(db: Session, domain: str) -> Optional[ActiveDomain]:
    """Hot-path lookup used by tenant routing: one indexed join, ACTIVE only."""
    row = (
        db.query(BrokerProfile.slug, CustomDomain.owner_id)
        .select_from(CustomDomain)
        .join(BrokerProfile, BrokerProfile.owner_id == CustomDomain.owner_id)
        .filter(
            CustomDomain.domain == domain,
            CustomDomain.status == DomainStatus.ACTIVE,
        )
        .first()
    )
    if row is None:
        return None
    return ActiveDomain(slug=row.slug, owner_id=row.owner_id)


def get_by_owner(db: Session, owner_id: str) -> Optional[CustomDomain]:
    return db.query(CustomDomain).filter(CustomDomain.owner_id == owner_id).first()


def get_by_domain_excluding_owner(db: Session, domain: str, owner_id: str) -> Optional[CustomDomain]:
    return db.query(CustomDomain).filter(
        CustomDomain.domain == domain,
        CustomDomain.owner_id != owner_id,
    ).first()


def _apply_claim(record: CustomDomain, domain, status, verified_at, last_checked_at) -> None:
    record.domain = domain
    record.status = status
    record.verified_at = verified_at
    record.last_checked_at = last_checked_at


def upsert(
    db: Session,
    *,
    owner_id: str,
    domain: str,
    status: DomainStatus,
    verified_at: Optional[datetime],
    last_checked_at: Optional[datetime],
) -> CustomDomain:
    """
    Create or overwrite the owner's claim in a single commit.

    The unique constraint on ``domain`` turns the write into a conditional
    one: if another owner committed the same domain first, the commit fails
    and ``DomainTakenError`` is raised with nothing persisted. If the owner's
    own row was inserted concurrently, that row is updated instead. Any other
    integrity failure propagates.
    """
    record = get_by_owner(db, owner_id)
    if record is None:
        record = CustomDomain(owner_id=owner_id)
    _apply_claim(record, domain, status, verified_at, last_checked_at)
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if get_by_domain_excluding_owner(db, domain, owner_id) is not None:
            raise DomainTakenError(domain)
        existing = get_by_owner(db, owner_id)
        if existing is None or existing is record:
            raise
        logger.info("Claim for owner %s raced with itself; updating the stored row", owner_id)
        record = existing
        _apply_claim(record, domain, status, verified_at, last_checked_at)
        db.add(record)
        db.commit()
    db.refresh(record)
    return record


def record_check(db: Session, *, db_obj: CustomDomain, ok: bool, checked_at: datetime) -> CustomDomain:
    """Store a verification attempt; ``verified_at`` only moves on success."""
    db_obj.status = DomainStatus.ACTIVE if ok else DomainStatus.PENDING
    if ok:
        db_obj.verified_at = checked_at
    db_obj.last_checked_at = checked_at
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj
