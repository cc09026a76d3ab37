"""
Custom Domain Model

One row per broker with a claimed domain and its DNS verification status.
"""
import enum
import uuid
from sqlalchemy import Column, String, DateTime, Enum, Uuid, func
from app.db.base_class import Base


class DomainStatus(str, enum.Enum):
    PENDING = "PENDENTE"
    ACTIVE = "ATIVO"


class CustomDomain(Base):
    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    owner_id = Column(String(64), unique=True, nullable=False, index=True)
    # Normalized hostname; unique so concurrent claims cannot both be written
    domain = Column(String(253), unique=True, nullable=False, index=True)

    status = Column(
        Enum(DomainStatus, name="domain_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DomainStatus.PENDING,
    )
    verified_at = Column(DateTime(timezone=True), nullable=True)       # last successful check
    last_checked_at = Column(DateTime(timezone=True), nullable=True)   # last attempt

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
