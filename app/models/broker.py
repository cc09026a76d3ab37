import uuid
from sqlalchemy import Column, String, DateTime, Uuid, func
from app.db.base_class import Base


class BrokerProfile(Base):
    """Public storefront of a broker, served under /corretor/<slug>."""

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    owner_id = Column(String(64), unique=True, nullable=False, index=True)   # platform user id
    slug = Column(String(120), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    plan = Column(String(20), nullable=False, default="GRATUITO")            # GRATUITO, BASICO, EXPERT

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
