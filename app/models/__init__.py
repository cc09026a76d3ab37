from app.db.base_class import Base
from app.models.broker import BrokerProfile
from app.models.custom_domain import CustomDomain, DomainStatus
