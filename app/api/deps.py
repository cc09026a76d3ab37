from typing import Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import settings
from app.core.security import InvalidTokenError, decode_access_token
from app.crud import crud_custom_domain
from app.db import session as db_session
from app.logging_config import broker_id_ctx
from app.models.broker import BrokerProfile

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_owner_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Platform user id from the bearer token issued by the login service."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Não autenticado")
    try:
        payload = decode_access_token(credentials.credentials)
    except InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Não autenticado")
    owner_id = str(payload["sub"])
    broker_id_ctx.set(owner_id)
    return owner_id


def get_current_broker(
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
) -> BrokerProfile:
    broker = crud_custom_domain.get_broker_by_owner(db, owner_id)
    if broker is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Perfil de corretor não encontrado")
    return broker


def require_custom_domain_plan(
    broker: BrokerProfile = Depends(get_current_broker),
) -> BrokerProfile:
    if (broker.plan or "").upper() not in settings.custom_domain_plans:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Plano necessário")
    return broker
