from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.config import settings


class InvalidTokenError(Exception):
    pass


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a token the way the platform's login service does (used by scripts/tests)."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=8))
    to_encode = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, *, verify_exp: bool = True) -> Dict[str, Any]:
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM],
            options={"verify_exp": verify_exp},
        )
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
    if not payload.get("sub"):
        raise InvalidTokenError("token without subject")
    return payload
