from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from ..database import MAX_ROW_ID
from ..errors import AuthError
from .config import get_settings


@lru_cache()
def _pwd_context() -> CryptContext:
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=get_settings().PASSWORD_HASH_ROUNDS,
    )


def hash_password(password: str) -> str:
    return _pwd_context().hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _pwd_context().verify(plain_password, hashed_password)


def create_access_token(user_id: int, username: str, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "username": username,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry, returning the claim set.

    Raises AuthError for any token that cannot be trusted.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid token") from exc

    subject = claims.get("sub")
    if not subject or not str(subject).isdigit():
        raise AuthError("Token missing subject")
    if not 1 <= int(subject) <= MAX_ROW_ID:
        raise AuthError("Token subject out of range")
    return claims
