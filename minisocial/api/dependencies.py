from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Path
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .. import models
from ..core.security import decode_access_token
from ..database import MAX_ROW_ID, get_db
from ..errors import AuthError

DbSession = Annotated[Session, Depends(get_db)]
RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]

bearer_scheme = HTTPBearer(auto_error=False)
Credentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


def _user_from_credentials(db: Session, credentials: HTTPAuthorizationCredentials) -> models.User:
    claims = decode_access_token(credentials.credentials)
    user = db.get(models.User, int(claims["sub"]))
    if user is None:
        raise AuthError("User for this token no longer exists")
    return user


def get_current_user(db: DbSession, credentials: Credentials) -> models.User:
    if credentials is None:
        raise AuthError("Missing bearer token")
    return _user_from_credentials(db, credentials)


def get_optional_user(db: DbSession, credentials: Credentials) -> Optional[models.User]:
    if credentials is None:
        return None
    return _user_from_credentials(db, credentials)


CurrentUser = Annotated[models.User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[models.User], Depends(get_optional_user)]
