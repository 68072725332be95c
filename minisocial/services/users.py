from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from .. import models
from ..core.security import create_access_token, hash_password, verify_password
from ..database import commit
from ..errors import AlreadyExistsError, AuthError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def register_user(
    db: Session,
    username: str,
    password: str,
    full_name: str,
    email: str | None = None,
    bio: str = "",
) -> models.User:
    username = username.strip()
    if not username or not password:
        raise ValidationError("Username and password are required")

    clash = [models.User.username == username]
    if email:
        clash.append(models.User.email == email)
    if db.scalars(select(models.User).where(or_(*clash))).first() is not None:
        raise AlreadyExistsError("Username or email already exists")

    user = models.User(
        username=username,
        email=email,
        full_name=full_name,
        bio=bio or "",
        password_hash=hash_password(password),
    )
    db.add(user)
    commit(db, conflict_message="Username or email already exists")
    db.refresh(user)
    logger.info("registered user %s (%s)", user.id, user.username)
    return user


def authenticate(db: Session, username: str, password: str) -> tuple[models.User, str]:
    """Check credentials and issue an access token for the user."""
    user = db.scalars(select(models.User).where(models.User.username == username)).first()
    if user is None or not verify_password(password, user.password_hash):
        raise AuthError("Invalid username or password")
    return user, create_access_token(user.id, user.username)


def get_user(db: Session, user_id: int) -> models.User:
    user = db.get(models.User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_profile(
    db: Session, user_id: int, full_name: str | None = None, bio: str | None = None
) -> models.User:
    user = get_user(db, user_id)
    if full_name is not None:
        if not full_name.strip():
            raise ValidationError("Full name must not be empty")
        user.full_name = full_name
    if bio is not None:
        user.bio = bio
    commit(db)
    db.refresh(user)
    return user
