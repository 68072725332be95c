from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .core.config import get_settings
from .errors import ConflictError, StorageError

logger = logging.getLogger(__name__)

DATABASE_URL = get_settings().DATABASE_URL

# SQLite needs check_same_thread disabled for multithreaded FastAPI dev server.
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Largest id a signed 64-bit integer column can hold.
MAX_ROW_ID = 2**63 - 1


def _is_unique_violation(exc: IntegrityError) -> bool:
    # psycopg reports SQLSTATE 23505; SQLite and others only say so in the message.
    if getattr(exc.orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(exc.orig).lower()


def commit(db: Session, conflict_message: str = "Record already exists") -> None:
    """Commit the unit of work, rolling everything back on failure.

    Unique-constraint violations surface as ``ConflictError``; any other
    rejected or failed write surfaces as ``StorageError``.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if _is_unique_violation(exc):
            logger.warning("unique violation rolled back: %s", exc.orig)
            raise ConflictError(conflict_message) from exc
        logger.error("integrity violation rolled back: %s", exc.orig)
        raise StorageError("Write rejected by storage") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("storage failure rolled back: %s", exc)
        raise StorageError("Storage unavailable, please retry") from exc
