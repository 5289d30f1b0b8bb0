from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from db.config import get_config
from services.errors import PersistenceError

logger = logging.getLogger(__name__)

DATABASE_URL = get_config().database_url

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


@contextmanager
def atomic(session):
    """Run a block of statements as one unit of work.

    Commits when the block finishes and rolls back on any exception, so a
    balance update is never visible without the ledger rows that caused it.
    Database failures are re-raised as ``PersistenceError``.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Rolled back unit of work after database error")
        raise PersistenceError("Failed to save changes") from exc
    except Exception:
        session.rollback()
        raise


def init_db(bind=None) -> None:
    from db import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
