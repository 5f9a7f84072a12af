"""Database session utilities."""
from contextlib import contextmanager
import logging
import time
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session

from ..config import settings
from ..domain import models  # noqa: F401  registers tables on SQLModel.metadata

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty db
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, future=True, **kwargs)
    return create_engine(database_url, echo=False, future=True)


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    class_=Session,
)


def init_db(bind_engine: Optional[Engine] = None) -> None:
    """Create tables if they do not exist.

    Retries on startup to wait for a database service that is still booting.
    """
    target_engine = bind_engine or engine
    attempts = 0
    last_err: Exception | None = None
    while attempts < 30:
        try:
            SQLModel.metadata.create_all(target_engine)
            return
        except Exception as exc:  # pragma: no cover
            last_err = exc
            attempts += 1
            logger.warning("waiting for database... (%d/30) %s", attempts, exc)
            time.sleep(1)
    if last_err:
        raise last_err


def reset_db(bind_engine: Optional[Engine] = None) -> None:
    """Drop and recreate every table. Used by tests and the seed script."""
    target_engine = bind_engine or engine
    SQLModel.metadata.drop_all(target_engine)
    SQLModel.metadata.create_all(target_engine)


@contextmanager
def get_session() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
