"""Dependency injection utilities."""
from collections.abc import Generator

from sqlmodel import Session

from .domain.policy import CallerContext
from .infra.db import get_session


def db_session() -> Generator[Session, None, None]:
    """Provide a scoped DB session to FastAPI endpoints."""
    with get_session() as session:
        yield session


def asserted_caller(subject_id: object, role: str) -> CallerContext:
    """Build the caller context from a client-asserted id.

    There is no authentication yet: the asserted id is trusted as-is. An auth
    layer replaces this function without touching the services.
    """
    return CallerContext(subject_id=str(subject_id), role=role)
