import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("CANON_UPLOADS_DIR", tempfile.mkdtemp(prefix="canon-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from canonhealth.app.infra.db import reset_db
from canonhealth.app.main import app
from canonhealth.app.services.identity import IdentityDirectory


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as db:
        yield db


@pytest.fixture
def directory(session):
    return IdentityDirectory(session)


@pytest.fixture
def patient(directory):
    return directory.resolve_or_create("patient", "Pat Lee", "pat@example.com", "HC1")


@pytest.fixture
def doctor(directory):
    return directory.resolve_or_create("doctor", "Dr. House", "house@example.com")


@pytest.fixture
def client():
    reset_db()
    with TestClient(app) as test_client:
        yield test_client
