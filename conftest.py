import os

# Must be set before the app modules build their engine
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_TIMEZONE", "UTC")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

import models  # noqa: F401
from core.access import CallerRole
from core.deps import get_current_caller
from db.session import get_session, make_engine
from main import app

MANAGER = {"uid": "mgr-1", "email": "boss@example.com", "role": CallerRole.MANAGER}
WORKER = {"uid": "worker-1", "email": "ann@example.com", "role": CallerRole.WORKER}
OTHER_WORKER = {"uid": "worker-2", "email": "bob@example.com", "role": CallerRole.WORKER}


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client_for(engine):
    """Build a TestClient bound to the test database, acting as ``caller``."""

    def override_session():
        with Session(engine) as session:
            yield session

    def _make(caller=None, **client_kwargs):
        app.dependency_overrides[get_session] = override_session
        if caller is not None:
            app.dependency_overrides[get_current_caller] = lambda: caller
        else:
            app.dependency_overrides.pop(get_current_caller, None)
        return TestClient(app, **client_kwargs)

    yield _make
    app.dependency_overrides.clear()
