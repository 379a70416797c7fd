import os

# CRITICAL: Set environment variables BEFORE any creator_crm imports.
# These must be set before creator_crm.config.settings is loaded.
os.environ["SECRET_KEY"] = "test-secret-key-1234567890"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["API_V1_STR"] = "/api"

import pytest
from sqlalchemy.orm import sessionmaker

from creator_crm import models  # noqa: F401  (registers tables on Base.metadata)
from creator_crm.database import Base, get_db
from creator_crm.database import engine as app_engine
from creator_crm.main import app
from creator_crm.services.session_scope import BusyKeys, SessionScope

# In-memory SQLite on a StaticPool: every session shares one connection.
TEST_ENGINE = app_engine

TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=TEST_ENGINE, future=True
)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function", autouse=True)
def setup_test_database():
    """Fresh schema per test; test-specific dependency overrides are undone."""
    saved_overrides = dict(app.dependency_overrides)

    Base.metadata.drop_all(bind=TEST_ENGINE)
    Base.metadata.create_all(bind=TEST_ENGINE)

    yield

    app.dependency_overrides.clear()
    app.dependency_overrides.update(saved_overrides)
    Base.metadata.drop_all(bind=TEST_ENGINE)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_scope(db_session):
    """SessionScope factory with its own busy-key registry."""

    def _make(user_id: str = "creator-1", **kwargs) -> SessionScope:
        kwargs.setdefault("busy", BusyKeys())
        return SessionScope(db_session, user_id=user_id, **kwargs)

    return _make


@pytest.fixture
def session_factory():
    return TestingSessionLocal
