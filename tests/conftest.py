# tests/conftest.py
# PURPOSE: create a TestClient and override DB dependency to use a temp SQLite file.

# Ensure project root is on sys.path so `import taskflow` works when running pytest.
import sys, os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Settings are read at import time; tests hammer the API far past the rate limit
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import tempfile
import pytest
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from taskflow.db import Base, make_engine  # DB metadata + engine factory (FKs on)
from taskflow import db_models  # noqa: F401  (registers tables)
from taskflow.main import app  # FastAPI app
from taskflow.store_db import get_db  # original dependency to override


@pytest.fixture()
def session_factory():
    # 1) Create a temporary SQLite file (so data is isolated per test)
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()

    # 2) New engine/session factory for tests; make_engine turns FK cascades on
    engine = make_engine(f"sqlite:///{tmp.name}")
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # 3) Create tables for tests
    Base.metadata.create_all(bind=engine)

    yield TestingSessionLocal

    # Cleanup: drop tables, dispose engine, delete temp file
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    os.unlink(tmp.name)


@pytest.fixture()
def override_db(session_factory):
    """Point the app's get_db dependency at the temp database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(override_db):
    # Context manager ensures proper startup/shutdown
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db(session_factory):
    """A direct session on the same temp database, for asserting on rows."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def anyio_backend():
    return "asyncio"
