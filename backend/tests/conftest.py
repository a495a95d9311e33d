import os

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

# Keep the import-time engine off the filesystem during tests.
os.environ.setdefault("DB_URL", "sqlite://")

from blog.database import create_db_and_tables, get_session, make_engine  # noqa: E402
from blog.sessions import SessionStore  # noqa: E402


@pytest.fixture()
def engine():
    """A fresh in-memory database per test."""
    eng = make_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def store():
    return SessionStore()


@pytest.fixture()
def app(engine, store):
    """The FastAPI app wired to the test database and session store."""
    from blog.auth import get_session_store
    from blog.main import app as fastapi_app

    def _session():
        with Session(engine) as session:
            yield session

    fastapi_app.dependency_overrides[get_session] = _session
    fastapi_app.dependency_overrides[get_session_store] = lambda: store
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def make_client(app):
    """Factory for independent clients, each with its own cookie jar."""
    from fastapi.testclient import TestClient

    def _make():
        return TestClient(app, follow_redirects=False)
    return _make


@pytest.fixture()
def client(make_client):
    return make_client()
