"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from
`settings.DB_URL` (a local SQLite file `blog.db` next to the package by
default) and provides small helpers used by the application and tests.
"""

from sqlmodel import SQLModel, create_engine, Session

from .config import settings


def make_engine(db_url: str, **kwargs):
    """Create an engine, adding the SQLite thread flag where needed.

    One engine is shared by all request threads, so SQLite connections
    must be allowed to cross threads.
    """
    connect_args = kwargs.pop("connect_args", {})
    if db_url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)
    return create_engine(db_url, echo=False, connect_args=connect_args, **kwargs)


engine = make_engine(settings.DB_URL)


def create_db_and_tables(bind=None):
    """Create database tables using SQLModel metadata.

    This function is intended for local development and tests;
    production deployments should rely on a proper migration tool
    (alembic) instead.
    """
    from . import models  # noqa: F401  registers the tables on the metadata

    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
