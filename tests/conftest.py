"""Shared test fixtures for the horizon-fs test suite.

Every test gets a fresh in-memory SQLite database. A StaticPool keeps the
single in-memory connection alive across sessions, so the services under
test (which open and close their own sessions) and the assertions all see
the same data.

Repository tests use the ``db`` session directly; service tests go through
the service fixtures. Don't mix writes from both in one test: closing a
service session resets the shared connection.
"""

import os

# Point the module-level engine at a throwaway database before any imports.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FORMAT"] = "text"
os.environ.pop("READ_ONLY_DATABASE_URL", None)

import pytest
from sqlalchemy.pool import StaticPool

from horizon_fs import models  # noqa: F401  (registers the tables)
from horizon_fs.database import Base, create_db_engine, create_session_factory
from horizon_fs.services import ContentService, FolderService


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    """A plain session for repository tests; rolled back afterwards."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def content_service(session_factory):
    return ContentService(session_factory, session_factory, compress_content=True)


@pytest.fixture
def folder_service(session_factory, content_service):
    return FolderService(session_factory, session_factory, content_service=content_service)
