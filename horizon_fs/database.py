"""Database configuration and scoped session management."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .core.config import settings
from .exceptions import AlreadyExistsError, DatabaseError

logger = logging.getLogger(__name__)


def create_db_engine(url: str, **kwargs) -> Engine:
    """Create an engine with database-specific tuning."""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.database_echo,
            **kwargs
        )

        # SQLite defaults foreign_keys to OFF; enable it on every connection.
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        # Detects stale connections before use.
        pool_pre_ping=True,
        echo=settings.database_echo,
        **kwargs
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    # Rows handed back by the services outlive their session.
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


engine = create_db_engine(settings.database_url)

read_only_database_url = settings.get_read_only_database_url()
if read_only_database_url != settings.database_url:
    read_only_engine = create_db_engine(read_only_database_url)
else:
    read_only_engine = engine

SessionLocal = create_session_factory(engine)
ReadOnlySessionLocal = create_session_factory(read_only_engine)

# Create base class for models
Base = declarative_base()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create every filesystem table that does not exist yet."""
    from . import models  # noqa: F401  (registers the mappers on Base)

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("Database schema ready", extra={"url": target.url.render_as_string(hide_password=True)})


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None, read_only: bool = False) -> Iterator[Session]:
    """Provide one session for the duration of a store operation.

    Read-write scopes commit on success. Every scope rolls back on failure
    and closes on all paths. Unique constraint violations surface as
    AlreadyExistsError, any other SQLAlchemy failure as DatabaseError.
    """
    if factory is None:
        factory = ReadOnlySessionLocal if read_only else SessionLocal

    db = factory()
    try:
        yield db
        if not read_only:
            db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity violation: %s", e.orig)
        raise AlreadyExistsError(original_error=e.orig) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database operation failed", exc_info=True)
        raise DatabaseError("Database operation failed", original_error=e) from e
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
