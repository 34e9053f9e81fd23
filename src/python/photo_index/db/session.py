"""Database engine and session management.

Engines and session factories are created explicitly and passed to the
components that need them; nothing here is process-global.
"""

from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker

from photo_index.db.models import Base


def create_catalog_engine(uri: str, echo: bool = False) -> Engine:
    """Create the engine for a catalog database URI.

    Example:
        >>> engine = create_catalog_engine("sqlite:///photo_index.db")
    """
    engine = create_engine(uri, echo=echo)

    if make_url(uri).drivername.startswith("sqlite"):
        # pysqlite defers BEGIN on its own, which breaks SAVEPOINTs; let
        # SQLAlchemy emit BEGIN instead.
        @event.listens_for(engine, "connect")
        def _configure_sqlite(dbapi_connection: Any, connection_record: Any) -> None:
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys = ON")
            finally:
                cursor.close()

        @event.listens_for(engine, "begin")
        def _begin_sqlite(connection: Any) -> None:
            connection.exec_driver_sql("BEGIN")

    return engine


def create_schema(engine: Engine) -> None:
    """Create all catalog tables that do not exist yet."""
    Base.metadata.create_all(engine)


def make_session_factory(engine: Engine) -> sessionmaker:
    # Objects stay usable after commit; the indexer keeps working with them
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Provide a transactional scope for database operations.

    Commits on success, rolls back on exception, always closes.

    Example:
        >>> with session_scope(factory) as session:
        ...     store = CatalogStore(session)
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
