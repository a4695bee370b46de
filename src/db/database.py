"""SQLite engine setup and schema version bookkeeping."""

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from core.exceptions import ConfigurationError

from .schema import Base, ServiceMetadata

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.1.0"


def create_db_engine(db_path: str) -> Engine:
    """Engine shared by request threads; WAL lets readers run during a write."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def init_database(db_path: str) -> sessionmaker[Session]:
    """Create missing tables and return a session factory.

    A file written under another schema version is refused with
    ConfigurationError instead of being read with the wrong layout.
    """
    engine = create_db_engine(db_path)
    Base.metadata.create_all(engine)
    session_maker = sessionmaker(bind=engine, expire_on_commit=False)

    with session_maker() as session, session.begin():
        stored = session.get(ServiceMetadata, "schema_version")
        if stored is None:
            session.add(ServiceMetadata(key="schema_version", value=SCHEMA_VERSION))
            logger.info("Created ride database %s (schema %s)", db_path, SCHEMA_VERSION)
        elif stored.value != SCHEMA_VERSION:
            raise ConfigurationError(
                f"Database {db_path} uses schema {stored.value}, expected {SCHEMA_VERSION}",
                details={"path": db_path, "found": stored.value, "expected": SCHEMA_VERSION},
            )

    return session_maker
