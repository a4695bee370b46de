"""Unit-of-work helper shared by the SQLite repositories."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from core.exceptions import DuplicateIdError


@contextmanager
def session_scope(session_maker: sessionmaker[Session]) -> Iterator[Session]:
    """Open a session that commits on success and rolls back on error.

    A primary key collision at commit time is raised as DuplicateIdError.
    """
    with session_maker() as session:
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise DuplicateIdError(
                "Record already exists", details={"reason": str(e.orig)}
            ) from e
        except Exception:
            session.rollback()
            raise
