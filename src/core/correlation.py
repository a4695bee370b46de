"""Request correlation ids carried through log records."""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

MAX_CORRELATION_ID_LENGTH = 128

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def normalize_correlation_id(candidate: str | None) -> str:
    """The caller's id when it is short printable text, otherwise a fresh UUID4."""
    value = (candidate or "").strip()
    if not value or len(value) > MAX_CORRELATION_ID_LENGTH or not value.isprintable():
        return str(uuid4())
    return value


@contextmanager
def with_correlation(correlation_id: str) -> Iterator[str]:
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


def get_current_correlation_id() -> str | None:
    return _correlation_id.get()
