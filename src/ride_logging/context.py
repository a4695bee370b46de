"""Per-thread fields attached to every log record of a ride operation."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


class LogContext:
    """Fields bound on the current thread, read by ContextFilter."""

    _local = threading.local()

    @classmethod
    def get(cls) -> dict[str, Any]:
        fields: dict[str, Any] | None = getattr(cls._local, "fields", None)
        if fields is None:
            fields = cls._local.fields = {}
        return fields

    @classmethod
    def snapshot(cls) -> dict[str, Any]:
        return dict(cls.get())

    @classmethod
    def replace(cls, fields: dict[str, Any]) -> None:
        cls._local.fields = dict(fields)

    @classmethod
    def clear(cls) -> None:
        cls._local.fields = {}


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind fields for the duration of the block.

    ``None`` values are skipped so an unassigned driver does not show up
    as ``driver_id=None``. The outer fields come back on exit.
    """
    previous = LogContext.snapshot()
    LogContext.get().update({k: v for k, v in fields.items() if v is not None})
    try:
        yield
    finally:
        LogContext.replace(previous)


@contextmanager
def log_ride_context(ride_id: str, **fields: Any) -> Iterator[None]:
    with log_context(ride_id=ride_id, **fields):
        yield
