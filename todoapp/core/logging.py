"""Logging setup and the trace id attached to every record."""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

TRACE_ID_HEADER = "TraceID"

LOG_FORMAT = (
    "%(asctime)s [%(levelname)s] %(name)s - %(filename)s:%(lineno)d - "
    "%(message)s trace_id=%(trace_id)s"
)

_CURRENT_TRACE_ID: ContextVar[Optional[str]] = ContextVar("todoapp_trace_id", default=None)


def get_trace_id() -> Optional[str]:
    return _CURRENT_TRACE_ID.get()


def new_trace_id() -> str:
    return str(uuid.uuid4())


def coerce_trace_id(value: str | None) -> str:
    """Keep a caller supplied trace id only when it parses as a UUID."""
    try:
        return str(uuid.UUID((value or "").strip()))
    except ValueError:
        return new_trace_id()


@contextmanager
def bind_trace_id(trace_id: str) -> Iterator[str]:
    token = _CURRENT_TRACE_ID.set(trace_id)
    try:
        yield trace_id
    finally:
        _CURRENT_TRACE_ID.reset(token)


class TraceIdFilter(logging.Filter):
    """Copy the current trace id onto the record (``-`` outside a trace)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "trace_id", None):
            record.trace_id = get_trace_id() or "-"
        return True


def setup_logging(level: str | int = "INFO") -> None:
    """Configure the ``todoapp`` logger once; later calls only adjust the level."""
    logger = logging.getLogger("todoapp")
    logger.setLevel(level)
    if any(isinstance(h, logging.StreamHandler) and getattr(h, "_todoapp", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(TraceIdFilter())
    handler._todoapp = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
