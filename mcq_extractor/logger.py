"""Structured logging utilities for mcq-extractor.

Log lines carry ``[key=value, ...]`` fields. Fields bound with
:func:`log_context` (the document id for a whole run, the page number while
a page is processed) are appended to every line emitted inside the block.
"""

import logging
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Optional

_bound_fields: ContextVar[dict[str, Any]] = ContextVar("log_fields", default={})


class ContextLogger:
    """Logger wrapper that appends call-site and bound fields to messages."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @staticmethod
    def _fields(extra_data: Optional[dict[str, Any]]) -> dict[str, Any]:
        fields = dict(extra_data or {})
        for key, value in _bound_fields.get().items():
            fields.setdefault(key, value)
        return fields

    def _log(self, level: int, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        if not self.logger.isEnabledFor(level):
            return
        fields = self._fields(extra_data)
        if fields:
            msg += " [" + ", ".join(f"{k}={v}" for k, v in fields.items()) + "]"
        self.logger.log(level, msg, **kwargs)

    def debug(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        self._log(logging.DEBUG, msg, extra_data, **kwargs)

    def info(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        self._log(logging.INFO, msg, extra_data, **kwargs)

    def warning(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        self._log(logging.WARNING, msg, extra_data, **kwargs)

    def error(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        self._log(logging.ERROR, msg, extra_data, **kwargs)


def setup_logging(log_level: str = "INFO") -> None:
    """Send mcq-extractor logs to stdout at ``log_level``.

    Only the ``mcq_extractor`` logger tree is configured; handlers installed
    by the host application on the root logger are left alone.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    package_logger = logging.getLogger("mcq_extractor")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger instance (typically for ``__name__``)."""
    return ContextLogger(logging.getLogger(name))


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind ``fields`` to every log line emitted inside the block."""
    token = _bound_fields.set({**_bound_fields.get(), **fields})
    try:
        yield
    finally:
        _bound_fields.reset(token)


@contextmanager
def document_context(document_id: Optional[str] = None) -> Iterator[str]:
    """Tag log lines with a document id for the duration of one run.

    Args:
        document_id: Optional id. If not provided, a short random id is generated.

    Yields:
        The document id that was bound
    """
    if document_id is None:
        document_id = uuid.uuid4().hex[:12]
    with log_context(document_id=document_id):
        yield document_id


class Timer:
    """Context manager measuring elapsed wall time in milliseconds."""

    def __init__(self, name: str):
        self.name = name
        self.start_time: Optional[float] = None
        self.elapsed_ms: Optional[int] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        if self.start_time is not None:
            self.elapsed_ms = int((time.perf_counter() - self.start_time) * 1000)

    def get_elapsed_ms(self) -> int:
        """Elapsed time so far, or the final time once the block exited."""
        if self.elapsed_ms is not None:
            return self.elapsed_ms
        if self.start_time is not None:
            return int((time.perf_counter() - self.start_time) * 1000)
        return 0
