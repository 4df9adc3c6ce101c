"""
Structured JSON logging for the approval chain.

Every line is one JSON object: timestamp, level, logger and message, the
command-scoped fields held in ``LogContext`` (who is acting, on which
command and record), then any ``extra`` values the call site passed.
Workflow errors logged with ``exc_info`` carry their ``code`` and their
structured attributes (``exc_submission_id``, ``exc_field_name`` ...).

Only the ``works_kernel`` logger hierarchy is configured; the CLI and the
command facade obtain loggers through ``get_logger``.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

_EMPTY: Mapping[str, str] = MappingProxyType({})

_command_fields: ContextVar[Mapping[str, str]] = ContextVar(
    "works_log_fields", default=_EMPTY
)


class LogContext:
    """Command-scoped log fields, isolated per thread and per task.

    The fields live in one immutable mapping; every update swaps in a new
    mapping, so ``bind`` can restore the previous one on exit.
    """

    FIELDS = (
        "correlation_id",
        "actor_role",
        "actor_name",
        "submission_id",
        "command",
    )

    @classmethod
    def _merged(cls, updates: Mapping[str, str | None]) -> Mapping[str, str]:
        unknown = set(updates) - set(cls.FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
        merged = dict(_command_fields.get())
        merged.update({k: v for k, v in updates.items() if v is not None})
        return MappingProxyType(merged)

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set context fields.  ``None`` values leave a field unchanged."""
        _command_fields.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """The fields currently set, in ``FIELDS`` order."""
        current = _command_fields.get()
        return {name: current[name] for name in cls.FIELDS if name in current}

    @classmethod
    def clear(cls) -> None:
        _command_fields.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block."""
        token = _command_fields.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _command_fields.reset(token)


# ---------------------------------------------------------------------------
# JSON formatting
# ---------------------------------------------------------------------------

# Attributes every LogRecord has; anything else came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (tuple, frozenset, set)):
        return list(value)
    # Decimal and anything unexpected
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_ROOT_LOGGER = "works_kernel"

_setup_lock = threading.Lock()
_handler: logging.Handler | None = None


def get_logger(name: str) -> logging.Logger:
    """``works_kernel.<name>``; configured by ``configure_logging``."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the ``works_kernel`` logger.

    Only the first call takes effect until ``reset_logging``.  ``handler``
    replaces the default stream handler (``stream`` or stderr).
    """
    global _handler
    with _setup_lock:
        if _handler is not None:
            return
        _handler = handler if handler is not None else logging.StreamHandler(
            stream or sys.stderr
        )

    _handler.setFormatter(StructuredFormatter())
    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(_handler)


def reset_logging() -> None:
    """Detach handlers and restore defaults.  For tests."""
    global _handler
    with _setup_lock:
        _handler = None
    root = logging.getLogger(_ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
