"""Logging context handed to every component of the handler.

A :class:`LogContext` is built once at cold start from
:class:`~acct_expansion.settings.Settings` and passed down explicitly. It
owns the verbosity level and the redaction switch, so nothing mutates a
process-wide level at import time.

Records go to ``core_logging`` in its usual shape::

    log.info("HTTP request sent successfully", details={"status_code": 200})

Keyword arguments given to :meth:`LogContext.info` (and friends) become the
``details`` dict after running through :func:`~acct_expansion.formatters.format_details`.
"""

from enum import Enum
from typing import Any, Optional

import core_logging as log

from .constants import LOG_IDENTITY
from .formatters import format_details


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]

    @classmethod
    def parse(cls, value: Any) -> "LogLevel":
        """Accept enum members or case-insensitive names, including ``WARN``."""
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        if name == "WARN":
            name = "WARNING"
        try:
            return cls(name)
        except ValueError as e:
            raise ValueError(f"Unsupported log level '{value}'") from e


_LEVEL_RANKS = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARNING: 30,
    LogLevel.ERROR: 40,
}


class LogContext:
    """Level-gated, redacting front end to a ``core_logging`` style sink.

    Args:
        level: Records below this level are dropped.
        redact: Mask sensitive values in details.
        identity: Identity registered with the sink by :meth:`start`.
        sink: Object exposing ``debug``/``info``/``warn``/``error`` that accept
            ``details=``. Defaults to the ``core_logging`` module.
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        *,
        redact: bool = True,
        identity: str = LOG_IDENTITY,
        sink: Any = None,
    ) -> None:
        self.level = LogLevel.parse(level)
        self.redact = redact
        self.identity = identity
        self.sink = sink if sink is not None else log

    def start(self, correlation_id: Optional[str] = None) -> None:
        """Tag subsequent records with the identity and, if given, the invocation's correlation id."""
        self.sink.set_identity(self.identity)
        if correlation_id:
            self.sink.set_correlation_id(correlation_id)

    def enabled(self, level: LogLevel) -> bool:
        return level.rank >= self.level.rank

    def debug(self, message: str, **details: Any) -> None:
        self._emit(LogLevel.DEBUG, "debug", message, details)

    def info(self, message: str, **details: Any) -> None:
        self._emit(LogLevel.INFO, "info", message, details)

    def warn(self, message: str, **details: Any) -> None:
        self._emit(LogLevel.WARNING, "warn", message, details)

    def error(self, message: str, **details: Any) -> None:
        self._emit(LogLevel.ERROR, "error", message, details)

    def _emit(self, level: LogLevel, method: str, message: str, details: dict[str, Any]) -> None:
        if not self.enabled(level):
            return
        getattr(self.sink, method)(message, details=format_details(details, self.redact))
