"""Failures raised while handling an account expansion event.

Every exception carries the ``operation`` that failed and a ``details`` dict
with the identifiers needed to debug it (URL, status code, ...). Causes are
chained with ``raise ... from`` so the original network or parsing error is
never lost.
"""

from typing import Any, Optional


class AcctExpansionError(Exception):
    """Base class for every failure of the handler."""

    def __init__(self, message: str, *, operation: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.operation}: {self.message}"


# Event extraction


class DecodeError(AcctExpansionError):
    """The event detail could not be parsed into the expected shape."""


class ValidationError(AcctExpansionError):
    """The event parsed, but a required value is empty or missing."""


# Detokenization call


class ConfigError(AcctExpansionError):
    """A required setting (the endpoint) was not supplied."""


class EncodingError(AcctExpansionError):
    """The request payload could not be serialized."""


class RequestBuildError(AcctExpansionError):
    """The HTTP request could not be constructed, usually a malformed URL."""


class TransportError(AcctExpansionError):
    """The request never produced a response (DNS, refused, TLS, ...)."""


class StatusError(AcctExpansionError):
    """The service answered with a status other than 200."""

    def __init__(self, message: str, *, operation: str, status_code: int, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, operation=operation, details={**(details or {}), "status_code": status_code})
        self.status_code = status_code


class NotFoundError(StatusError):
    """404 from the service. The body is discarded."""


class ServerError(StatusError):
    """500 from the service. The body is discarded."""


class UnexpectedStatusError(StatusError):
    """Any status outside 200/404/500. Keeps the body for diagnostics."""

    def __init__(self, message: str, *, operation: str, status_code: int, body: str = "", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, operation=operation, status_code=status_code, details=details)
        self.body = body


class DecodingError(AcctExpansionError):
    """A 200 response body was not valid JSON or did not match the response model."""
