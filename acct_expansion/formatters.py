"""Formatting of log details by payload type.

Values handed to :class:`~acct_expansion.log_context.LogContext` are passed
through :func:`format_value` before they reach the log sink. The formatter
for a value is found by walking its type's MRO in a single registry, so one
registration covers a type and all of its subclasses.

Domain modules register their own types next to where they are defined:

.. code-block:: python

    @register_formatter(DetokenizeRequest)
    def _format_request(obj: DetokenizeRequest, redact: bool) -> dict:
        return {"object_type": "detokenize_request", "data": mask_all(obj.values, redact)}

Every formatter returns a dict labelled with ``object_type``. With ``redact``
on, sensitive values are masked down to their last four characters.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .constants import HDR_API_KEY, HDR_AUTHORIZATION, HDR_ID_CLAIM, MAX_LOGGED_BODY

Formatter = Callable[[Any, bool], dict[str, Any]]

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Keys masked wherever they show up inside plain dicts
SENSITIVE_KEYS = {"accountNumber", "account_number"}

SENSITIVE_HEADERS = {HDR_AUTHORIZATION.lower(), HDR_API_KEY, HDR_ID_CLAIM}

_formatters: dict[type, Formatter] = {}


def register_formatter(obj_type: type) -> Callable[[Formatter], Formatter]:
    """Register the decorated function as the formatter for ``obj_type``."""

    def decorator(func: Formatter) -> Formatter:
        _formatters[obj_type] = func
        return func

    return decorator


def get_formatter(obj_type: type) -> Optional[Formatter]:
    for klass in obj_type.__mro__:
        formatter = _formatters.get(klass)
        if formatter is not None:
            return formatter
    return None


def mask(value: Any, redact: bool = True) -> Any:
    """Keep the last four characters. Non-string values are masked by their text."""
    if not redact or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return mask_all(value, redact)
    if not isinstance(value, str):
        value = str(value)
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


def mask_all(values: Iterable[Any], redact: bool = True) -> list[Any]:
    return [mask(v, redact) for v in values]


def truncate(text: str, limit: int = MAX_LOGGED_BODY) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text) - limit} more characters)"


def format_value(obj: Any, redact: bool = True) -> Any:
    """Format one log value. Unregistered scalars are returned unchanged."""
    formatter = get_formatter(type(obj))
    if formatter is not None:
        return formatter(obj, redact)
    if isinstance(obj, dict):
        return {
            k: mask(v, redact) if k in SENSITIVE_KEYS else format_value(v, redact)
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [format_value(v, redact) for v in obj]
    return obj


def format_details(details: dict[str, Any], redact: bool = True) -> dict[str, Any]:
    return {key: format_value(value, redact) for key, value in details.items()}


def format_headers(headers: httpx.Headers, redact: bool = True) -> dict[str, str]:
    return {k: mask(v, redact) if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


@register_formatter(BaseModel)
def _format_model(obj: BaseModel, redact: bool) -> dict[str, Any]:
    return {"object_type": type(obj).__name__, **format_value(obj.model_dump(), redact)}


@register_formatter(Exception)
def _format_exception(obj: Exception, redact: bool) -> dict[str, Any]:
    data: dict[str, Any] = {"object_type": "error", "type": type(obj).__name__, "message": str(obj)}
    operation = getattr(obj, "operation", None)
    if operation:
        data["operation"] = operation
    details = getattr(obj, "details", None)
    if isinstance(details, dict) and details:
        data["details"] = format_value(details, redact)
    cause = obj.__cause__
    if isinstance(cause, PydanticValidationError) and redact:
        data["cause"] = format_value(cause, redact)
    elif cause is not None:
        data["cause"] = f"{type(cause).__name__}: {cause}"
    return data


@register_formatter(PydanticValidationError)
def _format_validation_error(obj: PydanticValidationError, redact: bool) -> dict[str, Any]:
    """Summarize a pydantic error. Its text echoes the rejected input, so only the error list is kept."""
    data: dict[str, Any] = {
        "object_type": "validation_error",
        "type": type(obj).__name__,
        "title": obj.title,
        "error_count": obj.error_count(),
        "errors": [
            {"type": err["type"], "loc": list(err["loc"]), "msg": err["msg"]}
            for err in obj.errors(include_url=False, include_context=False, include_input=False)
        ],
    }
    if not redact:
        data["message"] = str(obj)
    return data


@register_formatter(datetime)
def _format_time(obj: datetime, redact: bool) -> dict[str, Any]:
    if obj.tzinfo is not None:
        obj = obj.astimezone(timezone.utc)
    return {"object_type": "time", "value": obj.strftime(TIME_FORMAT)}


@register_formatter(httpx.Request)
def _format_http_request(obj: httpx.Request, redact: bool) -> dict[str, Any]:
    return {
        "object_type": "http_request",
        "method": obj.method,
        "url": str(obj.url),
        "headers": format_headers(obj.headers, redact),
    }


@register_formatter(httpx.Response)
def _format_http_response(obj: httpx.Response, redact: bool) -> dict[str, Any]:
    data: dict[str, Any] = {"object_type": "http_response", "status_code": obj.status_code}
    try:
        data["url"] = str(obj.request.url)
    except RuntimeError:
        # response was built without a request
        pass
    # a 200 body holds detokenized values
    if obj.status_code != 200 or not redact:
        data["body"] = truncate(obj.text)
    else:
        data["body_length"] = len(obj.content)
    return data
