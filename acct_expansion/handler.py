"""AWS Lambda entry point for account expansion.

Deployed behind an EventBridge rule. For each event the handler extracts the
tokenized account number from ``detail``, resolves it through the
detokenization service and logs the (redacted) outcome.

Lambda configuration::

    Handler: acct_expansion.handler.handler
    Environment:
        API_ENDPOINT: https://api.example.com
        AUTH_TOKEN:   <bearer token>
        API_KEY:      <api key>
        ID_CLAIM:     <identity claim>
        ENV:          dev | test | prod

Any failure is logged and re-raised so the invocation is reported as failed
to the runtime.
"""

from typing import Any, Optional

import httpx

from .detokenization import DetokenizeResponse, detokenize
from .event import extract_event, to_detokenize_request
from .exceptions import AcctExpansionError
from .log_context import LogContext
from .settings import Settings

_RUNTIME: Optional[tuple[Settings, LogContext]] = None


def get_runtime() -> tuple[Settings, LogContext]:
    """Settings and log context, built from the environment on first use (cold start)."""
    global _RUNTIME
    if _RUNTIME is None:
        settings = Settings.from_env()
        logger = LogContext(settings.log_level, redact=settings.log_redact)
        logger.debug("Runtime initialized", settings=settings)
        _RUNTIME = (settings, logger)
    return _RUNTIME


def process_event(
    event: Any,
    settings: Settings,
    logger: LogContext,
    transport: Optional[httpx.BaseTransport] = None,
) -> DetokenizeResponse:
    """Extract the account number from ``event`` and detokenize it.

    Raises:
        AcctExpansionError: Any extraction or detokenization failure.
    """
    inbound = extract_event(event, logger)
    request = to_detokenize_request(inbound)

    response = detokenize(
        settings.api_endpoint,
        request.field_name,
        request.values,
        credentials=settings.credentials(),
        logger=logger,
        transport=transport,
    )

    # Results are not validated against the request; a mismatch is only reported
    if len(response.results) != len(request.values):
        logger.warn(
            "Detokenization result count does not match request",
            expected=len(request.values),
            received=len(response.results),
        )

    logger.info("Detokenization request successful", response=response)
    return response


def handler(event: Any, context: Optional[Any] = None) -> None:
    """Lambda handler.

    Args:
        event: EventBridge event whose ``detail`` is ``{"accountNumber": "..."}``.
        context: Lambda context. ``aws_request_id`` is used as the correlation id.

    Raises:
        AcctExpansionError: The invocation failed; the runtime records the error.
    """
    settings, logger = get_runtime()
    logger.start(getattr(context, "aws_request_id", None))

    try:
        process_event(event, settings, logger)
    except AcctExpansionError as e:
        logger.error(f"Account expansion failed in {e.operation}", error=e)
        raise
