from typing import Optional, Sequence

import httpx
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError

from ..constants import DETOKENIZE_PATH
from ..exceptions import (
    ConfigError,
    DecodingError,
    EncodingError,
    NotFoundError,
    RequestBuildError,
    ServerError,
    TransportError,
    UnexpectedStatusError,
)
from ..formatters import truncate
from ..log_context import LogContext
from .models import (
    Credentials,
    DetokenizeRequest,
    DetokenizeResponse,
    OutcomeKind,
    ResponseOutcome,
)

OPERATION = "detokenize"


def resolve_endpoint(endpoint_base: str) -> str:
    """Join the service path onto the configured base URL.

    Raises:
        ConfigError: ``endpoint_base`` is empty.
    """
    if not endpoint_base or not endpoint_base.strip():
        raise ConfigError("API Endpoint is required in the environment variables", operation=OPERATION)
    return f"{endpoint_base.strip().rstrip('/')}{DETOKENIZE_PATH}"


def encode_request(field_name: str, values: Sequence[str]) -> tuple[DetokenizeRequest, bytes]:
    """Validate and serialize the request payload.

    Raises:
        EncodingError: Empty field name or values, a bare string instead of a sequence,
            non-string values, or a serialization failure.
    """
    if isinstance(values, (str, bytes, bytearray)):
        raise EncodingError("values must be a sequence of tokens, not a single string", operation=OPERATION, details={"data_element": field_name})
    try:
        request = DetokenizeRequest(field_name=field_name, values=list(values))
        return request, request.model_dump_json(by_alias=True).encode("utf-8")
    except (PydanticValidationError, PydanticSerializationError, TypeError) as e:
        raise EncodingError("error marshalling JSON payload", operation=OPERATION, details={"data_element": field_name}) from e


def build_request(client: httpx.Client, url: str, content: bytes, credentials: Credentials) -> httpx.Request:
    """Build the POST request. Only absolute http(s) URLs with a host are accepted.

    Raises:
        RequestBuildError: The URL is malformed or a header value cannot be encoded.
    """
    try:
        parsed = httpx.URL(url)
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ValueError(f"not an absolute http(s) URL: {url}")
        return client.build_request("POST", parsed, content=content, headers=credentials.headers())
    except (httpx.InvalidURL, ValueError) as e:
        raise RequestBuildError("error creating request", operation=OPERATION, details={"url": url}) from e


def detokenize(
    endpoint_base: str,
    field_name: str,
    values: Sequence[str],
    *,
    credentials: Optional[Credentials] = None,
    logger: Optional[LogContext] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> DetokenizeResponse:
    """Resolve ``values`` through the detokenization service.

    Exactly one POST is attempted. There is no timeout, no retry and no
    circuit breaker; the Lambda deadline is the only bound on the call. The
    HTTP client is opened for this call and closed before returning, whatever
    the outcome.

    Args:
        endpoint_base: Base URL of the service, e.g. ``https://api.example.com``.
        field_name: Data element naming the rule to apply (``deACCOUNTNUM``).
        values: Tokens to resolve.
        credentials: Identity headers. Empty values are sent as empty headers.
        logger: Log context. A default INFO context is used when omitted.
        transport: httpx transport override, used by tests.

    Returns:
        DetokenizeResponse: The decoded body of a 200 response. ``success`` and
        ``results`` are returned as received.

    Raises:
        ConfigError: ``endpoint_base`` is empty.
        EncodingError: The payload could not be built or serialized.
        RequestBuildError: The URL is malformed.
        TransportError: No response was received.
        NotFoundError: The service answered 404.
        ServerError: The service answered 500.
        UnexpectedStatusError: Any other non-200 status.
        DecodingError: A 200 body did not match :class:`DetokenizeResponse`.
    """
    logger = logger or LogContext()
    credentials = credentials or Credentials()

    try:
        url = resolve_endpoint(endpoint_base)
    except ConfigError:
        logger.error("API Endpoint is missing in the environment variables")
        raise

    try:
        request, content = encode_request(field_name, values)
    except EncodingError as e:
        logger.error("Error marshalling JSON payload", data_element=field_name, error=e)
        raise
    logger.info("Payload marshalled successfully", url=url, payload=request)

    with httpx.Client(transport=transport, timeout=None) as client:
        try:
            http_request = build_request(client, url, content, credentials)
        except RequestBuildError as e:
            logger.error("Error creating HTTP request", url=url, error=e)
            raise

        logger.debug("Dispatching HTTP request", request=http_request)
        try:
            http_response = client.send(http_request)
        except httpx.HTTPError as e:
            logger.error("Error sending HTTP request", url=url, error=e)
            raise TransportError("error making request", operation=OPERATION, details={"url": url}) from e

    logger.info("HTTP request sent successfully", url=url, status_code=http_response.status_code)

    outcome = ResponseOutcome.classify(http_response.status_code, http_response.text)
    _raise_for_outcome(outcome, url, logger)

    try:
        response = DetokenizeResponse.model_validate_json(outcome.body or "")
    except PydanticValidationError as e:
        logger.error("Error unmarshalling response", url=url, response=http_response, error=e)
        raise DecodingError("error unmarshalling response", operation=OPERATION, details={"url": url}) from e

    logger.info("Received API response successfully", url=url, response=response)
    return response


def _raise_for_outcome(outcome: ResponseOutcome, url: str, logger: LogContext) -> None:
    """Raise the error matching a non-OK outcome. Returns only for ``OutcomeKind.OK``."""
    code = outcome.status_code

    if outcome.kind is OutcomeKind.OK:
        logger.info("Received 200 OK response", status_code=code)
        return

    if outcome.kind is OutcomeKind.NOT_FOUND:
        logger.warn("Resource not found (404)", url=url, status_code=code)
        raise NotFoundError(f"resource not found (404) for URL: {url}", operation=OPERATION, status_code=code, details={"url": url})

    if outcome.kind is OutcomeKind.SERVER_ERROR:
        logger.error("Internal server error (500)", url=url, status_code=code)
        raise ServerError(f"internal server error (500) for URL: {url}", operation=OPERATION, status_code=code, details={"url": url})

    if outcome.kind is OutcomeKind.UNEXPECTED:
        message = f"Received unexpected response code: {code}"
        if outcome.body:
            logger.warn(message, url=url, status_code=code, response_body=truncate(outcome.body))
        else:
            logger.warn(message, url=url, status_code=code)
        raise UnexpectedStatusError(
            message,
            operation=OPERATION,
            status_code=code,
            body=outcome.body or "",
            details={"url": url},
        )

    raise AssertionError(f"Unhandled response outcome: {outcome.kind}")
