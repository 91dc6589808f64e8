"""Extraction of the account number from an EventBridge (CloudWatch) event.

The Lambda runtime hands the handler the event as a dict::

    {
        "version": "0",
        "id": "6a7e8feb-b491-4cf7-a9f1-bf3703467718",
        "detail-type": "Account Expansion Requested",
        "source": "acct.tokenized",
        "account": "111122223333",
        "time": "2024-10-01T17:22:44Z",
        "region": "us-east-1",
        "resources": [],
        "detail": {"accountNumber": "tok-4111111111111111"}
    }

Only ``detail`` matters here. It may be a JSON object or a JSON-encoded
string. Anything that does not decode to ``{"accountNumber": str}`` is a
:class:`DecodeError`; an empty or missing account number is a
:class:`ValidationError`.
"""

import json
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic import ValidationError as PydanticValidationError

from .constants import DATA_ELEMENT
from .detokenization.models import DetokenizeRequest
from .exceptions import DecodeError, ValidationError
from .formatters import format_value, mask, register_formatter
from .log_context import LogContext

OPERATION = "extract_event"


class CloudWatchEvent(BaseModel):
    """EventBridge envelope. Everything but ``detail`` is informational."""

    model_config = ConfigDict(populate_by_name=True)

    version: Optional[str] = None
    id: Optional[str] = None
    detail_type: Optional[str] = Field(None, alias="detail-type")
    source: Optional[str] = None
    account: Optional[str] = None
    time: Optional[str] = None
    region: Optional[str] = None
    resources: List[str] = Field(default_factory=list)
    detail: Any = None


class InboundEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    account_number: Optional[StrictStr] = Field(None, alias="accountNumber")


def _decode_detail(detail: Any) -> Any:
    if isinstance(detail, (str, bytes, bytearray)):
        return json.loads(detail)
    return detail


def extract_event(event: Any, logger: LogContext) -> InboundEvent:
    """Decode the event detail into an :class:`InboundEvent`.

    Args:
        event: Raw event as delivered by the Lambda runtime.
        logger: Log context for diagnostics.

    Returns:
        InboundEvent: With a non-empty ``account_number``.

    Raises:
        DecodeError: The event or its detail is not shaped as expected.
        ValidationError: ``accountNumber`` is missing or empty.
    """
    if not isinstance(event, dict):
        logger.error("Event is not a structured document", event_type=type(event).__name__)
        raise DecodeError(f"expected a JSON object event, got {type(event).__name__}", operation=OPERATION)

    try:
        envelope = CloudWatchEvent.model_validate(event)
    except PydanticValidationError as e:
        logger.error("Error unmarshalling event envelope", error=e)
        raise DecodeError("failed to unmarshal event", operation=OPERATION) from e

    logger.debug("Received following event", event=envelope)

    try:
        detail = _decode_detail(envelope.detail)
    except ValueError as e:
        logger.error("Error unmarshalling event detail", error=e)
        raise DecodeError("failed to unmarshal event detail", operation=OPERATION) from e

    if not isinstance(detail, dict):
        logger.error("Event detail is not an object", detail_type=type(detail).__name__)
        raise DecodeError(
            "failed to unmarshal event detail",
            operation=OPERATION,
            details={"event_id": envelope.id, "detail_type": type(detail).__name__},
        )

    try:
        inbound = InboundEvent.model_validate(detail)
    except PydanticValidationError as e:
        logger.error("Error unmarshalling event detail", event_id=envelope.id, error=e)
        raise DecodeError("failed to unmarshal event detail", operation=OPERATION, details={"event_id": envelope.id}) from e

    if not inbound.account_number:
        logger.error("AccountNumber is missing in the event data", event_id=envelope.id)
        raise ValidationError("AccountNumber is required in the event data", operation=OPERATION, details={"event_id": envelope.id})

    return inbound


def to_detokenize_request(inbound: InboundEvent, field_name: str = DATA_ELEMENT) -> DetokenizeRequest:
    return DetokenizeRequest(field_name=field_name, values=[inbound.account_number])


@register_formatter(InboundEvent)
def _format_inbound(obj: InboundEvent, redact: bool) -> dict[str, Any]:
    return {"object_type": "inbound_event", "accountNumber": mask(obj.account_number, redact)}


@register_formatter(CloudWatchEvent)
def _format_envelope(obj: CloudWatchEvent, redact: bool) -> dict[str, Any]:
    data = {"object_type": "cloudwatch_event", **format_value(obj.model_dump(by_alias=True, exclude={"detail"}), redact)}
    try:
        detail = _decode_detail(obj.detail)
    except ValueError:
        detail = obj.detail
    # scalars and undecodable text may be the account number itself
    if not isinstance(detail, dict):
        detail = mask(detail, redact)
    data["detail"] = format_value(detail, redact)
    return data
