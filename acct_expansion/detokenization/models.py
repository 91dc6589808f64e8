"""Wire models for the detokenization service.

The service accepts ``{"data_element": ..., "data": [...]}`` and answers
``{"encoding": ..., "results": [...], "success": ...}``. Python attribute
names follow the domain (``field_name``, ``values``); the aliases carry the
wire names.

Example:
    .. code-block:: python

        request = DetokenizeRequest(field_name="deACCOUNTNUM", values=["tok-123"])
        request.model_dump_json(by_alias=True)
        # '{"data_element":"deACCOUNTNUM","data":["tok-123"]}'
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import (
    CONTENT_TYPE_JSON,
    HDR_API_KEY,
    HDR_AUTHORIZATION,
    HDR_CONTENT_TYPE,
    HDR_ID_CLAIM,
)
from ..formatters import mask, mask_all, register_formatter


class DetokenizeRequest(BaseModel):
    """Tokens to resolve for one data element."""

    model_config = ConfigDict(populate_by_name=True)

    field_name: str = Field(alias="data_element", min_length=1, description="Data element naming the detokenization rule")
    values: List[str] = Field(alias="data", min_length=1, description="Tokens to resolve, in order")


class DetokenizeResponse(BaseModel):
    """Service answer. ``results`` are in the same order as the request ``values``.

    Neither ``success`` nor the length of ``results`` is checked here. Callers
    decide what those mean.
    """

    encoding: str
    results: List[str]
    success: str


class Credentials(BaseModel):
    """Identity sent with every request. Empty values are passed through as-is."""

    auth_token: str = ""
    api_key: str = ""
    id_claim: str = ""

    def headers(self) -> dict[str, str]:
        return {
            HDR_CONTENT_TYPE: CONTENT_TYPE_JSON,
            HDR_AUTHORIZATION: f"Bearer {self.auth_token}",
            HDR_API_KEY: self.api_key,
            HDR_ID_CLAIM: self.id_claim,
        }


class OutcomeKind(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNEXPECTED = "unexpected"


class ResponseOutcome(BaseModel):
    """Classification of one HTTP response.

    ``body`` is only kept for ``OK`` (to decode) and ``UNEXPECTED`` (for
    diagnostics).
    """

    kind: OutcomeKind
    status_code: int
    body: Optional[str] = None

    @classmethod
    def classify(cls, status_code: int, body: str) -> "ResponseOutcome":
        if status_code == 200:
            return cls(kind=OutcomeKind.OK, status_code=status_code, body=body)
        if status_code == 404:
            return cls(kind=OutcomeKind.NOT_FOUND, status_code=status_code)
        if status_code == 500:
            return cls(kind=OutcomeKind.SERVER_ERROR, status_code=status_code)
        return cls(kind=OutcomeKind.UNEXPECTED, status_code=status_code, body=body or None)


@register_formatter(DetokenizeRequest)
def _format_request(obj: DetokenizeRequest, redact: bool) -> dict[str, Any]:
    return {
        "object_type": "detokenize_request",
        "data_element": obj.field_name,
        "data": mask_all(obj.values, redact),
        "count": len(obj.values),
    }


@register_formatter(DetokenizeResponse)
def _format_response(obj: DetokenizeResponse, redact: bool) -> dict[str, Any]:
    return {
        "object_type": "detokenize_response",
        "encoding": obj.encoding,
        "success": obj.success,
        "results": mask_all(obj.results, redact),
        "count": len(obj.results),
    }


@register_formatter(Credentials)
def _format_credentials(obj: Credentials, redact: bool) -> dict[str, Any]:
    return {
        "object_type": "credentials",
        "auth_token": mask(obj.auth_token, redact),
        "api_key": mask(obj.api_key, redact),
        "id_claim": mask(obj.id_claim, redact),
    }
