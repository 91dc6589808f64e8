"""Client for the remote detokenization (unprotect) service."""

from .client import detokenize, resolve_endpoint
from .models import (
    Credentials,
    DetokenizeRequest,
    DetokenizeResponse,
    OutcomeKind,
    ResponseOutcome,
)

__all__ = [
    "detokenize",
    "resolve_endpoint",
    "Credentials",
    "DetokenizeRequest",
    "DetokenizeResponse",
    "OutcomeKind",
    "ResponseOutcome",
]
