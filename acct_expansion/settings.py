"""Runtime configuration read from the Lambda environment.

| Variable       | Field          | Notes                                        |
|----------------|----------------|----------------------------------------------|
| API_ENDPOINT   | api_endpoint   | Base URL of the detokenization service       |
| AUTH_TOKEN     | auth_token     | Bearer token                                 |
| API_KEY        | api_key        |                                              |
| ID_CLAIM       | id_claim       | ``ID-CLAIM`` is read when ``ID_CLAIM`` is unset |
| ENV            | environment    | ``dev``/``test`` turn debug logging on       |
| LOG_LEVEL      | log_level      | Overrides the level derived from ``ENV``     |
| LOG_REDACT     | log_redact     | Mask sensitive values in logs (default true) |

Missing credentials are not an error here; they are sent as empty headers
and the service rejects the call. A missing endpoint is reported by the
client when it tries to resolve the URL.
"""

import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, field_validator

from .constants import (
    DEBUG_ENVIRONMENTS,
    ENV_API_ENDPOINT,
    ENV_API_KEY,
    ENV_AUTH_TOKEN,
    ENV_ENVIRONMENT,
    ENV_ID_CLAIM,
    ENV_ID_CLAIM_LEGACY,
    ENV_LOG_LEVEL,
    ENV_LOG_REDACT,
)
from .detokenization.models import Credentials
from .formatters import mask, register_formatter
from .log_context import LogLevel


class Settings(BaseModel):
    api_endpoint: str = ""
    auth_token: str = ""
    api_key: str = ""
    id_claim: str = ""
    environment: str = ""
    log_level: LogLevel = LogLevel.INFO
    log_redact: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def _parse_log_level(cls, value: Any) -> LogLevel:
        return LogLevel.parse(value)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        environment = env.get(ENV_ENVIRONMENT, "").strip().lower()
        default_level = LogLevel.DEBUG if environment in DEBUG_ENVIRONMENTS else LogLevel.INFO

        data: dict[str, Any] = {
            "api_endpoint": env.get(ENV_API_ENDPOINT, ""),
            "auth_token": env.get(ENV_AUTH_TOKEN, ""),
            "api_key": env.get(ENV_API_KEY, ""),
            "id_claim": env.get(ENV_ID_CLAIM) or env.get(ENV_ID_CLAIM_LEGACY, ""),
            "environment": environment,
            "log_level": env.get(ENV_LOG_LEVEL) or default_level,
        }
        if env.get(ENV_LOG_REDACT):
            data["log_redact"] = env[ENV_LOG_REDACT]

        return cls(**data)

    def credentials(self) -> Credentials:
        return Credentials(auth_token=self.auth_token, api_key=self.api_key, id_claim=self.id_claim)


@register_formatter(Settings)
def _format_settings(obj: Settings, redact: bool) -> dict[str, Any]:
    return {
        "object_type": "settings",
        "api_endpoint": obj.api_endpoint,
        "auth_token": mask(obj.auth_token, redact),
        "api_key": mask(obj.api_key, redact),
        "id_claim": mask(obj.id_claim, redact),
        "environment": obj.environment,
        "log_level": obj.log_level.value,
        "log_redact": obj.log_redact,
    }
