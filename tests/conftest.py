import pytest

from acct_expansion.log_context import LogContext, LogLevel
from acct_expansion.settings import Settings

from .stubs import RecordingSink


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def logger(sink):
    return LogContext(LogLevel.DEBUG, sink=sink)


@pytest.fixture
def settings():
    return Settings(
        api_endpoint="https://detok.example.com",
        auth_token="token-abc123",
        api_key="key-xyz789",
        id_claim="claim-42",
        environment="test",
        log_level="DEBUG",
    )


@pytest.fixture
def ok_body():
    return {"encoding": "utf8", "results": ["4111111111111111"], "success": "true"}


@pytest.fixture
def cloudwatch_event():
    return {
        "version": "0",
        "id": "6a7e8feb-b491-4cf7-a9f1-bf3703467718",
        "detail-type": "Account Expansion Requested",
        "source": "acct.tokenized",
        "account": "111122223333",
        "time": "2024-10-01T17:22:44Z",
        "region": "us-east-1",
        "resources": [],
        "detail": {"accountNumber": "tok-123456"},
    }
