import httpx
import pytest

from acct_expansion.detokenization import Credentials, DetokenizeResponse, detokenize, resolve_endpoint
from acct_expansion.exceptions import (
    ConfigError,
    DecodingError,
    EncodingError,
    NotFoundError,
    RequestBuildError,
    ServerError,
    TransportError,
    UnexpectedStatusError,
)

from .stubs import ServiceStub

ENDPOINT = "https://detok.example.com"
URL = "https://detok.example.com/v1/data/sdm-protect/cloud-protegrity/unprotect"
CREDS = Credentials(auth_token="token-abc123", api_key="key-xyz789", id_claim="claim-42")


def _call(stub: ServiceStub, logger, endpoint=ENDPOINT, values=("tok-123456",)):
    return detokenize(endpoint, "deACCOUNTNUM", list(values), credentials=CREDS, logger=logger, transport=stub.transport)


def test_resolve_endpoint():
    assert resolve_endpoint(ENDPOINT) == URL
    assert resolve_endpoint(ENDPOINT + "/") == URL


@pytest.mark.parametrize("endpoint", ["", "   "])
def test_resolve_endpoint_requires_base(endpoint):
    with pytest.raises(ConfigError):
        resolve_endpoint(endpoint)


def test_success_returns_decoded_response(logger, sink, ok_body):
    stub = ServiceStub(200, ok_body)

    response = _call(stub, logger)

    assert response == DetokenizeResponse(**ok_body)
    assert len(stub.requests) == 1

    request = stub.requests[0]
    assert request.method == "POST"
    assert str(request.url) == URL
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Authorization"] == "Bearer token-abc123"
    assert request.headers["api-key"] == "key-xyz789"
    assert request.headers["id-claim"] == "claim-42"
    assert stub.last_json == {"data_element": "deACCOUNTNUM", "data": ["tok-123456"]}

    assert "Received API response successfully" in sink.messages("info")
    assert "error" not in sink.levels()


def test_success_flag_and_result_count_are_not_interpreted(logger):
    body = {"encoding": "utf8", "results": [], "success": "false"}
    stub = ServiceStub(200, body)

    response = _call(stub, logger, values=["a", "b"])

    assert response.success == "false"
    assert response.results == []


def test_missing_credentials_are_sent_empty(logger, ok_body):
    stub = ServiceStub(200, ok_body)

    detokenize(ENDPOINT, "deACCOUNTNUM", ["tok"], logger=logger, transport=stub.transport)

    headers = stub.requests[0].headers
    assert headers["Authorization"] == "Bearer "
    assert headers["api-key"] == ""
    assert headers["id-claim"] == ""


def test_not_found(logger, sink):
    stub = ServiceStub(404, "no such token")

    with pytest.raises(NotFoundError) as exc_info:
        _call(stub, logger)

    assert exc_info.value.status_code == 404
    assert exc_info.value.details["url"] == URL
    assert "warn" in sink.levels()
    assert "Resource not found (404)" in sink.messages("warn")


def test_server_error(logger, sink):
    stub = ServiceStub(500, "boom")

    with pytest.raises(ServerError) as exc_info:
        _call(stub, logger)

    assert exc_info.value.status_code == 500
    assert "Internal server error (500)" in sink.messages("error")


@pytest.mark.parametrize("status_code", [503, 201, 302, 400, 401])
def test_unexpected_status(logger, sink, status_code):
    stub = ServiceStub(status_code, "service unavailable")

    with pytest.raises(UnexpectedStatusError) as exc_info:
        _call(stub, logger)

    assert exc_info.value.status_code == status_code
    assert exc_info.value.body == "service unavailable"
    _, message, details = [r for r in sink.records if r[0] == "warn"][-1]
    assert message == f"Received unexpected response code: {status_code}"
    assert details["response_body"] == "service unavailable"


def test_unexpected_status_without_body(logger, sink):
    stub = ServiceStub(503, "")

    with pytest.raises(UnexpectedStatusError) as exc_info:
        _call(stub, logger)

    assert exc_info.value.body == ""
    _, _, details = [r for r in sink.records if r[0] == "warn"][-1]
    assert "response_body" not in details


@pytest.mark.parametrize("exc", [httpx.ConnectError, httpx.ReadError, httpx.RemoteProtocolError])
def test_transport_failure_is_not_retried(logger, sink, exc):
    stub = ServiceStub(exc=exc)

    with pytest.raises(TransportError) as exc_info:
        _call(stub, logger)

    assert len(stub.requests) == 1
    assert isinstance(exc_info.value.__cause__, exc)
    assert "Error sending HTTP request" in sink.messages("error")


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        "",
        {"encoding": "utf8", "results": ["x"]},
        {"encoding": "utf8", "results": "x", "success": "true"},
        ["encoding", "results", "success"],
    ],
)
def test_decoding_error(logger, sink, body):
    stub = ServiceStub(200, body)

    with pytest.raises(DecodingError):
        _call(stub, logger)

    assert "Error unmarshalling response" in sink.messages("error")


def test_missing_endpoint_makes_no_call(logger, sink):
    stub = ServiceStub(200, {})

    with pytest.raises(ConfigError):
        _call(stub, logger, endpoint="")

    assert stub.requests == []
    assert "API Endpoint is missing in the environment variables" in sink.messages("error")


@pytest.mark.parametrize("values", [[], [123], [None]])
def test_encoding_error(logger, values):
    stub = ServiceStub(200, {})

    with pytest.raises(EncodingError):
        detokenize(ENDPOINT, "deACCOUNTNUM", values, logger=logger, transport=stub.transport)

    assert stub.requests == []


def test_empty_field_name_is_an_encoding_error(logger):
    stub = ServiceStub(200, {})

    with pytest.raises(EncodingError):
        detokenize(ENDPOINT, "", ["tok"], logger=logger, transport=stub.transport)


@pytest.mark.parametrize("endpoint", ["detok.example.com", "ftp://detok.example.com", "http://"])
def test_malformed_url(logger, sink, endpoint):
    stub = ServiceStub(200, {})

    with pytest.raises(RequestBuildError):
        _call(stub, logger, endpoint=endpoint)

    assert stub.requests == []
    assert "Error creating HTTP request" in sink.messages("error")


def test_logs_are_redacted(logger, sink, ok_body):
    stub = ServiceStub(200, ok_body)

    _call(stub, logger)

    dispatched = [d for _, m, d in sink.records if m == "Dispatching HTTP request"][0]
    headers = {k.lower(): v for k, v in dispatched["request"]["headers"].items()}
    assert headers["authorization"].endswith("c123")
    assert "token-abc123" not in headers["authorization"]
    assert headers["content-type"] == "application/json"

    received = [d for _, m, d in sink.records if m == "Received API response successfully"][0]
    assert received["response"]["results"] == ["*" * 12 + "1111"]


def test_decoding_error_does_not_log_detokenized_values(logger, sink):
    stub = ServiceStub(200, {"encoding": "utf8", "results": ["4111111111111111"]})

    with pytest.raises(DecodingError):
        _call(stub, logger)

    assert "4111111111111111" not in repr(sink.records)
    _, _, details = [r for r in sink.records if r[0] == "error"][-1]
    assert details["error"]["object_type"] == "validation_error"
    assert details["error"]["errors"][0]["loc"] == ["success"]
    assert details["response"]["body_length"] > 0


def test_encoding_error_does_not_log_tokens(logger, sink):
    stub = ServiceStub(200, {})

    with pytest.raises(EncodingError):
        detokenize(ENDPOINT, "deACCOUNTNUM", ["tok-4111111111111111", 42], logger=logger, transport=stub.transport)

    assert "tok-4111111111111111" not in repr(sink.records)


@pytest.mark.parametrize("values", ["tok-123456", b"tok-123456"])
def test_bare_string_values_are_rejected(logger, values):
    stub = ServiceStub(200, {})

    with pytest.raises(EncodingError):
        detokenize(ENDPOINT, "deACCOUNTNUM", values, logger=logger, transport=stub.transport)

    assert stub.requests == []
