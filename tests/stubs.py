import json

import httpx


class RecordingSink:
    """Stands in for core_logging and keeps every record."""

    def __init__(self):
        self.records = []
        self.identity = None
        self.correlation_id = None

    def set_identity(self, identity):
        self.identity = identity

    def set_correlation_id(self, correlation_id):
        self.correlation_id = correlation_id

    def debug(self, message, details=None):
        self.records.append(("debug", message, details))

    def info(self, message, details=None):
        self.records.append(("info", message, details))

    def warn(self, message, details=None):
        self.records.append(("warn", message, details))

    def error(self, message, details=None):
        self.records.append(("error", message, details))

    def levels(self):
        return [level for level, _, _ in self.records]

    def messages(self, level=None):
        return [message for lvl, message, _ in self.records if level is None or lvl == level]


class ServiceStub:
    """httpx MockTransport that answers every request the same way and counts calls."""

    def __init__(self, status_code=200, body=None, exc=None):
        self.status_code = status_code
        self.body = body
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc(f"stubbed {self.exc.__name__}", request=request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=self.body or "")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)
