"""
Shared fixtures for contact sync tests.
"""

import json
from typing import Callable, List
from urllib.parse import parse_qs

import httpx
import pytest

from contact_sync.integrations.salesforce.capability_cache import CapabilityCache
from contact_sync.models.salesforce import SalesforceCredential
from contact_sync.services.credential_store import InMemoryCredentialStore

INSTANCE_URL = "https://acme.my.salesforce.com"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    """
    Wraps a handler in httpx.MockTransport and records every request.

    `responses` may be a callable(request) -> Response or a list of
    Responses served in order.
    """

    def __init__(self, responses):
        self.requests: List[httpx.Request] = []
        self._responses = responses

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if callable(self._responses):
            return self._responses(request)
        return self._responses.pop(0)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))


def form_body(request: httpx.Request) -> dict:
    """Decodes a form-encoded request body into a flat dict."""
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def json_body(request: httpx.Request) -> dict:
    return json.loads(request.content)


def invalid_session_response() -> httpx.Response:
    return httpx.Response(
        401,
        json=[{"message": "Session expired or invalid", "errorCode": "INVALID_SESSION_ID"}],
    )


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def credential(credential_store) -> SalesforceCredential:
    return credential_store.add(
        SalesforceCredential(
            user_id=7,
            token="old-token",
            refresh_token="refresh-123",
            metadata={"instance_url": INSTANCE_URL},
        )
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def capability_cache(fake_clock) -> CapabilityCache:
    return CapabilityCache(ttl_seconds=3600, clock=fake_clock)


@pytest.fixture
def recording_transport() -> Callable[..., RecordingTransport]:
    return RecordingTransport
