"""Test fixtures for speakcoach-proxy."""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from speakcoach_proxy.core import config
from speakcoach_proxy.core import http_client
from speakcoach_proxy.main import app


# -----------------------------------------------------------------------------
# Upstream mock
# -----------------------------------------------------------------------------


@dataclass
class MockUpstream:
    """Records outgoing requests and answers them with a configurable handler."""

    requests: List[httpx.Request] = field(default_factory=list)
    responder: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def respond_with(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self.responder = responder

    def respond_json(self, payload, status_code: int = 200) -> None:
        self.responder = lambda request: httpx.Response(status_code, json=payload)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responder is None:
            return httpx.Response(500, json={"message": "no mock response configured"})
        return self.responder(request)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no upstream request was made"
        return self.requests[-1]


@pytest.fixture
def upstream() -> MockUpstream:
    """Install a shared HTTP client backed by httpx.MockTransport."""
    mock = MockUpstream()
    http_client.set_http_client(httpx.AsyncClient(transport=httpx.MockTransport(mock.handle)))
    yield mock
    http_client.set_http_client(None)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------


@pytest.fixture
def openai_config(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(config, "OPENAI_API_BASE_URL", "https://api.openai.com")
    monkeypatch.setattr(config, "OPENAI_RESPONSES_PATH", "/v1/responses")
    monkeypatch.setattr(config, "DEFAULT_ANALYSIS_MODEL", "gpt-4o-mini")


@pytest.fixture
def azure_config(monkeypatch):
    monkeypatch.setattr(config, "AZURE_SPEECH_REGION", "westeurope")
    monkeypatch.setattr(config, "AZURE_SPEECH_KEY", "azure-test-key")
    monkeypatch.setattr(config, "PRONUNCIATION_LANGUAGE", "en-US")
    monkeypatch.setattr(config, "MAX_UPLOAD_SIZE_MB", 20)


# -----------------------------------------------------------------------------
# App client
# -----------------------------------------------------------------------------


@pytest.fixture
def client(upstream) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client
