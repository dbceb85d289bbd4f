"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from eversign.client import EversignClient
from eversign.config import Credentials, Settings

# Add tests directory to path so test modules can import helpers from here
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """Mock transport that remembers every request it served.

    Each entry of ``responses`` is returned (or raised, for exceptions)
    in order; the last entry repeats once the list is exhausted.
    """

    def __init__(self, responses: list[httpx.Response | Exception]) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        # Fresh copy so a repeated entry can be served more than once
        return httpx.Response(
            response.status_code, headers=response.headers, content=response.content
        )


@pytest.fixture
def settings() -> Settings:
    """Settings with test credentials and no download delay."""
    return Settings(
        _env_file=None,
        access_key="test_key",
        business_id=42,
        language="en",
        sandbox=1,
        download_retry_delay_seconds=0,
        download_max_attempts=5,
        download_retry_forever=False,
    )


@pytest.fixture
def credentials(settings: Settings) -> Credentials:
    """Credentials derived from the test settings."""
    return settings.credentials()


@pytest.fixture
def make_client(settings: Settings) -> Callable[[RecordingTransport], EversignClient]:
    """Build an EversignClient that talks to a RecordingTransport."""

    def _make(transport: RecordingTransport) -> EversignClient:
        http = httpx.AsyncClient(transport=transport, base_url=settings.api_url)
        return EversignClient(settings, http_client=http)

    return _make


def pdf_response(content: bytes = b"%PDF-1.4 signed") -> httpx.Response:
    """A successful final-document download."""
    return httpx.Response(200, content=content, headers={"content-type": "application/pdf"})
