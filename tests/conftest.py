"""Shared fixtures: offline upstream, settings and credentials.

Every adapter receives an `httpx.MockTransport`; no test reaches the
network. `FakeUpstream` routes by URL path and records each request so
tests can assert on call counts and query parameters.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from core.config import AppSettings
from core.credentials import CredentialContext

FIXTURE_DIR = Path(__file__).parent / "fixtures"

Responder = Callable[[httpx.Request], httpx.Response]


def load_fixture(name: str) -> Any:
    """Load a JSON fixture file."""
    with open(FIXTURE_DIR / name, encoding="utf-8") as f:
        return json.load(f)


class FakeUpstream:
    def __init__(self) -> None:
        self.routes: dict[str, Responder] = {}
        self.requests: list[httpx.Request] = []

    def json(self, path: str, payload: Any, status: int = 200) -> None:
        self.routes[path] = lambda request: httpx.Response(status, json=payload)

    def raw(self, path: str, content: bytes, content_type: str, status: int = 200) -> None:
        self.routes[path] = lambda request: httpx.Response(
            status, content=content, headers={"Content-Type": content_type}
        )

    def network_error(self, path: str) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.routes[path] = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get(request.url.path)
        if responder is None:
            return httpx.Response(404, json={"error": {"code": "NOT_FOUND", "message": "no such route"}})
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def last_params(self) -> dict[str, str]:
        return dict(self.requests[-1].url.params)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        api_base_url="https://api.nasa.gov",
        images_api_base_url="https://images-api.nasa.gov",
        epic_archive_base_url="https://epic.gsfc.nasa.gov/archive",
        earth_dim_degrees=0.15,
        neo_max_span_days=7,
    )


@pytest.fixture
def credential() -> CredentialContext:
    return CredentialContext("TEST_KEY")


@pytest.fixture
def no_credential() -> CredentialContext:
    return CredentialContext(None)


@pytest.fixture
def fixture_json() -> Callable[[str], Any]:
    return load_fixture
