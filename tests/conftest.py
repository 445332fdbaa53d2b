"""Shared test fixtures and configuration."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest


# Complete test environment that overrides every server setting
TEST_ENV = {
    "HOST": "127.0.0.1",
    "PORT": "8787",
    "LOG_LEVEL": "info",
    "LOG_JSON": "true",
    "ACCESS_LOG": "false",
    "UVICORN_LIMIT_CONCURRENCY": "100",
    "DEBUG": "false",
    "METRICS_PORT": "0",
    # Proxy settings - ensure httpx never routes test traffic elsewhere
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
    "no_proxy": "",
}

Behaviour = Callable[[httpx.Request], httpx.Response]


class UpstreamStub:
    """Scripted stand-in for the upstream favicon providers.

    Hosts without a scripted behaviour answer ``404``.
    """

    GOOGLE = "www.google.com"
    DUCKDUCKGO = "icons.duckduckgo.com"
    ICONHORSE = "icon.horse"

    def __init__(self) -> None:
        self.behaviours: dict[str, Behaviour] = {}
        self.calls: list[httpx.Request] = []

    @staticmethod
    def respond(status_code: int = 200, content: bytes = b"", **kwargs) -> Behaviour:
        """Return a behaviour producing a fresh response on every call."""

        def _respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, content=content, **kwargs)

        return _respond

    @staticmethod
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    @staticmethod
    def time_out(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("Timed out", request=request)

    def script(self, host: str, behaviour: Behaviour) -> None:
        self.behaviours[host] = behaviour

    def hosts_called(self) -> list[str]:
        return [request.url.host for request in self.calls]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        behaviour = self.behaviours.get(request.url.host, self.respond(404))
        return behaviour(request)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Clean environment variables before each test and set test defaults."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()
