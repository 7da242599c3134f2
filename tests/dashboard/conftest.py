# tests/dashboard/conftest.py

import json

import httpx
import pytest

from dashboard.adapter import ConfigAdapter
from dashboard.config import AdapterConfig

SERVICE_URL = "http://config.test"
SITE_URL = "http://dashboard.test"
DEFAULT_YAML = "pageInfo:\n  title: Default dashboard\n"


class FakeClock:
    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeNetwork:
    """
    Plays both the config service and the static site behind one MockTransport,
    recording every request that reaches the network.
    """

    def __init__(self):
        self.stored: str | None = None
        self.token: str | None = None
        self.service_down = False
        self.static_status = 200
        self.requests: list[httpx.Request] = []

    def service_calls(self, method: str, path: str) -> int:
        return sum(
            1
            for r in self.requests
            if r.url.host == "config.test" and r.method == method and r.url.path == path
        )

    def static_calls(self) -> int:
        return sum(1 for r in self.requests if r.url.host == "dashboard.test")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "config.test":
            return self._service(request)
        if request.url.path == "/conf.yml":
            if self.static_status != 200:
                return httpx.Response(self.static_status, text="oops")
            return httpx.Response(200, text=DEFAULT_YAML)
        return httpx.Response(
            200, text="<html>dashboard</html>", headers={"X-Static": "yes"}
        )

    def _service(self, request: httpx.Request) -> httpx.Response:
        if self.service_down:
            raise httpx.ConnectError("Connection refused", request=request)

        path, method = request.url.path, request.method
        if path == "/api/config" and method == "GET":
            if self.stored is None:
                return httpx.Response(404, json={"error": "Config not found"})
            return httpx.Response(
                200, text=self.stored, headers={"Content-Type": "application/x-yaml"}
            )
        if path == "/api/config" and method == "POST":
            if self.token and request.headers.get("X-API-Token") != self.token:
                return httpx.Response(401, json={"error": "Unauthorized"})
            self.stored = request.content.decode("utf-8")
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "message": "Config saved successfully",
                    "metadata": {
                        "lastModified": "2026-10-18T09:30:00Z",
                        "size": len(request.content),
                    },
                },
            )
        if path == "/api/config/reset" and method == "POST":
            self.stored = None
            return httpx.Response(200, json={"success": True, "message": "Config reset"})
        if path == "/api/config/meta":
            if self.stored is None:
                return httpx.Response(200, json={"exists": False})
            return httpx.Response(
                200, json={"exists": True, "metadata": {"size": len(self.stored)}}
            )
        return httpx.Response(404, content=json.dumps({"error": "Not Found"}))


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def adapter_config() -> AdapterConfig:
    return AdapterConfig(
        service_url=SERVICE_URL,
        site_url=SITE_URL,
        api_token=None,
        cache_enabled=True,
        cache_duration=60_000,
        debug=True,
    )


@pytest.fixture
def adapter(adapter_config: AdapterConfig, network: FakeNetwork, clock: FakeClock) -> ConfigAdapter:
    return ConfigAdapter(
        adapter_config, transport=httpx.MockTransport(network.handler), clock=clock
    )


@pytest.fixture
def default_yaml() -> str:
    """What the static site serves at /conf.yml."""
    return DEFAULT_YAML
