"""
Shared test configuration and fixtures for convert-proxy tests.

Upstream traffic never leaves the process: every httpx client is wired to
an ``httpx.MockTransport`` backed by ``FakeUpstream``, which routes
requests by method and path and records everything it receives.
"""

import asyncio
import base64
import json
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app import app
from convert_proxy.config import Settings
from convert_proxy.router import get_orchestrator
from convert_proxy.utils.http_client import HTTPClientFactory, ServiceType
from convert_proxy.utils.orchestrator import ConversionOrchestrator
from convert_proxy.utils.upstream_client import UpstreamClient


API_KEY = "test-key"
API_BASE = "https://api.test/v1"
API_HOST = "api.test"
API_PREFIX = "/v1"

PRESIGNED_URL = "https://storage.test/presigned/upload-1"
STORED_URL = "https://storage.test/files/upload-1"

DEFAULT_HEAD_SIZE = 2048

Handler = Union[httpx.Response, Callable[[httpx.Request], httpx.Response], List[httpx.Response]]


def encode(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content.decode("utf-8"))


def is_inline(request: httpx.Request) -> bool:
    return request_json(request).get("url", "").startswith("data:")


def result(url: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json={"url": url, "error": False})


def rejection(message: str = "Rejected", status_code: int = 400) -> httpx.Response:
    return httpx.Response(status_code, json={"error": True, "message": message})


class FakeUpstream:
    """In-process stand-in for the conversion provider and its storage."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.head_size = DEFAULT_HEAD_SIZE

    def on(self, method: str, path: str, handler: Handler) -> "FakeUpstream":
        """Route ``method`` on ``path`` (provider paths without the /v1 prefix)."""
        self.routes[(method.upper(), path)] = handler
        return self

    def _route_key(self, request: httpx.Request) -> Tuple[str, str]:
        path = request.url.path
        if request.url.host == API_HOST and path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        elif request.url.host != API_HOST:
            path = str(request.url)
        return request.method, path

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = self._route_key(request)
        route = self.routes.get(key)

        if route is None:
            if request.method == "HEAD":
                return httpx.Response(200, headers={"content-length": str(self.head_size)})
            return httpx.Response(404, json={"error": True, "message": f"No route for {key}"})
        if isinstance(route, list):
            return route.pop(0)
        if callable(route):
            return route(request)
        # Static routes may be hit many times; never hand out the same object twice
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if self._route_key(r) == (method.upper(), path)]

    def provider_paths(self) -> List[str]:
        return [self._route_key(r)[1] for r in self.requests if r.url.host == API_HOST]


# ===== STANDARD FIXTURES =====

@pytest.fixture
def settings():
    return Settings(api_key=API_KEY, base_url=API_BASE, read_timeout=5.0, connect_timeout=5.0, max_concurrency=2)


@pytest.fixture
def fake_upstream():
    return FakeUpstream()


def build_upstream_client(factory: HTTPClientFactory, fake: FakeUpstream) -> UpstreamClient:
    return UpstreamClient(
        api_client=factory.create_client(ServiceType.PDFCO, transport=fake.transport()),
        storage_client=factory.create_client(ServiceType.STORAGE, transport=fake.transport())
    )


@pytest_asyncio.fixture
async def upstream_client(settings, fake_upstream):
    factory = HTTPClientFactory(settings)
    client = build_upstream_client(factory, fake_upstream)
    yield client
    await factory.close_all_clients()


@pytest_asyncio.fixture
async def orchestrator(upstream_client, settings):
    return ConversionOrchestrator(upstream_client, max_concurrency=settings.max_concurrency)


@pytest.fixture
def client(settings, fake_upstream):
    """FastAPI test client whose orchestrator talks to the fake upstream."""
    factory = HTTPClientFactory(settings)
    orchestrator = ConversionOrchestrator(
        build_upstream_client(factory, fake_upstream),
        max_concurrency=settings.max_concurrency
    )
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_orchestrator, None)
        asyncio.run(factory.close_all_clients())
