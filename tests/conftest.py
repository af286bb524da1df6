"""
Pytest configuration and fixtures for maasapi tests.
"""

from __future__ import annotations

from collections import defaultdict, deque

import httpx
import pytest

from maasapi.dispatcher import Dispatcher

BASE_URL = "http://maas.test/MAAS"

VERSION_RESPONSE = (
    '{"version": "unknown", "subversion": "", "Capabilities": ['
    '"networks-management", "static-ipaddresses", "ipv6-deployment-ubuntu", '
    '"devices-management", "storage-deployment-ubuntu", "network-deployment-ubuntu"]}'
)


class FakeServer:
    """
    Scripted MAAS server for httpx.MockTransport.

    Responses are keyed by method and path with query (``/MAAS/api/2.0/version/``,
    ``/MAAS/api/2.0/users/?op=whoami``). A queued list is consumed in order and
    its last entry repeats. Unknown paths answer 404.
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], deque] = {}
        self.requests: list[httpx.Request] = []
        self.hits: dict[str, int] = defaultdict(int)

    def add(
        self,
        method: str,
        path: str,
        status: int,
        body: str | bytes = "",
        headers: dict[str, str] | None = None,
    ) -> None:
        self._responses.setdefault((method, path), deque()).append((status, body, headers))

    def add_get(self, path: str, status: int, body: str | bytes = "", **kwargs) -> None:
        self.add("GET", path, status, body, **kwargs)

    def flaky(self, path: str, status: int, times: int, method: str = "GET") -> None:
        """Answer ``status`` ``times`` times, then 200 with the request body."""
        for _ in range(times):
            self.add(method, path, status, "flaky")
        self.add(method, path, 200, None)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.raw_path.decode()
        self.hits[key] += 1
        queue = self._responses.get((request.method, key))
        if not queue:
            return httpx.Response(404, text="not found")
        status, body, headers = queue[0] if len(queue) == 1 else queue.popleft()
        if body is None:
            body = request.content
        return httpx.Response(status, content=body, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def dispatcher(self, signer=None, **kwargs) -> Dispatcher:
        kwargs.setdefault("sleep", lambda seconds: None)
        return Dispatcher(signer, transport=self.transport, **kwargs)


@pytest.fixture
def server() -> FakeServer:
    """Provide an empty fake server."""
    return FakeServer()


@pytest.fixture
def maas_server(server: FakeServer) -> FakeServer:
    """Fake server offering API 2.0 with valid credentials."""
    server.add_get("/MAAS/api/2.0/version/", 200, VERSION_RESPONSE)
    server.add_get("/MAAS/api/2.0/users/?op=whoami", 200, '"captain awesome"')
    return server


@pytest.fixture(autouse=True)
def reset_sdk_settings():
    """Reset SDK settings before and after each test."""
    from maasapi.config import reset_settings

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def base_url() -> str:
    """Server URL without an API version."""
    return BASE_URL


@pytest.fixture
def version_response() -> str:
    """A version document listing six capabilities."""
    return VERSION_RESPONSE
