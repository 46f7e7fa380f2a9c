from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from bassa_client import BassaClient, ClientConfig

BASE_URL = "http://localhost:5000"


class FakeServer:
    """Records requests and replays queued responses (200 `{}` once empty)."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response | Exception] = []

    def queue(self, *responses: httpx.Response | Exception) -> None:
        self.responses.extend(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(200, json={})
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode("utf-8")).items()}


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def make_client(server):
    clients: list[BassaClient] = []

    def _make(**overrides) -> BassaClient:
        values = {"base_url": BASE_URL, "backoff_factor": 0.0}
        values.update(overrides)
        c = BassaClient(ClientConfig(**values), transport=httpx.MockTransport(server))
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def client(make_client) -> BassaClient:
    return make_client()
