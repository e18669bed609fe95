import json
from typing import Callable

import httpx
import pytest

from core.dispatcher import Dispatcher
from core.openfec import OpenFECClient
from core.rate_limiter import TokenBucket

BASE_URL = "https://api.test.fec/v1"


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    """Routes requests by path to canned responses and records every call."""

    def __init__(self, routes: dict[str, Callable[[httpx.Request], httpx.Response]]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/v1"):]
        handler = self.routes.get(path)
        if handler is None:
            return httpx.Response(404, json={"message": f"no route for {path}"})
        return handler(request)

    @property
    def paths(self) -> list[str]:
        return [r.url.path[len("/v1"):] for r in self.requests]


def json_response(body, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=body)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def make_client():
    def factory(transport: RecordingTransport) -> OpenFECClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        return OpenFECClient("test-key", base_url=BASE_URL, http_client=http_client)

    return factory


@pytest.fixture()
def make_dispatcher(make_client, clock):
    def factory(routes: dict, capacity: int = 1000):
        transport = RecordingTransport(routes)
        limiter = TokenBucket(capacity, 3600, clock=clock)
        return Dispatcher(make_client(transport), limiter), transport

    return factory


def body_of(result) -> dict:
    return json.loads(result.to_text())
