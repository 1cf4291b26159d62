"""Fixtures compartidos: transporte HTTP falso y fábricas de resultados."""

from typing import Callable

import httpx
import pytest

from schemas import ProbeResult

OK_URL = "https://example.test/ok"
DOWN_URL = "https://example.test/down"


def scenario_handler(request: httpx.Request) -> httpx.Response:
    """/ok responde 200; /down falla a nivel de transporte."""
    if request.url.path == "/down":
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(200)


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    def _make(handler=scenario_handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def mock_client(make_client) -> httpx.AsyncClient:
    return make_client()


def make_result(target: str = OK_URL, status: str = "UP", latency: float = 0.1, **kw) -> ProbeResult:
    return ProbeResult(
        target=target,
        status=status,
        status_code=kw.pop("status_code", 200 if status == "UP" else 0),
        latency_seconds=latency,
        timestamp=kw.pop("timestamp", 1700000000.0),
        **kw,
    )
