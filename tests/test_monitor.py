"""Tests de sondeo HTTP (probe_one / probe_all), carga de targets y métricas."""

import asyncio
import json

import httpx
import pytest

from schemas import Target
from services import monitor
from services.state import HealthCheckAggregator

from conftest import DOWN_URL, OK_URL, make_result


def status_handler(code: int):
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(code)
    return _handler


class TestProbeOne:

    @pytest.mark.asyncio
    async def test_reachable_is_up(self, mock_client):
        r = await monitor.probe_one(mock_client, Target(name="ok", url=OK_URL))
        assert r.status == "UP"
        assert r.status_code == 200
        assert r.latency_seconds >= 0
        assert r.error is None
        assert r.name == "ok"

    @pytest.mark.asyncio
    async def test_uses_head_by_default(self, make_client):
        seen = []

        def handler(request):
            seen.append(request.method)
            return httpx.Response(204)

        r = await monitor.probe_one(make_client(handler), OK_URL)
        assert seen == ["HEAD"]
        assert r.status == "UP"

    @pytest.mark.asyncio
    async def test_redirect_counts_as_up(self, make_client):
        client = make_client(status_handler(302))
        r = await monitor.probe_one(client, OK_URL)
        assert r.status == "UP"
        assert r.status_code == 302

    @pytest.mark.asyncio
    async def test_error_status_is_down_with_code(self, make_client):
        r = await monitor.probe_one(make_client(status_handler(503)), OK_URL)
        assert r.status == "DOWN"
        assert r.status_code == 503
        assert r.error_kind == "http_status"
        assert r.error

    @pytest.mark.asyncio
    async def test_transport_error_is_down(self, mock_client):
        r = await monitor.probe_one(mock_client, DOWN_URL)
        assert r.status == "DOWN"
        assert r.status_code == 0
        assert r.error_kind == "transport"
        assert "refused" in r.error

    @pytest.mark.asyncio
    async def test_timeout_is_down(self, make_client):
        def handler(request):
            raise httpx.ReadTimeout("", request=request)

        r = await monitor.probe_one(make_client(handler), OK_URL)
        assert r.status == "DOWN"
        assert r.status_code == 0
        assert r.error == "ReadTimeout"

    @pytest.mark.asyncio
    async def test_unexpected_exception_never_escapes(self, make_client):
        def handler(request):
            raise RuntimeError("kaboom")

        r = await monitor.probe_one(make_client(handler), OK_URL)
        assert r.status == "DOWN"
        assert r.error_kind == "internal"
        assert r.error == "kaboom"

    @pytest.mark.asyncio
    async def test_unreachable_address(self):
        async with httpx.AsyncClient() as client:
            r = await monitor.probe_one(client, "http://127.0.0.1:1/", timeout=2.0)
        assert r.status == "DOWN"
        assert r.status_code == 0
        assert r.error


class TestProbeAll:

    @pytest.mark.asyncio
    async def test_one_result_per_target_in_order(self, mock_client):
        results = await monitor.probe_all(mock_client, [OK_URL, DOWN_URL])
        assert [r.target for r in results] == [OK_URL, DOWN_URL]
        assert [r.status for r in results] == ["UP", "DOWN"]

    @pytest.mark.asyncio
    async def test_empty_target_list(self, mock_client):
        assert await monitor.probe_all(mock_client, []) == []

    @pytest.mark.asyncio
    async def test_probes_run_concurrently(self, make_client):
        in_flight, peak = 0, 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.05)
            in_flight -= 1
            return httpx.Response(200)

        urls = [f"https://example.test/{i}" for i in range(5)]
        results = await monitor.probe_all(make_client(handler), urls)
        assert len(results) == 5
        assert peak == 5


class TestLoadTargets:

    def test_strings_and_objects(self):
        targets = monitor.load_targets('["https://a.test", {"name": "B", "url": "https://b.test"}]')
        assert targets == [
            Target(name="https://a.test", url="https://a.test"),
            Target(name="B", url="https://b.test"),
        ]

    def test_invalid_json_yields_empty(self):
        assert monitor.load_targets("{nope") == []

    def test_not_a_list_yields_empty(self):
        assert monitor.load_targets('{"url": "https://a.test"}') == []

    def test_skips_missing_url_and_duplicates(self):
        targets = monitor.load_targets('[{"name": "x"}, "https://a.test", "https://a.test", 3]')
        assert [t.url for t in targets] == ["https://a.test"]

    def test_non_string_name_falls_back_to_url(self):
        raw = json.dumps([
            {"name": 5, "url": "https://a.test"},
            {"name": ["x"], "url": "https://b.test"},
            {"name": "  ", "url": "https://c.test"},
            "https://d.test",
        ])
        targets = monitor.load_targets(raw)
        assert [(t.name, t.url) for t in targets] == [
            ("https://a.test", "https://a.test"),
            ("https://b.test", "https://b.test"),
            ("https://c.test", "https://c.test"),
            ("https://d.test", "https://d.test"),
        ]


class TestRenderMetrics:

    def test_exposition(self):
        agg = HealthCheckAggregator([Target(name="ok", url=OK_URL), Target(name="down", url=DOWN_URL)])
        agg.record_cycle([make_result(OK_URL, latency=0.25), make_result(DOWN_URL, "DOWN")])
        text = monitor.render_metrics(agg)
        assert '# TYPE service_up gauge' in text
        assert f'service_up{{service="ok",url="{OK_URL}"}} 1' in text
        assert f'service_up{{service="down",url="{DOWN_URL}"}} 0' in text
        assert f'service_latency_seconds{{service="ok",url="{OK_URL}"}} 0.25' in text
        assert f'service_checks_total{{service="down",url="{DOWN_URL}",result="failure"}} 1' in text
        assert text.endswith("\n")

    def test_target_without_samples(self):
        agg = HealthCheckAggregator([Target(name="ok", url=OK_URL)])
        text = monitor.render_metrics(agg)
        assert f'service_up{{service="ok",url="{OK_URL}"}} 0' in text
        assert f'service_latency_seconds{{service="ok",url="{OK_URL}"}} nan' in text
