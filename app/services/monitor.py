import json, time, math, asyncio, logging
from typing import Iterable, List, Optional, Union

import httpx

from schemas import ProbeResult, Target
from .state import HealthCheckAggregator, now_ts

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0
DEFAULT_METHOD = "HEAD"

def load_targets(raw: str) -> List[Target]:
    try:
        data = json.loads(raw or "[]")
        if not isinstance(data, list):
            raise ValueError("TARGETS_JSON debe ser lista")
    except Exception as e:
        logger.warning(f"TARGETS_JSON inválido: {e}")
        return []

    targets, seen = [], set()
    for item in data:
        if isinstance(item, str):
            url, name = item.strip(), None
        elif isinstance(item, dict):
            url, name = str(item.get("url") or "").strip(), item.get("name")
            if not isinstance(name, str):
                name = None
        else:
            url, name = "", None
        if not url:
            logger.warning(f"target sin URL ignorado: {item!r}")
            continue
        if url in seen:
            continue
        seen.add(url)
        targets.append(Target(name=(name or "").strip() or url, url=url))
    return targets

def is_success(code: int) -> bool:
    # UP = respuesta HTTP 2xx/3xx (las redirecciones no se siguen)
    return 200 <= code < 400

def _describe(ex: Exception) -> str:
    return str(ex) or ex.__class__.__name__

async def probe_one(
    client: httpx.AsyncClient,
    target: Union[Target, str],
    timeout: float = DEFAULT_TIMEOUT_S,
    method: str = DEFAULT_METHOD,
) -> ProbeResult:
    """Sondea un target. Nunca lanza: cualquier fallo queda en el resultado."""
    if isinstance(target, Target):
        url, name = target.url, target.name
    else:
        url, name = target, None

    started = time.monotonic()
    status_txt, code, err, kind = "DOWN", 0, None, None
    try:
        r = await client.request(method, url, timeout=timeout, follow_redirects=False)
        code = r.status_code
        if is_success(code):
            status_txt = "UP"
        else:
            err, kind = f"HTTP {code}", "http_status"
    except httpx.TransportError as ex:
        err, kind = _describe(ex), "transport"
    except Exception as ex:
        err, kind = _describe(ex), "internal"
    latency = round(time.monotonic() - started, 2)

    if status_txt == "DOWN":
        logger.warning(f"{url} DOWN ({err})")

    return ProbeResult(
        target=url,
        name=name,
        status=status_txt,
        status_code=code,
        latency_seconds=latency,
        timestamp=now_ts(),
        error=err,
        error_kind=kind,
    )

async def probe_all(
    client: httpx.AsyncClient,
    targets: Iterable[Union[Target, str]],
    timeout: float = DEFAULT_TIMEOUT_S,
    method: str = DEFAULT_METHOD,
) -> List[ProbeResult]:
    return list(await asyncio.gather(*[probe_one(client, t, timeout, method) for t in targets]))

def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")

def render_metrics(aggregator: HealthCheckAggregator) -> str:
    lines = [
        '# HELP service_up 1 si el servicio está UP, 0 si DOWN',
        '# TYPE service_up gauge',
        '# HELP service_latency_seconds Latencia del último sondeo en segundos',
        '# TYPE service_latency_seconds gauge',
        '# HELP service_avg_latency_seconds Latencia promedio de la ventana reciente',
        '# TYPE service_avg_latency_seconds gauge',
        '# HELP service_uptime_pct Uptime en % dentro de la ventana local',
        '# TYPE service_uptime_pct gauge',
        '# HELP service_checks_total Sondeos registrados por resultado',
        '# TYPE service_checks_total counter',
    ]

    snap = aggregator.snapshot()
    last = {r.target: r for r in snap.results}
    names = {t.url: t.name for t in aggregator.targets}

    for url, counters in snap.counters.items():
        r: Optional[ProbeResult] = last.get(url)
        up = 1 if r and r.up else 0
        lat = r.latency_seconds if r else math.nan
        labels = f'service="{_escape(names.get(url, url))}",url="{_escape(url)}"'
        lines.append(f'service_up{{{labels}}} {up}')
        lines.append(f'service_latency_seconds{{{labels}}} {lat}')
        lines.append(f'service_avg_latency_seconds{{{labels}}} {snap.averages[url]}')
        lines.append(f'service_uptime_pct{{{labels}}} {snap.uptime_pct[url]}')
        lines.append(f'service_checks_total{{{labels},result="success"}} {counters.success}')
        lines.append(f'service_checks_total{{{labels},result="failure"}} {counters.failure}')

    return "\n".join(lines) + "\n"
