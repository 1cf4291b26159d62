import asyncio, logging
from typing import List, Optional

import httpx

from schemas import ProbeResult
from . import monitor
from .state import HealthCheckAggregator

logger = logging.getLogger(__name__)

class MonitorScheduler:
    """Ciclo periódico: sondea todos los targets y registra los resultados.

    Los ciclos se serializan con un lock, así un refresh manual y el tick
    periódico nunca intercalan sus escrituras sobre el mismo target.
    """

    def __init__(
        self,
        aggregator: HealthCheckAggregator,
        interval_s: float = 30.0,
        timeout_s: float = monitor.DEFAULT_TIMEOUT_S,
        method: str = monitor.DEFAULT_METHOD,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if interval_s <= 0:
            raise ValueError("interval_s debe ser > 0")
        self.aggregator = aggregator
        self.interval_s = interval_s
        self.timeout_s = timeout_s
        self.method = method.upper()
        self._client = client
        self._owns_client = client is None
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def run_cycle(self) -> List[ProbeResult]:
        async with self._lock:
            results = await monitor.probe_all(
                self._get_client(), self.aggregator.targets, self.timeout_s, self.method
            )
            # sin await entre probe_all y el registro: un cancel no deja estado a medias
            self.aggregator.record_cycle(results)
        ups = sum(1 for r in results if r.up)
        logger.info(f"ciclo {self.aggregator.cycles}: {ups} up / {len(results) - ups} down")
        return results

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("error en el ciclo de monitoreo")
            await asyncio.sleep(self.interval_s)

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"monitor iniciado: {len(self.aggregator.targets)} targets cada {self.interval_s}s")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        logger.info("monitor detenido")

    async def check_url(self, url: str) -> ProbeResult:
        # sondeo ad hoc, no se registra en el agregador
        return await monitor.probe_one(self._get_client(), url, self.timeout_s, self.method)
