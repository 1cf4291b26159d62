import time
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

from schemas import Counters, ProbeResult, Snapshot, Summary, Target

LATENCY_WINDOW = 10   # últimas latencias por target (promedio)
HISTORY_WINDOW = 60   # muestras en memoria para el uptime %

def now_ts() -> float:
    return time.time()

class TargetState:
    """Contadores, ventana de latencias e historial de un target."""

    def __init__(self, latency_window: int = LATENCY_WINDOW, history_window: int = HISTORY_WINDOW):
        self.success = 0
        self.failure = 0
        self.latencies: Deque[float] = deque(maxlen=latency_window)
        # deque[{ts, up, latency, error}]
        self.history: Deque[dict] = deque(maxlen=history_window)
        self.last: Optional[ProbeResult] = None
        self.last_error = ""

class HealthCheckAggregator:
    """Estado en memoria del monitor, indexado por URL.

    La lista de targets es fija; el estado de cada uno se crea en su primer
    resultado registrado. Toda mutación pasa por ``record_result``.
    """

    def __init__(
        self,
        targets: Iterable[Target],
        latency_window: int = LATENCY_WINDOW,
        history_window: int = HISTORY_WINDOW,
    ):
        if latency_window < 1:
            raise ValueError("latency_window debe ser >= 1")
        if history_window < 1:
            raise ValueError("history_window debe ser >= 1")
        self.targets: List[Target] = list(targets)
        self.latency_window = latency_window
        self.history_window = history_window
        self.cycles = 0
        self.last_cycle_ts: Optional[float] = None
        self._state: Dict[str, TargetState] = {}

    @property
    def urls(self) -> List[str]:
        return [t.url for t in self.targets]

    def _keys(self) -> List[str]:
        keys = self.urls
        keys += [k for k in self._state if k not in keys]
        return keys

    def record_result(self, result: ProbeResult) -> None:
        st = self._state.get(result.target)
        if st is None:
            st = self._state[result.target] = TargetState(self.latency_window, self.history_window)
        if result.up:
            st.success += 1
        else:
            st.failure += 1
        st.latencies.append(result.latency_seconds)
        st.history.append({
            "ts": result.timestamp,
            "up": 1 if result.up else 0,
            "latency": result.latency_seconds,
            "error": result.error,
        })
        st.last = result
        if result.error:
            st.last_error = result.error

    def record_cycle(self, results: Iterable[ProbeResult]) -> None:
        for r in results:
            self.record_result(r)
        self.cycles += 1
        self.last_cycle_ts = now_ts()

    def counters(self, target: str) -> Counters:
        st = self._state.get(target)
        if st is None:
            return Counters()
        return Counters(success=st.success, failure=st.failure)

    def window(self, target: str) -> List[float]:
        st = self._state.get(target)
        return list(st.latencies) if st else []

    def average_latency(self, target: str) -> float:
        samples = self.window(target)
        if not samples:
            return 0.0
        return sum(samples) / len(samples)

    def uptime_pct(self, target: str) -> float:
        st = self._state.get(target)
        if not st or not st.history:
            return 0.0
        ups = sum(x["up"] for x in st.history)
        return round(100.0 * ups / len(st.history), 1)

    def last_error(self, target: str) -> str:
        st = self._state.get(target)
        return st.last_error if st else ""

    def history(self) -> Dict[str, List[dict]]:
        return {url: [dict(x) for x in st.history] for url, st in self._state.items()}

    def snapshot(self) -> Snapshot:
        keys = self._keys()
        results = [self._state[k].last for k in keys if k in self._state and self._state[k].last]
        ups = sum(1 for r in results if r.up)
        return Snapshot(
            results=results,
            counters={k: self.counters(k) for k in keys},
            averages={k: round(self.average_latency(k), 2) for k in keys},
            uptime_pct={k: self.uptime_pct(k) for k in keys},
            summary=Summary(total=len(keys), up=ups, down=len(results) - ups),
            cycles=self.cycles,
            ts=self.last_cycle_ts,
        )
