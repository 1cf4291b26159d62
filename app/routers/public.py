from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from deps import get_aggregator, get_scheduler
from schemas import CheckIn, ProbeResult, Snapshot, Target
from services import monitor
from services.scheduler import MonitorScheduler
from services.state import HealthCheckAggregator

router = APIRouter()
api = APIRouter(prefix="/api/services")

@router.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

@router.get("/metrics", response_class=PlainTextResponse)
def metrics(aggregator: HealthCheckAggregator = Depends(get_aggregator)):
    return monitor.render_metrics(aggregator)

@api.get("/targets", response_model=List[Target])
def targets(aggregator: HealthCheckAggregator = Depends(get_aggregator)):
    return aggregator.targets

@api.get("/status", response_model=Snapshot)
def status(aggregator: HealthCheckAggregator = Depends(get_aggregator)):
    return aggregator.snapshot()

@api.post("/refresh", response_model=Snapshot)
async def refresh(scheduler: MonitorScheduler = Depends(get_scheduler)):
    await scheduler.run_cycle()
    return scheduler.aggregator.snapshot()

@api.post("/check", response_model=ProbeResult)
async def check(payload: CheckIn, scheduler: MonitorScheduler = Depends(get_scheduler)):
    return await scheduler.check_url(payload.url)

@api.get("/history")
def history(aggregator: HealthCheckAggregator = Depends(get_aggregator)):
    return aggregator.history()

@api.get("/history/{index}")
def history_one(index: int, aggregator: HealthCheckAggregator = Depends(get_aggregator)):
    # por posición en la lista de targets (las URLs no caben bien en un path)
    if index < 0 or index >= len(aggregator.targets):
        raise HTTPException(status_code=404, detail="Target no encontrado")
    target = aggregator.targets[index]
    return {
        "target": target.url,
        "name": target.name,
        "samples": aggregator.history().get(target.url, []),
        "window": aggregator.window(target.url),
        "average_latency": round(aggregator.average_latency(target.url), 2),
        "uptime_pct": aggregator.uptime_pct(target.url),
        "last_error": aggregator.last_error(target.url),
    }

router.include_router(api)
