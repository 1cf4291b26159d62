import logging
from typing import Optional

import httpx
from fastapi import FastAPI

from config import Settings, settings as default_settings
from logging_config import setup_logging
from middleware import activity_middleware
from routers import public, pages
from services import monitor
from services.scheduler import MonitorScheduler
from services.state import HealthCheckAggregator

logger = logging.getLogger(__name__)

def create_app(settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION)

    # ---- estado del monitor (uno por app)
    targets = monitor.load_targets(settings.TARGETS_JSON)
    aggregator = HealthCheckAggregator(
        targets,
        latency_window=settings.LATENCY_WINDOW,
        history_window=settings.HISTORY_WINDOW,
    )
    app.state.settings = settings
    app.state.aggregator = aggregator
    app.state.scheduler = MonitorScheduler(
        aggregator,
        interval_s=settings.CHECK_INTERVAL_S,
        timeout_s=settings.PROBE_TIMEOUT_S,
        method=settings.PROBE_METHOD,
        client=client,
    )

    activity_middleware(app)

    @app.on_event("startup")
    async def _start_monitor():
        if not targets:
            logger.warning("no hay targets configurados (TARGETS_JSON)")
        if settings.SCHEDULER_ENABLED:
            await app.state.scheduler.start()

    @app.on_event("shutdown")
    async def _stop_monitor():
        await app.state.scheduler.stop()

    app.include_router(public.router)
    app.include_router(pages.router)
    return app

setup_logging(default_settings.LOG_LEVEL)
app = create_app()
