import logging, time
from fastapi import Request
from typing import Callable

logger = logging.getLogger("monitor.access")

def activity_middleware(app):
    @app.middleware("http")
    async def log_activity(request: Request, call_next: Callable):
        # no registrar /health
        if request.url.path == "/health":
            return await call_next(request)

        started = time.monotonic()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            ip = request.client.host if request.client else "-"
            elapsed_ms = int((time.monotonic() - started) * 1000)
            logger.info(f"{ip} {request.method} {request.url.path} {status_code} {elapsed_ms}ms")
