from fastapi import Request

from services.state import HealthCheckAggregator
from services.scheduler import MonitorScheduler

def get_aggregator(request: Request) -> HealthCheckAggregator:
    return request.app.state.aggregator

def get_scheduler(request: Request) -> MonitorScheduler:
    return request.app.state.scheduler
