from pydantic import BaseModel, ConfigDict, StringConstraints, field_validator
from typing import Annotated, Dict, List, Literal, Optional

UrlStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2048)]

class Target(BaseModel):
    model_config = ConfigDict(frozen=True)
    name: str
    url: str

class ProbeResult(BaseModel):
    model_config = ConfigDict(frozen=True)
    target: str
    name: str | None = None
    status: Literal["UP", "DOWN"]
    status_code: int = 0             # 0 = sin respuesta HTTP
    latency_seconds: float = 0.0
    timestamp: float
    error: str | None = None
    error_kind: Literal["transport", "http_status", "internal"] | None = None

    @property
    def up(self) -> bool:
        return self.status == "UP"

class Counters(BaseModel):
    success: int = 0
    failure: int = 0

class Summary(BaseModel):
    total: int = 0
    up: int = 0
    down: int = 0

class Snapshot(BaseModel):
    results: List[ProbeResult]
    counters: Dict[str, Counters]
    averages: Dict[str, float]
    uptime_pct: Dict[str, float]
    summary: Summary
    cycles: int = 0
    ts: Optional[float] = None

class CheckIn(BaseModel):
    url: UrlStr

    @field_validator("url")
    @classmethod
    def _http_only(cls, v: str) -> str:
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError("la URL debe empezar con http:// o https://")
        return v
