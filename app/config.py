from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_TITLE: str = "uptime-monitor"
    APP_VERSION: str = "1.0.0"

    # Monitor
    TARGETS_JSON: str = '["https://portal.cecre.net"]'
    CHECK_INTERVAL_S: float = Field(default=30.0, gt=0)
    PROBE_TIMEOUT_S: float = Field(default=10.0, gt=0)
    PROBE_METHOD: str = "HEAD"
    LATENCY_WINDOW: int = Field(default=10, ge=1)
    HISTORY_WINDOW: int = Field(default=60, ge=1)
    SCHEDULER_ENABLED: bool = True

    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = False
        env_file = ".env"

settings = Settings()
