# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    DATABASE_URL: str = Field(default="sqlite:///./tickets.db")
    APP_NAME: str = "Support Queue"
    APP_DESC: str = "Support ticket queue: VIP first, FIFO within priority"
    APP_VERSION: str = "1.0.0"

    # CORS origins, comma separated
    CORS_ORIGINS: str | None = None

    LOG_LEVEL: str = "INFO"

    # Agent identity used by the queue controller
    AGENT_ID: str = "agent-1"

    # Simulated store behaviour
    ASSIGN_FAILURE_RATE: float = Field(default=0.1, ge=0.0, le=1.0)
    STORE_LATENCY_MIN_MS: int = Field(default=0, ge=0)
    STORE_LATENCY_MAX_MS: int = Field(default=0, ge=0)
    SEED_DEMO_DATA: bool = False

    # Remote store client
    STORE_BASE_URL: str = "http://localhost:8000"
    STORE_TIMEOUT: float = 10.0

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def cors_origins(self) -> list[str]:
        if not self.CORS_ORIGINS:
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
