from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LEDGER_", extra="ignore")

    database_url: str = "sqlite:///cycleledger.db"
    log_level: str = "INFO"
    past_cycles: int = Field(default=11, ge=0)
    future_cycles: int = Field(default=1, ge=0)
    scheduler_enabled: bool = False
    scheduler_interval_minutes: int = Field(default=60, ge=1)


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()
