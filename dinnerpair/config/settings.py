# dinnerpair/config/settings.py

from typing import Dict

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://dinner_user:dinner_pass@db:5432/dinnerpair"
    LOG_LEVEL: str = "INFO"

    # days between "now" and the scheduled date of a new pairing event
    DINNER_LEAD_DAYS: int = 7

    # minimum days since the last event before a group is due again
    CADENCE_THRESHOLDS: Dict[str, int] = {
        "biweekly": 14,
        "monthly": 30,
        "quarterly": 90,
    }

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
