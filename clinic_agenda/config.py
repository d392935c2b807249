# config.py
import os
from pydantic_settings import BaseSettings
from pydantic import model_validator
from pydantic_settings import SettingsConfigDict
from typing import Optional
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Settings
    APP_NAME: str = "Clinic Agenda"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Calendar grid
    AGENDA_DAY_START_HOUR: int = 8
    AGENDA_DAY_END_HOUR: int = 19
    AGENDA_ROW_HEIGHT_PX: int = 64  # pixels per hour
    AGENDA_HEADER_HEIGHT_PX: int = 48
    AGENDA_SLOT_GRANULARITY_MINUTES: int = 60
    AGENDA_FIRST_WEEKDAY: int = 6  # datetime.weekday() numbering, 6 = Sunday
    MONTH_GRID_WEEKS: int = 5

    # Appointments
    AGENDA_DEFAULT_DURATION_MINUTES: int = 60
    MEETING_URL_TEMPLATE: str = "https://meet.psimanager.com/{token}"
    DEFAULT_PROFESSIONAL_ID: Optional[str] = None

    # Seed data loaded on startup
    AGENDA_SEED_FILE: Optional[str] = os.environ.get("AGENDA_SEED_FILE", None)

    @model_validator(mode="after")
    def _check_grid(self) -> "Settings":
        if not 0 <= self.AGENDA_DAY_START_HOUR < self.AGENDA_DAY_END_HOUR <= 24:
            raise ValueError("AGENDA_DAY_START_HOUR must be before AGENDA_DAY_END_HOUR, both within 0..24")
        if self.AGENDA_ROW_HEIGHT_PX <= 0 or self.AGENDA_HEADER_HEIGHT_PX < 0:
            raise ValueError("Row height must be positive and header height non-negative")
        if self.AGENDA_SLOT_GRANULARITY_MINUTES <= 0 or 60 % self.AGENDA_SLOT_GRANULARITY_MINUTES:
            raise ValueError("AGENDA_SLOT_GRANULARITY_MINUTES must divide an hour")
        if not 0 <= self.AGENDA_FIRST_WEEKDAY <= 6:
            raise ValueError("AGENDA_FIRST_WEEKDAY must be within 0..6")
        if self.MONTH_GRID_WEEKS not in (5, 6):
            raise ValueError("MONTH_GRID_WEEKS must be 5 or 6")
        if self.AGENDA_DEFAULT_DURATION_MINUTES <= 0:
            raise ValueError("AGENDA_DEFAULT_DURATION_MINUTES must be positive")
        if "{token}" not in self.MEETING_URL_TEMPLATE:
            raise ValueError("MEETING_URL_TEMPLATE must contain a {token} placeholder")
        return self


@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings: Settings = get_settings()
