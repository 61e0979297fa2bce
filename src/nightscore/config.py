import os
from datetime import tzinfo
from enum import StrEnum
from typing import Final
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError


class LogLevel(StrEnum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


class PolicyName(StrEnum):
    DURATION_DEEP = "duration_deep"
    THREE_FACTOR = "three_factor"


class Settings(BaseModel):
    time_zone: str = Field(default="UTC", validation_alias="TIME_ZONE")
    lookback_days: int = Field(default=7, ge=1, validation_alias="LOOKBACK_DAYS")
    scoring_policy: PolicyName = Field(default=PolicyName.DURATION_DEEP, validation_alias="SCORING_POLICY")

    # Snapshot shared with the widget
    snapshot_db_path: str = Field(default="./nightscore.db", validation_alias="SNAPSHOT_DB_PATH")
    snapshot_freshness_secs: int = Field(default=3600, ge=0, validation_alias="SNAPSHOT_FRESHNESS_SECS")

    samples_path: str | None = Field(default=None, validation_alias="SAMPLES_PATH")
    use_sample_data: bool = Field(default=False, validation_alias="USE_SAMPLE_DATA")

    log_level: LogLevel = Field(default=LogLevel.INFO, validation_alias="LOG_LEVEL")

    @property
    def zone(self) -> tzinfo:
        return ZoneInfo(self.time_zone)


ENV_KEYS: Final[tuple[str, ...]] = (
    "TIME_ZONE",
    "LOOKBACK_DAYS",
    "SCORING_POLICY",
    "SNAPSHOT_DB_PATH",
    "SNAPSHOT_FRESHNESS_SECS",
    "SAMPLES_PATH",
    "USE_SAMPLE_DATA",
    "LOG_LEVEL",
)


def load_settings() -> Settings:
    # Load .env if present (does nothing if file missing)
    load_dotenv()
    data: dict[str, str] = {}
    for key in ENV_KEYS:
        if key in os.environ:
            data[key] = os.environ[key]

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        bad = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise RuntimeError(f"Invalid configuration: {', '.join(bad)}") from e

    try:
        settings.zone
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise RuntimeError(f"Invalid configuration: TIME_ZONE={settings.time_zone!r}") from e
    return settings
