from datetime import date, datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .timeutil import ensure_aware


class StageKind(StrEnum):
    AWAKE = "Awake"
    IN_BED = "InBed"
    ASLEEP_UNSPECIFIED = "AsleepUnspecified"
    ASLEEP_CORE = "AsleepCore"
    ASLEEP_DEEP = "AsleepDeep"
    ASLEEP_REM = "AsleepREM"


ASLEEP_STAGES: frozenset[StageKind] = frozenset(
    {StageKind.ASLEEP_UNSPECIFIED, StageKind.ASLEEP_CORE, StageKind.ASLEEP_DEEP, StageKind.ASLEEP_REM}
)
AWAKE_IN_BED_STAGES: frozenset[StageKind] = frozenset({StageKind.AWAKE, StageKind.IN_BED})


class SleepInterval(BaseModel):
    """One sample from the health source. end >= start is checked by the metric calculator."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    stage: StageKind

    @field_validator("start", "end")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        # Naive timestamps are treated as UTC
        return ensure_aware(value)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class DayBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: date
    intervals: tuple[SleepInterval, ...] = ()


class DayMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: date
    total_sleep_seconds: float = Field(ge=0)
    deep_sleep_seconds: float = Field(ge=0)
    deep_sleep_percentage: float = Field(ge=0, le=100)
    awake_in_bed_seconds: float = Field(ge=0)
    total_in_bed_seconds: float = Field(ge=0)
    sleep_efficiency: float = Field(ge=0, le=100)
    score: int = Field(ge=1, le=100)
    intervals: tuple[SleepInterval, ...] = ()

    @property
    def duration_hours(self) -> float:
        return self.total_sleep_seconds / 3600


class WeeklyAverages(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = 0.0
    duration_seconds: float = 0.0
    deep_sleep_percentage: float = 0.0
    sleep_efficiency: float = 0.0


class WeeklySummary(BaseModel):
    """Per-day metrics, most recent first, plus the selected day and averages."""

    model_config = ConfigDict(frozen=True)

    days: tuple[DayMetrics, ...] = ()
    selected: date | None = None
    averages: WeeklyAverages = WeeklyAverages()

    @model_validator(mode="after")
    def _check_order_and_selection(self) -> "WeeklySummary":
        for newer, older in zip(self.days, self.days[1:]):
            if newer.day < older.day:
                raise ValueError("days must be sorted by day descending")
        if not self.days and self.selected is not None:
            raise ValueError("selected must be None when there are no days")
        if self.days and self.get(self.selected) is None:
            raise ValueError(f"selected day {self.selected} is not present in days")
        return self

    def get(self, day: date | None) -> DayMetrics | None:
        if day is None:
            return None
        for metrics in self.days:
            if metrics.day == day:
                return metrics
        return None

    @property
    def selected_day(self) -> DayMetrics | None:
        return self.get(self.selected)


class SnapshotDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: date
    score: int
    duration_seconds: float


class Snapshot(BaseModel):
    """Compact record shared with the widget: one entry per day plus the write time."""

    model_config = ConfigDict(frozen=True)

    days: tuple[SnapshotDay, ...] = ()
    last_update: datetime

    @field_validator("last_update")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @classmethod
    def from_summary(cls, summary: WeeklySummary, now: datetime) -> "Snapshot":
        return cls(
            days=tuple(
                SnapshotDay(day=m.day, score=m.score, duration_seconds=m.total_sleep_seconds) for m in summary.days
            ),
            last_update=now,
        )

    def is_fresh(self, now: datetime, window: timedelta = timedelta(hours=1)) -> bool:
        return ensure_aware(now) - self.last_update < window
