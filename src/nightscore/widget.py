"""
widget.py

What this file does:
  - Decides what the companion widget shows: a fresh snapshot, a new pipeline
    run, or placeholder data.
  - Computes when the widget should ask for its next refresh.
  - Small display helpers (score band, duration and weekday labels).

This file does NOT:
  - Render anything
  - Talk to the platform scheduler
"""

from datetime import UTC, date, datetime, time, timedelta, tzinfo
from enum import StrEnum

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict

from .errors import NightScoreError
from .models import Snapshot, SnapshotDay
from .sample_data import sample_snapshot
from .service import SleepSummaryService
from .snapshot import SnapshotStore
from .timeutil import ensure_aware

logger = Logger(service="nightscore")

MAX_WIDGET_DAYS = 7
REFRESH_HOUR = 4
FRESH_REFRESH_INTERVAL = timedelta(hours=1)
MAX_REFRESH_INTERVAL = timedelta(hours=8)


class EntryOrigin(StrEnum):
    SNAPSHOT = "snapshot"
    PIPELINE = "pipeline"
    SAMPLE = "sample"
    EMPTY = "empty"


class TimelineEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    days: tuple[SnapshotDay, ...]
    origin: EntryOrigin
    next_refresh: datetime | None = None


class ScoreBand(StrEnum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


def score_band(score: int) -> ScoreBand:
    if score >= 80:
        return ScoreBand.GOOD
    if score >= 60:
        return ScoreBand.FAIR
    return ScoreBand.POOR


def format_hours(seconds: float) -> str:
    """7h 30m"""
    total = int(seconds)
    return f"{total // 3600}h {(total % 3600) // 60}m"


def format_duration(seconds: float) -> str:
    """7 hr 30 min"""
    total = int(seconds)
    return f"{total // 3600} hr {(total % 3600) // 60} min"


def day_of_week(day: date) -> str:
    return day.strftime("%a")


def next_refresh_after_fetch(now: datetime, zone: tzinfo) -> datetime:
    """Next 04:00 local time, or eight hours from now if that is sooner."""
    now = ensure_aware(now).astimezone(UTC)
    local_now = now.astimezone(zone)
    candidate = datetime.combine(local_now.date(), time(REFRESH_HOUR), tzinfo=zone).astimezone(UTC)
    if candidate <= now:
        tomorrow = local_now.date() + timedelta(days=1)
        candidate = datetime.combine(tomorrow, time(REFRESH_HOUR), tzinfo=zone).astimezone(UTC)
    # Compared in UTC: the cap is eight hours of elapsed time, not wall-clock time
    return min(candidate, now + MAX_REFRESH_INTERVAL).astimezone(zone)


class WidgetTimeline:
    def __init__(
        self,
        store: SnapshotStore,
        service: SleepSummaryService,
        freshness: timedelta = timedelta(hours=1),
        use_sample_data: bool = False,
    ) -> None:
        self.store = store
        self.service = service
        self.freshness = freshness
        self.use_sample_data = use_sample_data

    def _entry(
        self, now: datetime, snapshot: Snapshot, origin: EntryOrigin, next_refresh: datetime | None = None
    ) -> TimelineEntry:
        return TimelineEntry(
            generated_at=now,
            days=snapshot.days[:MAX_WIDGET_DAYS],
            origin=origin,
            next_refresh=next_refresh,
        )

    def _within_freshness(self, now: datetime, stamp: datetime) -> bool:
        return ensure_aware(now) - stamp < self.freshness

    def placeholder(self, now: datetime) -> TimelineEntry:
        return self._entry(now, sample_snapshot(now, self.service.zone), EntryOrigin.SAMPLE)

    def snapshot_entry(self, now: datetime) -> TimelineEntry:
        """Preview entry: whatever was stored last, however old, else sample data."""
        snapshot = self.store.load()
        if snapshot is not None:
            return self._entry(now, snapshot, EntryOrigin.SNAPSHOT)
        return self._entry(
            now, sample_snapshot(now, self.service.zone, jitter=self.use_sample_data), EntryOrigin.SAMPLE
        )

    async def timeline(self, now: datetime, force_refresh: bool = False) -> TimelineEntry:
        stored = self.store.load()
        stamp = self.store.last_update()
        fresh = stored if stored is not None and stamp is not None and self._within_freshness(now, stamp) else None
        if fresh is not None and not force_refresh:
            return self._entry(now, fresh, EntryOrigin.SNAPSHOT, now + FRESH_REFRESH_INTERVAL)

        next_refresh = next_refresh_after_fetch(now, self.service.zone)
        try:
            summary = await self.service.compute_weekly_summary()
        except NightScoreError:
            logger.exception("widget_refresh_failed", have_fresh_snapshot=fresh is not None)
            if fresh is not None:
                return self._entry(now, fresh, EntryOrigin.SNAPSHOT, next_refresh)
            return TimelineEntry(generated_at=now, days=(), origin=EntryOrigin.EMPTY, next_refresh=next_refresh)

        return self._entry(now, Snapshot.from_summary(summary, now), EntryOrigin.PIPELINE, next_refresh)
