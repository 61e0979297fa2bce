"""
sample_data.py

SAMPLE DATA ONLY. Placeholder content for the widget preview and for demo
runs without a health export. This is the only module that uses randomness,
and the randomized paths run only when USE_SAMPLE_DATA (or --sample-data) is set.
"""

import random
from datetime import UTC, datetime, timedelta, tzinfo

from .models import SleepInterval, Snapshot, SnapshotDay, StageKind
from .timeutil import ensure_aware, local_day, start_of_day

SAMPLE_SCORES: tuple[int, ...] = (85, 72, 68, 90, 76, 65, 82)
SAMPLE_HOURS: tuple[float, ...] = (7.5, 6.2, 6.8, 8.1, 7.0, 5.5, 7.8)
JITTER_POINTS = 5

# Rough share of a sleep cycle per stage, used for demo intervals
_CYCLE: tuple[tuple[StageKind, int], ...] = (
    (StageKind.ASLEEP_CORE, 40),
    (StageKind.ASLEEP_DEEP, 20),
    (StageKind.ASLEEP_CORE, 15),
    (StageKind.ASLEEP_REM, 20),
    (StageKind.AWAKE, 5),
)


def sample_snapshot(
    now: datetime,
    zone: tzinfo,
    days: int = 7,
    jitter: bool = False,
    rng: random.Random | None = None,
) -> Snapshot:
    """Placeholder week for the widget. ``jitter`` adds +/-5 points per day."""
    rng = rng or random.Random()
    today = local_day(now, zone)
    out: list[SnapshotDay] = []
    for offset in range(days):
        score = SAMPLE_SCORES[offset % len(SAMPLE_SCORES)]
        if jitter:
            score = max(1, min(100, score + rng.randint(-JITTER_POINTS, JITTER_POINTS)))
        out.append(
            SnapshotDay(
                day=today - timedelta(days=offset),
                score=score,
                duration_seconds=SAMPLE_HOURS[offset % len(SAMPLE_HOURS)] * 3600,
            )
        )
    return Snapshot(days=tuple(out), last_update=now)


def sample_intervals(
    now: datetime,
    zone: tzinfo,
    days: int = 7,
    rng: random.Random | None = None,
) -> list[SleepInterval]:
    """Randomized nights of staged sleep, one per day, each starting shortly after local midnight."""
    rng = rng or random.Random()
    today = local_day(now, zone)
    out: list[SleepInterval] = []
    for offset in range(days):
        day = today - timedelta(days=offset)
        cursor = start_of_day(day, zone) + timedelta(minutes=rng.randint(0, 90))
        cursor = cursor.astimezone(UTC)
        out.append(SleepInterval(start=cursor, end=cursor + timedelta(minutes=10), stage=StageKind.IN_BED))
        cursor += timedelta(minutes=10)
        for _ in range(rng.randint(3, 5)):
            for stage, minutes in _CYCLE:
                length = timedelta(minutes=max(1, minutes + rng.randint(-5, 5)))
                out.append(SleepInterval(start=cursor, end=cursor + length, stage=stage))
                cursor += length
    rng.shuffle(out)
    return [i for i in out if i.start <= ensure_aware(now)]


class SampleSource:
    """SleepSource serving sample_intervals; for demos only."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    async def query(self, start: datetime, end: datetime, zone: tzinfo) -> list[SleepInterval]:
        days = max(1, (local_day(end, zone) - local_day(start, zone)).days + 1)
        return [i for i in sample_intervals(end, zone, days=days, rng=self.rng) if start <= i.start < end]
