from datetime import UTC, datetime, timedelta

from nightscore.models import SleepInterval, StageKind

# Monday 2025-01-13 00:00:00 UTC
BASE = datetime(2025, 1, 13, tzinfo=UTC)


def make_interval(start: datetime, minutes: float, stage: StageKind) -> SleepInterval:
    return SleepInterval(start=start, end=start + timedelta(minutes=minutes), stage=stage)


def night(start: datetime, *segments: tuple[StageKind, float]) -> list[SleepInterval]:
    """Consecutive intervals beginning at ``start``."""
    out: list[SleepInterval] = []
    cursor = start
    for stage, minutes in segments:
        out.append(make_interval(cursor, minutes, stage))
        cursor += timedelta(minutes=minutes)
    return out


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now
