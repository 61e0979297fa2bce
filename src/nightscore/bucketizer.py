"""
bucketizer.py

Groups raw sleep intervals into calendar-day buckets.

  - The bucket is the local calendar day of the interval's start in the zone
    passed by the caller; the host zone is never consulted.
  - An interval that crosses midnight stays whole on its start day.
  - Intervals inside a bucket are ordered by (start, end, stage).
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, tzinfo

from .models import DayBucket, SleepInterval
from .timeutil import local_day


def _order_key(interval: SleepInterval) -> tuple[object, ...]:
    return (interval.start, interval.end, interval.stage.value)


def bucketize(intervals: Iterable[SleepInterval], zone: tzinfo) -> dict[date, DayBucket]:
    grouped: dict[date, list[SleepInterval]] = defaultdict(list)
    for interval in intervals:
        grouped[local_day(interval.start, zone)].append(interval)

    return {
        day: DayBucket(day=day, intervals=tuple(sorted(items, key=_order_key)))
        for day, items in grouped.items()
    }
