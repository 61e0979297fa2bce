"""
weekly.py

Turns per-day metrics into a WeeklySummary.

  - Days are ordered most recent first; the first day is selected by default.
  - Averages are plain means over the days that have data.
  - Changing the selection builds a new summary; summaries are never mutated.
"""

from collections.abc import Iterable, Sequence
from datetime import date, tzinfo
from statistics import fmean

from .bucketizer import bucketize
from .metrics import compute_day_metrics
from .models import DayMetrics, SleepInterval, WeeklyAverages, WeeklySummary
from .scoring import DEFAULT_POLICY, ScoringPolicy


def compute_averages(days: Sequence[DayMetrics]) -> WeeklyAverages:
    if not days:
        return WeeklyAverages()
    return WeeklyAverages(
        score=fmean(d.score for d in days),
        duration_seconds=fmean(d.total_sleep_seconds for d in days),
        deep_sleep_percentage=fmean(d.deep_sleep_percentage for d in days),
        sleep_efficiency=fmean(d.sleep_efficiency for d in days),
    )


def build_weekly_summary(metrics: Iterable[DayMetrics]) -> WeeklySummary:
    days = tuple(sorted(metrics, key=lambda m: m.day, reverse=True))
    return WeeklySummary(
        days=days,
        selected=days[0].day if days else None,
        averages=compute_averages(days),
    )


def select_day(summary: WeeklySummary, day: date) -> WeeklySummary:
    """Return a summary with ``day`` selected, or ``summary`` itself if that day has no data."""
    if summary.get(day) is None or summary.selected == day:
        return summary
    return summary.model_copy(update={"selected": day})


def summarize(
    intervals: Iterable[SleepInterval],
    zone: tzinfo,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> WeeklySummary:
    """Run bucketing, metrics, scoring and aggregation over one interval set."""
    buckets = bucketize(intervals, zone)
    return build_weekly_summary(compute_day_metrics(bucket, policy) for bucket in buckets.values())
