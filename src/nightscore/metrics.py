from datetime import timedelta

from aws_lambda_powertools import Logger

from .errors import ComputeFailure
from .models import ASLEEP_STAGES, AWAKE_IN_BED_STAGES, DayBucket, DayMetrics, SleepInterval, StageKind
from .scoring import DEFAULT_POLICY, ScoringPolicy

logger = Logger(service="nightscore")


def _percentage(part: timedelta, whole: timedelta) -> float:
    if whole <= timedelta(0):
        return 0.0
    return part / whole * 100


def _check_interval(interval: SleepInterval) -> None:
    if interval.end < interval.start:
        raise ComputeFailure(
            f"Interval ends before it starts: start={interval.start.isoformat()} "
            f"end={interval.end.isoformat()} stage={interval.stage.value}"
        )


def compute_day_metrics(bucket: DayBucket, policy: ScoringPolicy = DEFAULT_POLICY) -> DayMetrics:
    """Derive durations, percentages and the score for one day bucket.

    Durations are summed as timedeltas so the deep-sleep total can never exceed
    the asleep total through float rounding. An empty bucket yields zeros.
    """
    total_sleep = timedelta(0)
    deep_sleep = timedelta(0)
    awake_in_bed = timedelta(0)

    for interval in bucket.intervals:
        _check_interval(interval)
        if interval.stage in ASLEEP_STAGES:
            total_sleep += interval.duration
            if interval.stage is StageKind.ASLEEP_DEEP:
                deep_sleep += interval.duration
        elif interval.stage in AWAKE_IN_BED_STAGES:
            awake_in_bed += interval.duration

    total_in_bed = total_sleep + awake_in_bed
    deep_pct = _percentage(deep_sleep, total_sleep)
    efficiency = _percentage(total_sleep, total_in_bed)
    duration_hours = total_sleep.total_seconds() / 3600

    metrics = DayMetrics(
        day=bucket.day,
        total_sleep_seconds=total_sleep.total_seconds(),
        deep_sleep_seconds=deep_sleep.total_seconds(),
        deep_sleep_percentage=deep_pct,
        awake_in_bed_seconds=awake_in_bed.total_seconds(),
        total_in_bed_seconds=total_in_bed.total_seconds(),
        sleep_efficiency=efficiency,
        score=policy.score(duration_hours, deep_pct, efficiency),
        intervals=bucket.intervals,
    )
    logger.debug(
        "day_metrics_computed",
        day=bucket.day.isoformat(),
        intervals=len(bucket.intervals),
        score=metrics.score,
        policy=policy.name,
    )
    return metrics
