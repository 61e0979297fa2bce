from collections.abc import Callable
from datetime import UTC, date, datetime, tzinfo

from aws_lambda_powertools import Logger

from .errors import ComputeFailure, NoSamplesInRange
from .ingestion import SleepSource
from .models import DayMetrics, SleepInterval, Snapshot, WeeklySummary
from .scoring import DEFAULT_POLICY, ScoringPolicy
from .snapshot import SnapshotStore
from .timeutil import lookback_window
from .weekly import select_day, summarize

logger = Logger(service="nightscore")

Listener = Callable[[WeeklySummary], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SleepSummaryService:
    """Runs the sleep pipeline and publishes the latest WeeklySummary.

    Each call to compute_weekly_summary() gets a generation number. A run only
    publishes if no newer call was started while it waited on the source, so a
    slow, stale query can never replace the result of a later one. Published
    summaries are replaced wholesale and pushed to subscribers.
    """

    def __init__(
        self,
        source: SleepSource,
        zone: tzinfo,
        policy: ScoringPolicy = DEFAULT_POLICY,
        lookback_days: int = 7,
        snapshot_store: SnapshotStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.source = source
        self.zone = zone
        self.policy = policy
        self.lookback_days = lookback_days
        self.snapshot_store = snapshot_store
        self.clock = clock or _utcnow
        self._generation = 0
        self._summary: WeeklySummary | None = None
        self._listeners: list[Listener] = []

    @property
    def summary(self) -> WeeklySummary | None:
        return self._summary

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for every published summary; returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def _fetch(self, start: datetime, end: datetime) -> list[SleepInterval]:
        try:
            return await self.source.query(start, end, self.zone)
        except NoSamplesInRange:
            return []

    async def compute_weekly_summary(self) -> WeeklySummary:
        self._generation += 1
        generation = self._generation
        now = self.clock()
        start, end = lookback_window(now, self.zone, self.lookback_days)

        # PermissionDenied / DataUnavailable propagate; nothing is published
        intervals = await self._fetch(start, end)
        if not intervals:
            logger.info("no_samples_in_range", start=start.isoformat(), end=end.isoformat())

        try:
            summary = summarize(intervals, self.zone, self.policy)
        except ComputeFailure:
            logger.exception("compute_failed", generation=generation, intervals=len(intervals))
            raise

        if generation != self._generation:
            logger.info("stale_result_discarded", generation=generation, latest=self._generation)
            return summary

        self._publish(summary, now)
        return summary

    def select_day(self, day: date) -> DayMetrics | None:
        if self._summary is None:
            return None
        metrics = self._summary.get(day)
        if metrics is not None and self._summary.selected != day:
            self._publish(select_day(self._summary, day))
        return metrics

    def _publish(self, summary: WeeklySummary, now: datetime | None = None) -> None:
        self._summary = summary
        if now is not None and self.snapshot_store is not None:
            self.snapshot_store.save(Snapshot.from_summary(summary, now))
        logger.info(
            "summary_published",
            days=len(summary.days),
            selected=summary.selected.isoformat() if summary.selected else None,
        )
        for listener in list(self._listeners):
            listener(summary)
