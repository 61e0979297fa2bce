import argparse
import asyncio
import sys
from collections.abc import Sequence
from datetime import timedelta
from zoneinfo import ZoneInfoNotFoundError

from aws_lambda_powertools import Logger

from .config import PolicyName, Settings, load_settings
from .errors import ComputeFailure, DataUnavailable, PermissionDenied
from .ingestion import JsonExportSource, SleepSource
from .models import WeeklySummary
from .sample_data import SampleSource
from .scoring import get_policy
from .service import SleepSummaryService
from .snapshot import SnapshotStore
from .widget import TimelineEntry, WidgetTimeline

logger = Logger(service="nightscore")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nightscore", description="Score recent nights of sleep.")
    parser.add_argument("--samples", help="JSON export with sleep samples (overrides SAMPLES_PATH)")
    parser.add_argument("--zone", help="IANA time zone used for day bucketing (overrides TIME_ZONE)")
    parser.add_argument(
        "--policy",
        choices=[p.value for p in PolicyName],
        help="scoring policy (overrides SCORING_POLICY)",
    )
    parser.add_argument("--sample-data", action="store_true", help="use randomized sample data instead of an export")
    parser.add_argument("--widget", action="store_true", help="print the widget timeline entry instead of the summary")
    return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    update: dict[str, object] = {}
    if args.samples:
        update["samples_path"] = args.samples
    if args.zone:
        update["time_zone"] = args.zone
    if args.policy:
        update["scoring_policy"] = PolicyName(args.policy)
    if args.sample_data:
        update["use_sample_data"] = True
    return settings.model_copy(update=update) if update else settings


def _source(settings: Settings) -> SleepSource:
    if settings.use_sample_data:
        logger.warning("using_sample_data")
        return SampleSource()
    if not settings.samples_path:
        raise DataUnavailable("No sleep export configured; set SAMPLES_PATH or pass --samples")
    return JsonExportSource(settings.samples_path)


def _service(settings: Settings, store: SnapshotStore) -> SleepSummaryService:
    return SleepSummaryService(
        source=_source(settings),
        zone=settings.zone,
        policy=get_policy(settings.scoring_policy),
        lookback_days=settings.lookback_days,
        snapshot_store=store,
    )


async def run(settings: Settings) -> WeeklySummary:
    store = SnapshotStore(settings.snapshot_db_path)
    try:
        return await _service(settings, store).compute_weekly_summary()
    finally:
        store.close()


def widget_timeline(settings: Settings, store: SnapshotStore) -> WidgetTimeline:
    return WidgetTimeline(
        store=store,
        service=_service(settings, store),
        freshness=timedelta(seconds=settings.snapshot_freshness_secs),
        use_sample_data=settings.use_sample_data,
    )


async def run_widget(settings: Settings) -> TimelineEntry:
    store = SnapshotStore(settings.snapshot_db_path)
    try:
        timeline = widget_timeline(settings, store)
        return await timeline.timeline(timeline.service.clock())
    finally:
        store.close()


def render(summary: WeeklySummary) -> str:
    return summary.model_dump_json(indent=2, exclude={"days": {"__all__": {"intervals"}}})


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = _apply_overrides(load_settings(), args)
    try:
        settings.zone
    except (ZoneInfoNotFoundError, ValueError):
        parser.error(f"unknown time zone: {settings.time_zone}")
    logger.setLevel(settings.log_level.value)
    logger.info(
        "nightscore_starting",
        zone=settings.time_zone,
        policy=settings.scoring_policy.value,
        lookback_days=settings.lookback_days,
    )

    try:
        if args.widget:
            output = asyncio.run(run_widget(settings)).model_dump_json(indent=2)
        else:
            output = render(asyncio.run(run(settings)))
    except (PermissionDenied, DataUnavailable, ComputeFailure) as e:
        logger.error("nightscore_failed", error=str(e), kind=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
