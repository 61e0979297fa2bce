import asyncio
import json
from collections.abc import Iterable, Mapping
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Protocol

from aws_lambda_powertools import Logger

from .errors import DataUnavailable, PermissionDenied
from .models import SleepInterval, StageKind
from .timeutil import ensure_aware, parse_timestamp

logger = Logger(service="nightscore")

# Export stage names (HealthKit long and short forms, wearable levels) to StageKind
STAGE_ALIASES: dict[str, StageKind] = {
    "awake": StageKind.AWAKE,
    "wake": StageKind.AWAKE,
    "inbed": StageKind.IN_BED,
    "asleep": StageKind.ASLEEP_UNSPECIFIED,
    "asleepunspecified": StageKind.ASLEEP_UNSPECIFIED,
    "asleepcore": StageKind.ASLEEP_CORE,
    "core": StageKind.ASLEEP_CORE,
    "light": StageKind.ASLEEP_CORE,
    "asleepdeep": StageKind.ASLEEP_DEEP,
    "deep": StageKind.ASLEEP_DEEP,
    "asleeprem": StageKind.ASLEEP_REM,
    "rem": StageKind.ASLEEP_REM,
}

HEALTHKIT_PREFIX = "hkcategoryvaluesleepanalysis"


class SleepSource(Protocol):
    """Consumed ingestion interface.

    Implementations raise PermissionDenied or DataUnavailable, and return an
    empty list when the range simply has no samples.
    """

    async def query(self, start: datetime, end: datetime, zone: tzinfo) -> list[SleepInterval]: ...


def normalize_stage(raw: Any) -> StageKind | None:
    key = str(raw).strip().replace("_", "").replace("-", "").lower()
    key = key.removeprefix(HEALTHKIT_PREFIX)
    return STAGE_ALIASES.get(key)


def intervals_from_records(records: Iterable[Mapping[str, Any]]) -> list[SleepInterval]:
    """Convert export records into intervals, skipping ones that cannot be parsed."""
    out: list[SleepInterval] = []
    for record in records:
        raw_stage = record.get("value", record.get("stage"))
        stage = normalize_stage(raw_stage)
        if stage is None:
            logger.warning("unmapped sleep stage", value=str(raw_stage))
            continue
        try:
            start = parse_timestamp(record.get("startDate", record.get("start")))
            end = parse_timestamp(record.get("endDate", record.get("end")))
        except (TypeError, ValueError, OverflowError, OSError):
            logger.warning("invalid sample timestamps", record=dict(record))
            continue
        out.append(SleepInterval(start=start, end=end, stage=stage))
    return out


def _in_range(interval: SleepInterval, start: datetime, end: datetime) -> bool:
    # Matches a strict-start-date predicate: only the start must fall inside
    return start <= interval.start < end


class InMemorySource:
    """Serves a fixed interval list, e.g. samples already fetched by the caller."""

    def __init__(self, intervals: Iterable[SleepInterval], authorized: bool = True, available: bool = True) -> None:
        self.intervals = list(intervals)
        self.authorized = authorized
        self.available = available

    async def query(self, start: datetime, end: datetime, zone: tzinfo) -> list[SleepInterval]:  # noqa: ARG002
        if not self.available:
            raise DataUnavailable("Health data is not available on this device")
        if not self.authorized:
            raise PermissionDenied("Not authorized to read sleep data")
        start, end = ensure_aware(start), ensure_aware(end)
        return [i for i in self.intervals if _in_range(i, start, end)]


class JsonExportSource:
    """Reads sleep samples from a JSON health export on disk.

    Accepted shapes: a list of records, or ``{"authorized": bool, "samples": [...]}``.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> Any:
        try:
            with self.path.open(encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise DataUnavailable(f"Sleep export not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise DataUnavailable(f"Sleep export is not valid JSON: {self.path}") from e
        except UnicodeDecodeError as e:
            raise DataUnavailable(f"Sleep export is not valid UTF-8: {self.path}") from e
        except OSError as e:
            raise DataUnavailable(f"Sleep export could not be read: {self.path}") from e

    async def query(self, start: datetime, end: datetime, zone: tzinfo) -> list[SleepInterval]:  # noqa: ARG002
        payload = await asyncio.to_thread(self._load)
        if isinstance(payload, Mapping):
            if payload.get("authorized") is False:
                raise PermissionDenied("Not authorized to read sleep data")
            records = payload.get("samples") or []
        elif isinstance(payload, list):
            records = payload
        else:
            raise DataUnavailable(f"Unsupported sleep export layout in {self.path}")

        intervals = intervals_from_records(r for r in records if isinstance(r, Mapping))
        start, end = ensure_aware(start), ensure_aware(end)
        selected = [i for i in intervals if _in_range(i, start, end)]
        logger.info("sleep_export_loaded", path=str(self.path), records=len(records), in_range=len(selected))
        return selected
