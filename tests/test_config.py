from datetime import UTC, date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from nightscore.config import LogLevel, PolicyName, Settings, load_settings
from nightscore.timeutil import local_day, lookback_window, parse_timestamp


def test_defaults() -> None:
    settings = load_settings()

    assert settings.time_zone == "UTC"
    assert settings.lookback_days == 7
    assert settings.scoring_policy is PolicyName.DURATION_DEEP
    assert settings.snapshot_freshness_secs == 3600
    assert settings.use_sample_data is False
    assert settings.samples_path is None
    assert settings.log_level is LogLevel.INFO


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIME_ZONE", "Europe/Berlin")
    monkeypatch.setenv("LOOKBACK_DAYS", "14")
    monkeypatch.setenv("SCORING_POLICY", "three_factor")
    monkeypatch.setenv("USE_SAMPLE_DATA", "true")
    monkeypatch.setenv("SAMPLES_PATH", "/tmp/export.json")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = load_settings()

    assert settings.zone == ZoneInfo("Europe/Berlin")
    assert settings.lookback_days == 14
    assert settings.scoring_policy is PolicyName.THREE_FACTOR
    assert settings.use_sample_data is True
    assert settings.samples_path == "/tmp/export.json"
    assert settings.log_level is LogLevel.DEBUG


@pytest.mark.parametrize(
    ("key", "value"),
    [("SCORING_POLICY", "random"), ("LOOKBACK_DAYS", "0"), ("TIME_ZONE", "Mars/Olympus_Mons")],
)
def test_invalid_values_raise_runtime_error(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)

    with pytest.raises(RuntimeError, match="Invalid configuration"):
        load_settings()


def test_settings_from_mapping() -> None:
    settings = Settings.model_validate({"TIME_ZONE": "Asia/Tokyo", "SNAPSHOT_FRESHNESS_SECS": 60})

    assert settings.zone == ZoneInfo("Asia/Tokyo")
    assert settings.snapshot_freshness_secs == 60


def test_parse_timestamp_variants() -> None:
    expected = datetime(2025, 1, 1, tzinfo=UTC)

    assert parse_timestamp("2025-01-01T00:00:00Z") == expected
    assert parse_timestamp("2025-01-01T00:00:00") == expected
    assert parse_timestamp("2025-01-01T01:00:00+01:00") == expected
    assert parse_timestamp(1735689600) == expected
    assert parse_timestamp(datetime(2025, 1, 1)) == expected
    with pytest.raises(TypeError):
        parse_timestamp(None)


def test_local_day_and_lookback_window() -> None:
    now = datetime(2025, 1, 15, 23, 30, tzinfo=UTC)
    plus_two = timezone(timedelta(hours=2))

    assert local_day(now, UTC) == date(2025, 1, 15)
    assert local_day(now, plus_two) == date(2025, 1, 16)

    start, end = lookback_window(now, plus_two, days=7)
    assert start == datetime(2025, 1, 10, tzinfo=plus_two)
    assert end == now

    start, _ = lookback_window(now, UTC, days=1)
    assert start == datetime(2025, 1, 15, tzinfo=UTC)
