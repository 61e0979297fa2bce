from datetime import UTC, date, datetime, timedelta

from nightscore.models import Snapshot, SnapshotDay, StageKind, WeeklySummary
from nightscore.snapshot import SnapshotStore
from nightscore.weekly import summarize

from .utils import BASE, night

NOW = datetime(2025, 1, 15, 9, 0, tzinfo=UTC)


def _summary() -> WeeklySummary:
    return summarize(
        [
            *night(BASE, (StageKind.ASLEEP_CORE, 401.5), (StageKind.ASLEEP_DEEP, 61)),
            *night(BASE + timedelta(days=1), (StageKind.ASLEEP_REM, 333.25)),
        ],
        UTC,
    )


def test_from_summary_keeps_day_score_duration() -> None:
    summary = _summary()

    snapshot = Snapshot.from_summary(summary, NOW)

    assert snapshot.last_update == NOW
    assert [(d.day, d.score, d.duration_seconds) for d in snapshot.days] == [
        (m.day, m.score, m.total_sleep_seconds) for m in summary.days
    ]


def test_serialization_round_trip() -> None:
    summary = _summary()
    snapshot = Snapshot.from_summary(summary, NOW)

    restored = Snapshot.model_validate_json(snapshot.model_dump_json())

    assert restored == snapshot
    assert [(d.day, d.score, d.duration_seconds) for d in restored.days] == [
        (m.day, m.score, m.total_sleep_seconds) for m in summary.days
    ]


def test_freshness_window() -> None:
    snapshot = Snapshot(days=(), last_update=NOW)

    assert snapshot.is_fresh(NOW + timedelta(minutes=59))
    assert not snapshot.is_fresh(NOW + timedelta(hours=1))
    assert not snapshot.is_fresh(NOW + timedelta(minutes=10), window=timedelta(minutes=5))


def test_store_save_and_load(tmp_path) -> None:  # type: ignore[no-untyped-def]
    store = SnapshotStore(str(tmp_path / "nightscore.db"))
    snapshot = Snapshot.from_summary(_summary(), NOW)

    assert store.load() is None
    assert store.last_update() is None

    store.save(snapshot)

    assert store.load() == snapshot
    assert store.last_update() == NOW
    store.close()


def test_store_survives_reopen_and_replaces(tmp_path) -> None:  # type: ignore[no-untyped-def]
    db_path = str(tmp_path / "nightscore.db")
    first = SnapshotStore(db_path)
    day = SnapshotDay(day=date(2025, 1, 13), score=70, duration_seconds=25200.0)
    first.save(Snapshot(days=(day,), last_update=NOW))
    first.close()

    second = SnapshotStore(db_path)
    loaded = second.load()
    assert loaded is not None
    assert loaded.days[0].score == 70

    later = NOW + timedelta(hours=2)
    second.save(Snapshot(days=(), last_update=later))
    assert second.load() == Snapshot(days=(), last_update=later)
    assert second.last_update() == later

    second.clear()
    assert second.load() is None
    second.close()


def test_store_ignores_unreadable_blob(tmp_path) -> None:  # type: ignore[no-untyped-def]
    store = SnapshotStore(str(tmp_path / "nightscore.db"))
    with store._conn:
        store._conn.execute("INSERT INTO kv(key, value, updated_at) VALUES ('weeklyData', ?, 0)", (b"{not json",))

    assert store.load() is None
    store.close()


def test_store_ignores_unreadable_last_update(tmp_path) -> None:  # type: ignore[no-untyped-def]
    store = SnapshotStore(str(tmp_path / "nightscore.db"))
    with store._conn:
        store._conn.execute("INSERT INTO kv(key, value, updated_at) VALUES ('lastUpdate', ?, 0)", (b"yesterday",))

    assert store.last_update() is None
    store.close()
