import contextlib
import sqlite3
import time
from datetime import UTC, datetime

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from .models import Snapshot

logger = Logger(service="nightscore")

WEEKLY_DATA_KEY = "weeklyData"
LAST_UPDATE_KEY = "lastUpdate"


class SnapshotStore:
    """SQLite-backed key-value store for the snapshot shared with the widget.

    Keys: ``weeklyData`` holds the serialized Snapshot, ``lastUpdate`` its write time.
    Both are written in one transaction so readers never see a half-written pair.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        # check_same_thread=False because the widget and the app may read from different threads
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                updated_at INTEGER NOT NULL
            )
            """
        )
        self._conn.commit()

    def close(self) -> None:
        with contextlib.suppress(Exception):
            self._conn.close()

    def _get(self, key: str) -> bytes | None:
        cur = self._conn.cursor()
        cur.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cur.fetchone()
        return bytes(row[0]) if row else None

    def save(self, snapshot: Snapshot) -> None:
        now = int(time.time())
        blob = snapshot.model_dump_json().encode("utf-8")
        stamp = snapshot.last_update.isoformat().encode("utf-8")
        with self._conn:
            self._conn.executemany(
                "INSERT OR REPLACE INTO kv(key, value, updated_at) VALUES (?, ?, ?)",
                [(WEEKLY_DATA_KEY, blob, now), (LAST_UPDATE_KEY, stamp, now)],
            )
        logger.info("snapshot_saved", days=len(snapshot.days), last_update=snapshot.last_update.isoformat())

    def load(self) -> Snapshot | None:
        blob = self._get(WEEKLY_DATA_KEY)
        if blob is None:
            return None
        try:
            return Snapshot.model_validate_json(blob)
        except ValidationError:
            logger.warning("snapshot_unreadable", db_path=self.db_path)
            return None

    def last_update(self) -> datetime | None:
        raw = self._get(LAST_UPDATE_KEY)
        if raw is None:
            return None
        try:
            stamp = datetime.fromisoformat(raw.decode("utf-8"))
        except ValueError:
            logger.warning("last_update_unreadable", db_path=self.db_path)
            return None
        return stamp.replace(tzinfo=UTC) if stamp.tzinfo is None else stamp

    def clear(self) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM kv WHERE key IN (?, ?)", (WEEKLY_DATA_KEY, LAST_UPDATE_KEY))
