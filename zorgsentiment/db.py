"""SQLite-backed retention store for the sentiment history."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

from zorgsentiment.models import SentimentDataPoint, SentimentHistory, utcnow

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
HISTORY_KEY = "sentiment-history"
STALE_AFTER = timedelta(hours=24)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class StorageError(Exception):
    """The history could not be read or persisted."""


def get_connection(db_path: str) -> sqlite3.Connection:
    """Get a SQLite connection with WAL mode enabled."""
    path = Path(db_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path))
        conn.execute("PRAGMA journal_mode=WAL")
    except (OSError, sqlite3.Error) as exc:
        raise StorageError(f"Cannot open database {db_path}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str) -> None:
    """Create all tables and set schema version."""
    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        conn.commit()
    except sqlite3.Error as exc:
        raise StorageError(f"Cannot initialize database {db_path}: {exc}") from exc
    finally:
        conn.close()


# --- History blob ---


def get_history(conn: sqlite3.Connection, retention_days: int = 7) -> SentimentHistory:
    """Read the stored history; empty when nothing has been written yet."""
    try:
        row = conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (HISTORY_KEY,)
        ).fetchone()
    except sqlite3.Error as exc:
        raise StorageError(f"Failed to read history: {exc}") from exc

    if row is None:
        return SentimentHistory(retention_days=retention_days)
    try:
        return SentimentHistory.from_dict(json.loads(row["value"]))
    except (ValueError, KeyError, TypeError) as exc:
        raise StorageError(f"Stored history is corrupt: {exc}") from exc


def put_history(conn: sqlite3.Connection, history: SentimentHistory) -> None:
    """Replace the stored history in a single transaction."""
    try:
        payload = json.dumps(history.to_dict(), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"History is not serializable: {exc}") from exc

    try:
        with conn:
            conn.execute(
                """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value, updated_at = excluded.updated_at""",
                (HISTORY_KEY, payload, utcnow().isoformat()),
            )
    except sqlite3.Error as exc:
        raise StorageError(f"Failed to write history: {exc}") from exc


def prune_history(history: SentimentHistory, now: datetime) -> SentimentHistory:
    """Drop points older than the retention window. Newest stays first."""
    cutoff = now - timedelta(days=history.retention_days)
    kept = [dp for dp in history.data_points if dp.timestamp >= cutoff]
    kept.sort(key=lambda dp: dp.timestamp, reverse=True)
    return SentimentHistory(
        version=history.version,
        last_updated=now,
        data_points=kept,
        retention_days=history.retention_days,
    )


def add_data_point(
    conn: sqlite3.Connection,
    point: SentimentDataPoint,
    now: datetime | None = None,
    retention_days: int | None = None,
    history: SentimentHistory | None = None,
) -> SentimentHistory:
    """Prepend a point, prune, and persist in one write.

    ``history`` lets a caller that already read the store skip a second read.
    """
    now = now or utcnow()
    base = history if history is not None else get_history(conn)
    combined = SentimentHistory(
        version=base.version,
        last_updated=base.last_updated,
        data_points=[point, *base.data_points],
        retention_days=retention_days if retention_days is not None else base.retention_days,
    )

    pruned = prune_history(combined, now)
    dropped = len(combined.data_points) - len(pruned.data_points)
    put_history(conn, pruned)
    logger.info(
        "Stored data point %s (%d in history, %d pruned)",
        point.timestamp.isoformat(), len(pruned.data_points), dropped,
    )
    return pruned


def cleanup_retention_window(conn: sqlite3.Connection, now: datetime | None = None) -> int:
    """Prune old points without adding one. Returns how many were removed."""
    now = now or utcnow()
    history = get_history(conn)
    pruned = prune_history(history, now)
    removed = len(history.data_points) - len(pruned.data_points)
    if removed:
        put_history(conn, pruned)
    return removed


# --- Read helpers ---


def get_current_data_point(conn: sqlite3.Connection) -> SentimentDataPoint | None:
    points = get_history(conn).data_points
    if not points:
        return None
    return max(points, key=lambda dp: dp.timestamp)


def get_data_points_in_range(
    conn: sqlite3.Connection, start: datetime, end: datetime,
) -> list[SentimentDataPoint]:
    """Points with ``start <= timestamp <= end``, newest first."""
    points = [dp for dp in get_history(conn).data_points if start <= dp.timestamp <= end]
    return sorted(points, key=lambda dp: dp.timestamp, reverse=True)


def get_data_age_seconds(
    conn: sqlite3.Connection, now: datetime | None = None,
) -> float | None:
    current = get_current_data_point(conn)
    if current is None:
        return None
    return ((now or utcnow()) - current.timestamp).total_seconds()


def is_data_stale(conn: sqlite3.Connection, now: datetime | None = None) -> bool:
    """True when there is no data or the newest point is over 24 hours old."""
    age = get_data_age_seconds(conn, now)
    return age is None or age > STALE_AFTER.total_seconds()
