"""Tests for the retention store."""

from __future__ import annotations

import sqlite3
from datetime import timedelta
from unittest.mock import patch

import pytest
from conftest import NOW, hours_ago, make_article, make_contribution, make_data_point

from zorgsentiment.analyze.sentiment import SentimentAnalyzer
from zorgsentiment.db import (
    HISTORY_KEY,
    StorageError,
    add_data_point,
    cleanup_retention_window,
    get_current_data_point,
    get_data_age_seconds,
    get_data_points_in_range,
    get_history,
    init_db,
    is_data_stale,
    put_history,
)
from zorgsentiment.models import (
    SOCIAL_REDDIT,
    EngagementMetrics,
    EngagementStats,
    SentimentHistory,
)


def _full_point():
    """A data point exercising every optional field."""
    analyzer = SentimentAnalyzer()
    articles = analyzer.analyze_batch(
        [
            make_article(title="Goed nieuws over de premie", published_at=hours_ago(2)),
            make_article(
                title="Zorgverzekering duurder",
                source_id="reddit-nl",
                author_handle="u/jan",
                engagement=EngagementMetrics(likes=12, comments=3, shares=11, upvote_ratio=0.9),
            ),
        ],
        {},
        NOW,
    )
    return make_data_point(
        NOW,
        positive=50,
        negative=50,
        mood="neutral",
        contributions=[
            make_contribution("nu-gezondheid"),
            make_contribution(
                "reddit-nl",
                source_type=SOCIAL_REDDIT,
                engagement_stats=EngagementStats(12, 3, 12.0, 3.0, 0.9),
            ),
            make_contribution("broken", status="failed", error="HTTP 404", articles_collected=0),
        ],
        confidence=0.4321,
        articles=articles,
        errors=["broken: HTTP 404"],
    )


def test_empty_store_returns_empty_history(db_conn):
    history = get_history(db_conn)
    assert history.data_points == []
    assert history.retention_days == 7
    assert get_current_data_point(db_conn) is None


def test_round_trip_preserves_every_field(db_conn):
    point = _full_point()

    add_data_point(db_conn, point, now=NOW)

    assert get_current_data_point(db_conn) == point


def test_round_trip_minimal_point(db_conn):
    point = make_data_point(NOW)
    add_data_point(db_conn, point, now=NOW)
    stored = get_current_data_point(db_conn)
    assert stored == point
    assert stored.articles is None
    assert stored.confidence is None


def test_add_prepends_newest_first(db_conn):
    for h in (3, 2, 1):
        add_data_point(db_conn, make_data_point(hours_ago(h)), now=NOW)

    history = get_history(db_conn)
    assert [dp.timestamp for dp in history.data_points] == [hours_ago(1), hours_ago(2), hours_ago(3)]
    assert history.last_updated == NOW


def test_add_prunes_outside_retention(db_conn):
    add_data_point(db_conn, make_data_point(NOW - timedelta(days=8)), now=NOW - timedelta(days=8))
    add_data_point(db_conn, make_data_point(NOW - timedelta(days=7)), now=NOW - timedelta(days=7))

    history = add_data_point(db_conn, make_data_point(NOW), now=NOW)

    assert [dp.timestamp for dp in history.data_points] == [NOW, NOW - timedelta(days=7)]


def test_retention_days_override(db_conn):
    add_data_point(db_conn, make_data_point(hours_ago(48)), now=hours_ago(48))
    history = add_data_point(db_conn, make_data_point(NOW), now=NOW, retention_days=1)
    assert len(history.data_points) == 1
    assert get_history(db_conn).retention_days == 1


def test_cleanup_retention_window(db_conn):
    put_history(db_conn, SentimentHistory(
        data_points=[make_data_point(NOW), make_data_point(NOW - timedelta(days=10))],
    ))
    assert cleanup_retention_window(db_conn, now=NOW) == 1
    assert len(get_history(db_conn).data_points) == 1
    assert cleanup_retention_window(db_conn, now=NOW) == 0


def test_failed_write_leaves_history_unchanged(db_conn):
    add_data_point(db_conn, make_data_point(hours_ago(1)), now=NOW)

    with patch("zorgsentiment.db.utcnow", side_effect=sqlite3.OperationalError("disk I/O error")):
        with pytest.raises(StorageError):
            add_data_point(db_conn, make_data_point(NOW), now=NOW)

    history = get_history(db_conn)
    assert [dp.timestamp for dp in history.data_points] == [hours_ago(1)]


def test_unserializable_history_raises_storage_error(db_conn):
    point = make_data_point(NOW)
    point.errors = [object()]
    with pytest.raises(StorageError):
        add_data_point(db_conn, point, now=NOW)
    assert get_history(db_conn).data_points == []


def test_corrupt_blob_raises_storage_error(db_conn):
    db_conn.execute(
        "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
        (HISTORY_KEY, "{not json", NOW.isoformat()),
    )
    db_conn.commit()
    with pytest.raises(StorageError, match="corrupt"):
        get_history(db_conn)


def test_uninitialized_database_raises_storage_error(tmp_path):
    conn = sqlite3.connect(str(tmp_path / "empty.db"))
    conn.row_factory = sqlite3.Row
    try:
        with pytest.raises(StorageError):
            get_history(conn)
    finally:
        conn.close()


def test_init_db_is_idempotent(sample_config):
    db_path = sample_config["storage"]["path"]
    init_db(db_path)
    init_db(db_path)


def test_range_and_current(db_conn):
    for h in (30, 5, 2, 0):
        add_data_point(db_conn, make_data_point(hours_ago(h)), now=NOW)

    in_range = get_data_points_in_range(db_conn, hours_ago(6), hours_ago(1))
    assert [dp.timestamp for dp in in_range] == [hours_ago(2), hours_ago(5)]
    assert get_current_data_point(db_conn).timestamp == NOW


def test_staleness(db_conn):
    assert is_data_stale(db_conn, now=NOW)
    assert get_data_age_seconds(db_conn, now=NOW) is None

    add_data_point(db_conn, make_data_point(hours_ago(2)), now=NOW)
    assert get_data_age_seconds(db_conn, now=NOW) == 7200
    assert not is_data_stale(db_conn, now=NOW)
    assert not is_data_stale(db_conn, now=hours_ago(2) + timedelta(hours=24))
    assert is_data_stale(db_conn, now=hours_ago(2) + timedelta(hours=25))
