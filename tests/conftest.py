"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from zorgsentiment.config import load_config
from zorgsentiment.db import get_connection, init_db
from zorgsentiment.models import (
    STATUS_SUCCESS,
    Article,
    SentimentBreakdown,
    SentimentDataPoint,
    SourceContribution,
    SourceDiversity,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_config(tmp_path):
    """Minimal config for testing (no real credentials)."""
    config_text = """
sources:
  - id: nu-gezondheid
    name: NU.nl Gezondheid
    type: RSS
    url: "https://www.nu.nl/rss/Gezondheid"
  - id: skipr
    name: Skipr
    type: RSS
    url: "https://www.skipr.nl/feed/"
    category: healthcare-specific
  - id: old-feed
    name: Old Feed
    type: RSS
    url: "https://example.com/old.xml"
    is_active: false
  - id: reddit-nl
    name: r/thenetherlands
    type: SOCIAL_REDDIT
    reddit:
      subreddit: thenetherlands
      include_comments: false

reddit:
  client_id: "test-id"
  client_secret: "test-secret"

rss:
  max_retries: 0

storage:
  path: "DB_PATH_PLACEHOLDER"
  retention_days: 7
"""
    db_path = str(tmp_path / "test.db")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text.replace("DB_PATH_PLACEHOLDER", db_path))
    return load_config(str(cfg_path))


@pytest.fixture
def db_conn(sample_config):
    """Initialized test database connection."""
    db_path = sample_config["storage"]["path"]
    init_db(db_path)
    conn = get_connection(db_path)
    yield conn
    conn.close()


def make_article(
    title: str = "Zorgpremie stijgt volgend jaar",
    description: str = "De zorgpremie gaat omhoog, meldt het ministerie.",
    source_id: str = "nu-gezondheid",
    published_at: datetime | None = None,
    content: str | None = None,
    **kwargs,
) -> Article:
    """Explicit article builder; content defaults to title + description."""
    return Article(
        title=title,
        description=description,
        content=content if content is not None else f"{title} {description}",
        link=kwargs.pop("link", "https://example.com/" + title.lower().replace(" ", "-")),
        published_at=published_at or NOW,
        source_id=source_id,
        **kwargs,
    )


def make_data_point(
    timestamp: datetime,
    positive: int = 20,
    negative: int = 20,
    mood: str = "neutral",
    contributions: list[SourceContribution] | None = None,
    **kwargs,
) -> SentimentDataPoint:
    """Explicit data point builder with a breakdown that sums to 100."""
    return SentimentDataPoint(
        timestamp=timestamp,
        collection_duration_ms=kwargs.pop("collection_duration_ms", 1500),
        mood_classification=mood,
        breakdown=SentimentBreakdown(
            positive=positive, neutral=100 - positive - negative, negative=negative,
        ),
        summary=kwargs.pop("summary", "De stemming over zorg is neutraal"),
        articles_analyzed=kwargs.pop("articles_analyzed", 10),
        source_contributions=contributions or [],
        source_diversity=kwargs.pop("source_diversity", SourceDiversity(1, 1, 0)),
        **kwargs,
    )


def make_contribution(
    source_id: str,
    status: str = STATUS_SUCCESS,
    fetched_at: datetime | None = None,
    duration_ms: int = 200,
    **kwargs,
) -> SourceContribution:
    return SourceContribution(
        source_id=source_id,
        source_name=kwargs.pop("source_name", source_id),
        source_type=kwargs.pop("source_type", "RSS"),
        articles_collected=kwargs.pop("articles_collected", 5),
        sentiment_breakdown=kwargs.pop("sentiment_breakdown", SentimentBreakdown()),
        fetched_at=fetched_at or NOW,
        fetch_duration_ms=duration_ms,
        status=status,
        **kwargs,
    )


def hours_ago(hours: float) -> datetime:
    return NOW - timedelta(hours=hours)
