"""One collection cycle: fetch, score, aggregate, persist."""

from __future__ import annotations

import logging
import time
from datetime import datetime

from zorgsentiment.analyze.aggregate import (
    apply_source_breakdowns,
    calculate_breakdown,
    classify_mood,
)
from zorgsentiment.analyze.reliability import attach_reliability, compute_source_reliability
from zorgsentiment.analyze.sentiment import SentimentAnalyzer, calculate_confidence
from zorgsentiment.analyze.summary import mood_summary
from zorgsentiment.config import (
    get_analysis_settings,
    get_db_path,
    get_retention_days,
    get_source_configs,
)
from zorgsentiment.db import add_data_point, get_connection, get_history, init_db
from zorgsentiment.ingest.base import BaseAdapter
from zorgsentiment.models import SentimentDataPoint, utcnow
from zorgsentiment.orchestrator import fetch_from_all_sources

logger = logging.getLogger(__name__)


async def run_collection(
    config: dict,
    now: datetime | None = None,
    adapters: dict[str, BaseAdapter] | None = None,
) -> SentimentDataPoint:
    """Run one hourly cycle and store the resulting data point.

    Source failures are recorded on the point. Only a storage failure
    raises, and in that case nothing is written.
    """
    now = now or utcnow()
    start = time.monotonic()

    db_path = get_db_path(config)
    retention_days = get_retention_days(config)
    init_db(db_path)
    conn = get_connection(db_path)
    try:
        history = get_history(conn, retention_days)
        snapshots = compute_source_reliability(history.data_points, now)
        sources = attach_reliability(get_source_configs(config), snapshots)

        result = await fetch_from_all_sources(sources, config, adapters)

        analyzer = SentimentAnalyzer.from_config(config)
        # Everything here survived the cross-source dedup pass
        scored = analyzer.analyze_batch(
            result.articles, {s.id: s for s in sources}, now, deduplicated=True,
        )

        breakdown = calculate_breakdown(scored)
        mood = classify_mood(breakdown)
        contributions = apply_source_breakdowns(result.source_contributions, scored)
        store_articles = get_analysis_settings(config)["store_articles"]

        point = SentimentDataPoint(
            timestamp=now,
            collection_duration_ms=int((time.monotonic() - start) * 1000),
            mood_classification=mood,
            breakdown=breakdown,
            summary=mood_summary(mood, now),
            articles_analyzed=len(scored),
            source_contributions=contributions,
            source_diversity=result.source_diversity,
            confidence=calculate_confidence(scored, breakdown),
            articles=scored if store_articles else None,
            errors=result.errors or None,
        )

        if not scored:
            logger.warning("No articles collected this cycle, storing neutral data point")

        add_data_point(conn, point, now=now, retention_days=retention_days, history=history)
    finally:
        conn.close()

    logger.info(
        "Cycle complete: %s (%d%% pos, %d%% neu, %d%% neg) from %d articles in %dms",
        point.mood_classification,
        breakdown.positive, breakdown.neutral, breakdown.negative,
        point.articles_analyzed, point.collection_duration_ms,
    )
    return point
