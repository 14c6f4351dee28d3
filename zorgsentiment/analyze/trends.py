"""Trend statistics over stored hourly data points."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta

import numpy as np

from zorgsentiment.analyze.aggregate import normalize_breakdown
from zorgsentiment.models import (
    DataGap,
    MovingAveragePoint,
    SentimentBreakdown,
    SentimentDataPoint,
    SentimentSwing,
    TrendPeriod,
)

logger = logging.getLogger(__name__)

HOURLY = timedelta(hours=1)
GAP_TOLERANCE = timedelta(minutes=10)
SWING_THRESHOLD = 20


def _chronological(points: list[SentimentDataPoint]) -> list[SentimentDataPoint]:
    return sorted(points, key=lambda dp: dp.timestamp)


def _breakdown_matrix(points: list[SentimentDataPoint]) -> np.ndarray:
    return np.array(
        [[dp.breakdown.positive, dp.breakdown.neutral, dp.breakdown.negative] for dp in points],
        dtype=float,
    ).reshape(-1, 3)


def average_breakdown(points: list[SentimentDataPoint]) -> SentimentBreakdown:
    if not points:
        return SentimentBreakdown()
    means = _breakdown_matrix(points).mean(axis=0)
    return normalize_breakdown(*means)


def dominant_mood(points: list[SentimentDataPoint]) -> str:
    """Most frequent mood; on a tie the one seen first (oldest) wins."""
    if not points:
        return "neutral"
    counts = Counter(dp.mood_classification for dp in _chronological(points))
    # max() keeps the first key with the highest count, and Counter keeps insertion order
    return max(counts, key=counts.get)


def calculate_trend_period(
    points: list[SentimentDataPoint],
    start: datetime,
    end: datetime,
    interval: timedelta = HOURLY,
) -> TrendPeriod:
    """Statistics for the points inside ``[start, end]``.

    The window is inclusive at both ends, so a full week can hold one point
    more than ``expected``. ``missing_hours`` is therefore clamped at 0 and
    ``data_completeness`` capped at 100 rather than going negative or over.
    """
    in_window = _chronological([dp for dp in points if start <= dp.timestamp <= end])
    expected = int((end - start) / interval) if end > start else 0
    actual = len(in_window)
    completeness = min(actual / expected * 100, 100.0) if expected else 0.0
    logger.debug("Trend window %s..%s: %d/%d points", start, end, actual, expected)

    return TrendPeriod(
        start=start,
        end=end,
        data_points=in_window,
        average_breakdown=average_breakdown(in_window),
        dominant_mood=dominant_mood(in_window),
        total_data_points=actual,
        expected_data_points=expected,
        missing_hours=max(expected - actual, 0),
        data_completeness=round(completeness, 1),
    )


def weekly_trend(
    points: list[SentimentDataPoint], now: datetime, window_days: int = 7,
) -> TrendPeriod:
    return calculate_trend_period(points, now - timedelta(days=window_days), now)


def detect_data_gaps(
    points: list[SentimentDataPoint],
    expected_interval: timedelta = HOURLY,
    tolerance: timedelta = GAP_TOLERANCE,
) -> list[DataGap]:
    """Adjacent pairs further apart than one interval plus tolerance."""
    ordered = _chronological(points)
    limit = expected_interval + tolerance
    return [
        DataGap(start=a.timestamp, end=b.timestamp)
        for a, b in zip(ordered, ordered[1:])
        if b.timestamp - a.timestamp > limit
    ]


def calculate_sentiment_swing(before: SentimentDataPoint, after: SentimentDataPoint) -> int:
    """Change in net sentiment (positive minus negative), in points."""
    return after.breakdown.net - before.breakdown.net


def detect_significant_changes(
    points: list[SentimentDataPoint], threshold: int = SWING_THRESHOLD,
) -> list[SentimentSwing]:
    ordered = _chronological(points)
    swings = []
    for i in range(1, len(ordered)):
        swing = calculate_sentiment_swing(ordered[i - 1], ordered[i])
        if abs(swing) >= threshold:
            swings.append(SentimentSwing(data_point=ordered[i], swing=swing, index=i))
    return swings


def moving_averages(
    points: list[SentimentDataPoint], window: int = 6,
) -> list[MovingAveragePoint]:
    """Trailing average breakdown over the last ``window`` points, oldest first."""
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    ordered = _chronological(points)
    if not ordered:
        return []

    matrix = _breakdown_matrix(ordered)
    cumulative = np.vstack([np.zeros(3), np.cumsum(matrix, axis=0)])
    idx = np.arange(1, len(ordered) + 1)
    lower = np.maximum(idx - window, 0)
    means = (cumulative[idx] - cumulative[lower]) / (idx - lower)[:, None]

    return [
        MovingAveragePoint(timestamp=dp.timestamp, breakdown=normalize_breakdown(*row))
        for dp, row in zip(ordered, means)
    ]


def trend_description(period: TrendPeriod) -> str:
    avg = period.average_breakdown
    if avg.positive > 50:
        return "De stemming is overwegend positief deze week"
    if avg.negative > 50:
        return "De stemming is overwegend negatief deze week"
    if period.dominant_mood == "mixed":
        return "De meningen zijn verdeeld deze week"
    return "De stemming is neutraal deze week"
