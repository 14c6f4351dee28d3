"""Derive per-source reliability from the stored collection history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from zorgsentiment.models import (
    STATUS_FAILED,
    STATUS_SUCCESS,
    SentimentDataPoint,
    SourceConfiguration,
    SourceReliability,
)

logger = logging.getLogger(__name__)

HEALTHY_SUCCESS_RATE = 90.0
# Three days of hourly failures
INACTIVE_AFTER_FAILURES = 72


@dataclass
class _Tally:
    attempts: int = 0
    successes: int = 0
    consecutive_failures: int = 0
    total_success_ms: int = 0
    last_success_at: datetime | None = None
    last_failure_at: datetime | None = None

    def snapshot(self) -> SourceReliability:
        rate = self.successes / self.attempts * 100 if self.attempts else 100.0
        avg_ms = self.total_success_ms // self.successes if self.successes else 0
        return SourceReliability(
            success_rate=round(rate, 1),
            avg_response_time_ms=avg_ms,
            consecutive_failures=self.consecutive_failures,
            last_success_at=self.last_success_at,
            last_failure_at=self.last_failure_at,
            is_healthy=rate >= HEALTHY_SUCCESS_RATE,
            is_inactive=self.consecutive_failures >= INACTIVE_AFTER_FAILURES,
        )


def compute_source_reliability(
    points: list[SentimentDataPoint], now: datetime, window_days: int = 7,
) -> dict[str, SourceReliability]:
    """Reliability snapshot per source id over the trailing window.

    A success resets the consecutive-failure counter; so does a partial
    fetch, which reached the source but found nothing.
    """
    cutoff = now - timedelta(days=window_days)
    tallies: dict[str, _Tally] = {}

    for point in sorted(points, key=lambda dp: dp.timestamp):
        if point.timestamp < cutoff:
            continue
        for contribution in point.source_contributions:
            tally = tallies.setdefault(contribution.source_id, _Tally())
            tally.attempts += 1
            when = contribution.fetched_at or point.timestamp
            if contribution.status == STATUS_FAILED:
                tally.consecutive_failures += 1
                tally.last_failure_at = when
                continue
            tally.consecutive_failures = 0
            if contribution.status == STATUS_SUCCESS:
                tally.successes += 1
                tally.total_success_ms += contribution.fetch_duration_ms
                tally.last_success_at = when

    return {source_id: tally.snapshot() for source_id, tally in tallies.items()}


def attach_reliability(
    sources: list[SourceConfiguration],
    snapshots: dict[str, SourceReliability],
) -> list[SourceConfiguration]:
    """Sources carrying their computed snapshot; one set in config is kept."""
    attached = []
    for source in sources:
        snapshot = snapshots.get(source.id)
        if source.reliability is None and snapshot is not None:
            source = replace(source, reliability=snapshot)
            if not snapshot.is_healthy or snapshot.is_inactive:
                logger.warning(
                    "Source '%s' degraded: %.1f%% success, %d consecutive failures",
                    source.id, snapshot.success_rate, snapshot.consecutive_failures,
                )
        attached.append(source)
    return attached
