"""Fetch from every active source concurrently, tolerating per-source failure."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field

from zorgsentiment.ingest import ADAPTERS
from zorgsentiment.ingest.base import BaseAdapter, SourceError
from zorgsentiment.models import (
    STATUS_FAILED,
    STATUS_PARTIAL,
    STATUS_SUCCESS,
    Article,
    SentimentBreakdown,
    SourceConfiguration,
    SourceContribution,
    SourceDiversity,
    utcnow,
)
from zorgsentiment.process.dedup import deduplicate

logger = logging.getLogger(__name__)


@dataclass
class OrchestrationResult:
    """Unique articles plus per-source bookkeeping for one cycle."""

    articles: list[Article]
    source_contributions: list[SourceContribution]
    source_diversity: SourceDiversity
    total_duration_ms: int
    raw_article_count: int = 0
    errors: list[str] = field(default_factory=list)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def build_adapters(config: dict | None = None) -> dict[str, BaseAdapter]:
    """One adapter instance per registered source type."""
    return {source_type: cls(config) for source_type, cls in ADAPTERS.items()}


async def fetch_from_source(
    source: SourceConfiguration, adapter: BaseAdapter | None,
) -> tuple[list[Article], SourceContribution]:
    """Run one adapter. Raises on failure; the caller records it."""
    start = time.monotonic()
    if adapter is None:
        raise SourceError(f"No adapter registered for source type: {source.type}")
    if not adapter.supports_type(source.type):
        raise SourceError(f"Adapter {adapter.name} does not support {source.type}")
    adapter.ensure_valid(source)

    articles = await adapter.fetch_articles(source)

    contribution = SourceContribution(
        source_id=source.id,
        source_name=source.name,
        source_type=source.type,
        articles_collected=len(articles),
        sentiment_breakdown=SentimentBreakdown(),
        fetched_at=utcnow(),
        fetch_duration_ms=_elapsed_ms(start),
        status=STATUS_SUCCESS if articles else STATUS_PARTIAL,
    )
    return articles, contribution


def _failed_contribution(source: SourceConfiguration, exc: BaseException) -> SourceContribution:
    return SourceContribution(
        source_id=source.id,
        source_name=source.name,
        source_type=source.type,
        articles_collected=0,
        sentiment_breakdown=SentimentBreakdown(),
        fetched_at=utcnow(),
        fetch_duration_ms=0,
        status=STATUS_FAILED,
        error=str(exc) or type(exc).__name__,
    )


async def fetch_from_all_sources(
    sources: list[SourceConfiguration],
    config: dict | None = None,
    adapters: dict[str, BaseAdapter] | None = None,
) -> OrchestrationResult:
    """Fetch all active sources in parallel, then merge and deduplicate.

    A failing source never aborts the batch: its exception becomes a
    ``failed`` contribution. Merge order is configuration order, so the
    first-configured source wins dedup ties.
    """
    start = time.monotonic()
    if adapters is None:
        adapters = build_adapters(config)

    active = [s for s in sources if s.is_active]
    logger.info("Fetching from %d active sources (%d configured)", len(active), len(sources))

    results = await asyncio.gather(
        *[fetch_from_source(s, adapters.get(s.type)) for s in active],
        return_exceptions=True,
    )

    all_articles: list[Article] = []
    contributions: list[SourceContribution] = []
    errors: list[str] = []
    succeeded = failed = 0

    for source, result in zip(active, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            failed += 1
            contribution = _failed_contribution(source, result)
            contributions.append(contribution)
            errors.append(f"{source.id}: {contribution.error}")
            logger.error(
                "Source '%s' failed: %s: %s",
                source.id, type(result).__name__, result,
            )
            continue

        articles, contribution = result
        succeeded += 1
        all_articles.extend(articles)
        contributions.append(contribution)
        logger.info("Source '%s': %d articles", source.id, len(articles))

    unique = deduplicate(all_articles)

    diversity = SourceDiversity(
        total_sources=len(active),
        active_sources=succeeded,
        failed_sources=failed,
    )
    total_ms = _elapsed_ms(start)
    logger.info(
        "Fetched %d articles (%d unique) in %dms: %d ok, %d failed",
        len(all_articles), len(unique), total_ms, succeeded, failed,
    )

    return OrchestrationResult(
        articles=unique,
        source_contributions=contributions,
        source_diversity=diversity,
        total_duration_ms=total_ms,
        raw_article_count=len(all_articles),
        errors=errors,
    )
