"""Turn scored articles into percentage breakdowns and a mood label.

The breakdown is derived only from already-scored articles, so the
overall figure and the per-source figures can never disagree.
"""

from __future__ import annotations

import math
from dataclasses import replace

from zorgsentiment.models import (
    SOCIAL_REDDIT,
    SOCIAL_TWITTER,
    ArticleWithSentiment,
    EngagementStats,
    SentimentBreakdown,
    SourceContribution,
)

POSITIVE_CUTOFF = 0.2
NEGATIVE_CUTOFF = -0.2

DOMINANT_SHARE = 60
MIXED_SHARE = 40

SOCIAL_TYPES = (SOCIAL_REDDIT, SOCIAL_TWITTER)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def classify_article(item: ArticleWithSentiment) -> str:
    if item.raw_score > POSITIVE_CUTOFF:
        return "positive"
    if item.raw_score < NEGATIVE_CUTOFF:
        return "negative"
    return "neutral"


def _shares(positive: float, negative: float, total: float) -> SentimentBreakdown:
    pos = round_half_up(positive / total * 100)
    neg = round_half_up(negative / total * 100)
    overflow = pos + neg - 100
    if overflow > 0:
        if pos >= neg:
            pos -= overflow
        else:
            neg -= overflow
    return SentimentBreakdown(positive=pos, neutral=100 - pos - neg, negative=neg)


def calculate_breakdown(articles: list[ArticleWithSentiment]) -> SentimentBreakdown:
    """Share of positive/neutral/negative articles. Empty input is all neutral."""
    if not articles:
        return SentimentBreakdown()
    labels = [classify_article(a) for a in articles]
    return _shares(labels.count("positive"), labels.count("negative"), len(labels))


def normalize_breakdown(positive: float, neutral: float, negative: float) -> SentimentBreakdown:
    """Rescale an arbitrary non-negative triple to integer percentages."""
    total = positive + neutral + negative
    if total <= 0:
        return SentimentBreakdown()
    return _shares(positive, negative, total)


def classify_mood(breakdown: SentimentBreakdown) -> str:
    """Fixed-threshold mood label.

    ``mixed`` needs a positive share of at least 40 that also leads the
    negative share; a negative lead below 60 stays ``neutral``.
    """
    if breakdown.positive >= DOMINANT_SHARE:
        return "positive"
    if breakdown.negative >= DOMINANT_SHARE:
        return "negative"
    if breakdown.positive >= MIXED_SHARE and breakdown.positive > breakdown.negative:
        return "mixed"
    return "neutral"


def engagement_stats(articles: list[ArticleWithSentiment]) -> EngagementStats | None:
    engaged = [a.article.engagement for a in articles if a.article.engagement]
    if not engaged:
        return None
    total_upvotes = sum(e.likes for e in engaged)
    total_comments = sum(e.comments for e in engaged)
    ratios = [e.upvote_ratio for e in engaged if e.upvote_ratio is not None]
    return EngagementStats(
        total_upvotes=total_upvotes,
        total_comments=total_comments,
        avg_upvotes=round(total_upvotes / len(engaged), 1),
        avg_comments=round(total_comments / len(engaged), 1),
        avg_upvote_ratio=round(sum(ratios) / len(ratios), 3) if ratios else None,
    )


def apply_source_breakdowns(
    contributions: list[SourceContribution],
    scored: list[ArticleWithSentiment],
) -> list[SourceContribution]:
    """Fill each contribution's breakdown from its own surviving articles."""
    by_source: dict[str, list[ArticleWithSentiment]] = {}
    for item in scored:
        by_source.setdefault(item.source_id, []).append(item)

    updated = []
    for contribution in contributions:
        own = by_source.get(contribution.source_id, [])
        stats = None
        if contribution.source_type in SOCIAL_TYPES:
            stats = engagement_stats(own)
        updated.append(replace(
            contribution,
            sentiment_breakdown=calculate_breakdown(own),
            engagement_stats=stats,
        ))
    return updated
