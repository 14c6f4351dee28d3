"""Tests for breakdown aggregation and mood classification."""

from __future__ import annotations

import pytest
from conftest import make_article, make_contribution

from zorgsentiment.analyze.aggregate import (
    apply_source_breakdowns,
    calculate_breakdown,
    classify_article,
    classify_mood,
    normalize_breakdown,
)
from zorgsentiment.models import (
    SOCIAL_REDDIT,
    STATUS_FAILED,
    ArticleWithSentiment,
    EngagementMetrics,
    SentimentBreakdown,
)


def _scored(raw: float, source_id: str = "a", engagement=None, title: str = "t"):
    return ArticleWithSentiment(
        article=make_article(title=title, source_id=source_id, engagement=engagement),
        raw_score=raw,
        positive_words=[],
        negative_words=[],
        recency_weight=1.0,
        source_weight=1.0,
        final_score=raw,
    )


def _total(b: SentimentBreakdown) -> int:
    return b.positive + b.neutral + b.negative


@pytest.mark.parametrize(
    "raw, label",
    [(0.21, "positive"), (0.2, "neutral"), (0.0, "neutral"), (-0.2, "neutral"), (-0.5, "negative")],
)
def test_classify_article_cutoffs(raw, label):
    assert classify_article(_scored(raw)) == label


def test_empty_breakdown_is_all_neutral():
    assert calculate_breakdown([]) == SentimentBreakdown(positive=0, neutral=100, negative=0)


def test_breakdown_thirds_sum_to_100():
    breakdown = calculate_breakdown([_scored(0.5), _scored(0.0), _scored(-0.5)])
    assert breakdown == SentimentBreakdown(positive=33, neutral=34, negative=33)


def test_breakdown_rounding_overflow_taken_from_larger_side():
    # 1/8 -> 12.5 -> 13 and 7/8 -> 87.5 -> 88 would sum to 101
    articles = [_scored(0.5)] + [_scored(-0.5) for _ in range(7)]
    breakdown = calculate_breakdown(articles)
    assert breakdown == SentimentBreakdown(positive=13, neutral=0, negative=87)


@pytest.mark.parametrize("n_pos, n_neu, n_neg", [(1, 0, 0), (2, 1, 4), (5, 5, 1), (0, 7, 3), (3, 3, 1)])
def test_breakdown_always_sums_to_100(n_pos, n_neu, n_neg):
    articles = (
        [_scored(0.9)] * n_pos + [_scored(0.0)] * n_neu + [_scored(-0.9)] * n_neg
    )
    assert _total(calculate_breakdown(articles)) == 100


@pytest.mark.parametrize(
    "positive, neutral, negative, mood",
    [
        (61, 39, 0, "positive"),
        (60, 0, 40, "positive"),
        (30, 30, 40, "neutral"),
        (45, 15, 40, "mixed"),
        (40, 60, 0, "mixed"),
        (40, 20, 40, "neutral"),
        (0, 40, 60, "negative"),
        (10, 35, 55, "neutral"),
        (0, 100, 0, "neutral"),
    ],
)
def test_classify_mood(positive, neutral, negative, mood):
    assert classify_mood(SentimentBreakdown(positive, neutral, negative)) == mood


def test_normalize_breakdown():
    assert normalize_breakdown(1, 2, 1) == SentimentBreakdown(25, 50, 25)
    assert normalize_breakdown(1, 0, 2) == SentimentBreakdown(33, 0, 67)
    assert normalize_breakdown(0, 0, 0) == SentimentBreakdown()
    assert _total(normalize_breakdown(12.5, 0, 87.5)) == 100


def test_apply_source_breakdowns():
    contributions = [
        make_contribution("a"),
        make_contribution("r", source_type=SOCIAL_REDDIT),
        make_contribution("f", status=STATUS_FAILED, articles_collected=0),
    ]
    scored = [
        _scored(0.5, "a", title="a1"),
        _scored(-0.5, "a", title="a2"),
        _scored(0.5, "r", EngagementMetrics(likes=10, comments=4, upvote_ratio=0.9), "r1"),
        _scored(0.5, "r", EngagementMetrics(likes=20, comments=6, upvote_ratio=0.7), "r2"),
    ]

    updated = apply_source_breakdowns(contributions, scored)

    assert updated[0].sentiment_breakdown == SentimentBreakdown(50, 0, 50)
    assert updated[0].engagement_stats is None
    assert updated[1].sentiment_breakdown == SentimentBreakdown(100, 0, 0)
    stats = updated[1].engagement_stats
    assert stats.total_upvotes == 30
    assert stats.total_comments == 10
    assert stats.avg_upvotes == 15.0
    assert stats.avg_comments == 5.0
    assert stats.avg_upvote_ratio == pytest.approx(0.8)
    assert updated[2].sentiment_breakdown == SentimentBreakdown()
    # Inputs are left untouched
    assert contributions[0].sentiment_breakdown == SentimentBreakdown()
