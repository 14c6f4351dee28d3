"""Lexicon-based sentiment scoring with recency and source weighting."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime

from zorgsentiment.analyze.lexicon import LABELS, NEGATORS
from zorgsentiment.config import get_analysis_settings
from zorgsentiment.models import (
    Article,
    ArticleWithSentiment,
    SentimentBreakdown,
    SourceConfiguration,
)

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[\w'-]+")

MIN_RECENCY_WEIGHT = 0.5
MAX_RECENCY_WEIGHT = 1.0

# Source weight policy
INACTIVE_SOURCE_WEIGHT = 0.5
UNHEALTHY_SOURCE_WEIGHT = 0.7
HEALTHY_WEIGHT_FLOOR = 0.8
HEALTHY_WEIGHT_SPAN = 0.2


@dataclass
class LexiconResult:
    score: int
    comparative: float
    positive: list[str] = field(default_factory=list)
    negative: list[str] = field(default_factory=list)
    token_count: int = 0


class LexiconScorer:
    """Sum lexicon weights over tokens, inverting terms that follow a negator."""

    def __init__(
        self,
        labels: Mapping[str, int] = LABELS,
        negators: frozenset[str] = NEGATORS,
    ):
        self.labels = labels
        self.negators = negators

    @staticmethod
    def tokenize(text: str) -> list[str]:
        return _TOKEN_RE.findall((text or "").lower())

    def analyze(self, text: str) -> LexiconResult:
        tokens = self.tokenize(text)
        score = 0
        positive: list[str] = []
        negative: list[str] = []

        for i, token in enumerate(tokens):
            weight = self.labels.get(token)
            if not weight:
                continue
            if i > 0 and tokens[i - 1] in self.negators:
                weight = -weight
            score += weight
            if weight > 0:
                positive.append(token)
            else:
                negative.append(token)

        comparative = score / len(tokens) if tokens else 0.0
        return LexiconResult(
            score=score,
            comparative=comparative,
            positive=positive,
            negative=negative,
            token_count=len(tokens),
        )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def recency_weight(
    published_at: datetime, now: datetime, half_life_hours: float = 24.0,
) -> float:
    """Decay from 1.0 for fresh articles toward 0.5 for old ones.

    Articles timestamped in the future count as fresh.
    """
    if half_life_hours <= 0:
        raise ValueError(f"half_life_hours must be positive, got {half_life_hours}")
    age_hours = (now - published_at).total_seconds() / 3600
    if age_hours <= 0:
        return MAX_RECENCY_WEIGHT
    weight = 0.5 + 0.5 * math.exp(-age_hours / half_life_hours)
    return _clamp(weight, MIN_RECENCY_WEIGHT, MAX_RECENCY_WEIGHT)


def source_weight(source: SourceConfiguration | None) -> float:
    """Weight derived from the source's reliability snapshot (1.0 when unknown)."""
    if source is None or source.reliability is None:
        return 1.0
    rel = source.reliability
    if rel.is_inactive:
        return INACTIVE_SOURCE_WEIGHT
    if not rel.is_healthy:
        return UNHEALTHY_SOURCE_WEIGHT
    rate = _clamp(rel.success_rate, 0.0, 100.0)
    weight = HEALTHY_WEIGHT_FLOOR + rate / 100 * HEALTHY_WEIGHT_SPAN
    return _clamp(weight, 0.5, 1.0)


def assign_contribution_percentages(
    batch: list[ArticleWithSentiment],
) -> list[ArticleWithSentiment]:
    """Each article's share of the batch's total absolute weighted score.

    When every article is neutral the share is split evenly.
    """
    if not batch:
        return []
    total = sum(abs(item.final_score) for item in batch)
    if total == 0:
        even = 100 / len(batch)
        return [replace(item, contribution_percentage=even) for item in batch]
    return [
        replace(item, contribution_percentage=abs(item.final_score) / total * 100)
        for item in batch
    ]


def calculate_confidence(
    articles: list[ArticleWithSentiment], breakdown: SentimentBreakdown,
) -> float:
    """0-1 confidence from sentiment-word volume, sample size and polarity."""
    if not articles:
        return 0.0
    word_count = sum(len(a.positive_words) + len(a.negative_words) for a in articles)
    confidence = (
        min(word_count / 50, 0.5)
        + min(len(articles) / 20, 0.3)
        + abs(breakdown.positive - breakdown.negative) / 100 * 0.2
    )
    return round(min(confidence, 1.0), 4)


class SentimentAnalyzer:
    """Score articles and weight them by recency and source reliability."""

    def __init__(
        self,
        lexicon: Mapping[str, int] = LABELS,
        negators: frozenset[str] = NEGATORS,
        half_life_hours: float = 24.0,
    ):
        self.scorer = LexiconScorer(lexicon, negators)
        self.half_life_hours = half_life_hours

    @classmethod
    def from_config(cls, config: dict) -> SentimentAnalyzer:
        settings = get_analysis_settings(config)
        return cls(half_life_hours=settings["recency_half_life_hours"])

    def analyze(self, text: str) -> LexiconResult:
        return self.scorer.analyze(text)

    def analyze_article(
        self,
        article: Article,
        source: SourceConfiguration | None,
        now: datetime,
        deduplicated: bool = False,
    ) -> ArticleWithSentiment:
        result = self.scorer.analyze(article.content or f"{article.title} {article.description}")
        raw = _clamp(result.comparative, -1.0, 1.0)
        recency = recency_weight(article.published_at, now, self.half_life_hours)
        weight = source_weight(source)
        return ArticleWithSentiment(
            article=article,
            raw_score=raw,
            positive_words=result.positive,
            negative_words=result.negative,
            recency_weight=recency,
            source_weight=weight,
            final_score=raw * recency * weight,
            deduplicated=deduplicated,
        )

    def analyze_batch(
        self,
        articles: list[Article],
        sources_by_id: Mapping[str, SourceConfiguration],
        now: datetime,
        deduplicated: bool = False,
    ) -> list[ArticleWithSentiment]:
        """Score a batch; ``deduplicated`` marks articles that already passed dedup."""
        scored = [
            self.analyze_article(a, sources_by_id.get(a.source_id), now, deduplicated)
            for a in articles
        ]
        scored = assign_contribution_percentages(scored)
        logger.info(
            "Scored %d articles (%d with sentiment words)",
            len(scored),
            sum(1 for s in scored if s.positive_words or s.negative_words),
        )
        return scored
