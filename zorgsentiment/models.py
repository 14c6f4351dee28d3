"""Core data models for the sentiment pipeline.

Attributes are snake_case; ``to_dict``/``from_dict`` use the camelCase
field names that the dashboard and API read.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Source types
RSS = "RSS"
SOCIAL_REDDIT = "SOCIAL_REDDIT"
SOCIAL_TWITTER = "SOCIAL_TWITTER"
API = "API"
SOURCE_TYPES = (RSS, SOCIAL_REDDIT, SOCIAL_TWITTER, API)

# Mood classifications, in display order
MOODS = ("positive", "negative", "mixed", "neutral")

# Per-source fetch status
STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _dt_str(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


def _parse_dt(s: str | None) -> datetime | None:
    if not s:
        return None
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def make_fingerprint(title: str, content: str) -> str:
    """Stable hash over normalized title + content, for exact dedup."""
    normalized = f"{title} {content}".lower().strip()
    return hashlib.sha256(normalized.encode()).hexdigest()


# --- Source configuration ---


@dataclass(frozen=True)
class RedditSourceConfig:
    """Reddit-specific tunables for a source."""

    subreddit: str
    time_window: str = "day"  # day, week, month
    min_score: int = 5
    min_comments: int = 3
    max_posts: int = 20
    include_comments: bool = True
    top_comments_count: int = 5
    min_upvote_ratio: float = 0.4
    max_content_length: int = 2000

    @classmethod
    def from_dict(cls, data: dict) -> RedditSourceConfig:
        return cls(
            subreddit=str(data.get("subreddit", "")),
            time_window=data.get("time_window", "day"),
            min_score=data.get("min_score", 5),
            min_comments=data.get("min_comments", 3),
            max_posts=data.get("max_posts", 20),
            include_comments=data.get("include_comments", True),
            top_comments_count=data.get("top_comments_count", 5),
            min_upvote_ratio=data.get("min_upvote_ratio", 0.4),
            max_content_length=data.get("max_content_length", 2000),
        )


@dataclass(frozen=True)
class SourceReliability:
    """Rolling reliability snapshot for a source."""

    success_rate: float = 100.0  # 0-100
    avg_response_time_ms: int = 0
    consecutive_failures: int = 0
    last_success_at: datetime | None = None
    last_failure_at: datetime | None = None
    is_healthy: bool = True
    is_inactive: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> SourceReliability:
        return cls(
            success_rate=float(data.get("success_rate", 100.0)),
            avg_response_time_ms=int(data.get("avg_response_time_ms", 0)),
            consecutive_failures=int(data.get("consecutive_failures", 0)),
            last_success_at=_parse_dt(data.get("last_success_at")),
            last_failure_at=_parse_dt(data.get("last_failure_at")),
            is_healthy=bool(data.get("is_healthy", True)),
            is_inactive=bool(data.get("is_inactive", False)),
        )


@dataclass(frozen=True)
class SourceConfiguration:
    """A configured data source. Immutable for the length of a run."""

    id: str
    name: str
    type: str
    url: str = ""
    category: str = "general"  # general, healthcare-specific
    is_active: bool = True
    max_articles: int = 30
    timeout: float = 10.0  # seconds
    priority: int = 1
    custom_headers: dict[str, str] = field(default_factory=dict)
    reliability: SourceReliability | None = None
    reddit: RedditSourceConfig | None = None

    @classmethod
    def from_dict(cls, data: dict) -> SourceConfiguration:
        reliability = data.get("reliability")
        reddit = data.get("reddit")
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            type=str(data.get("type", "")),
            url=str(data.get("url", "")),
            category=data.get("category", "general"),
            is_active=bool(data.get("is_active", True)),
            max_articles=data.get("max_articles", 30),
            timeout=data.get("timeout", 10.0),
            priority=data.get("priority", 1),
            custom_headers=dict(data.get("custom_headers") or {}),
            reliability=SourceReliability.from_dict(reliability) if reliability else None,
            reddit=RedditSourceConfig.from_dict(reddit) if reddit else None,
        )


# --- Articles ---


@dataclass
class EngagementMetrics:
    """Engagement counters for social posts."""

    likes: int = 0
    comments: int = 0
    shares: int | None = None
    upvote_ratio: float | None = None


@dataclass
class Article:
    """A single normalized article from any source."""

    title: str
    description: str
    content: str
    link: str
    published_at: datetime
    source_id: str
    fingerprint: str = ""
    author_handle: str | None = None
    engagement: EngagementMetrics | None = None

    def __post_init__(self):
        if not self.fingerprint:
            self.fingerprint = make_fingerprint(self.title, self.content)


@dataclass
class ArticleWithSentiment:
    """An article plus its sentiment score and weights for one cycle."""

    article: Article
    raw_score: float
    positive_words: list[str]
    negative_words: list[str]
    recency_weight: float
    source_weight: float
    final_score: float
    contribution_percentage: float = 0.0
    deduplicated: bool = False

    @property
    def id(self) -> str:
        return f"{self.article.source_id}-{self.article.fingerprint[:8]}"

    @property
    def source_id(self) -> str:
        return self.article.source_id

    def to_dict(self) -> dict[str, Any]:
        a = self.article
        engagement = a.engagement
        return {
            "id": self.id,
            "title": a.title,
            "excerpt": a.description,
            "content": a.content,
            "link": a.link,
            "pubDate": _dt_str(a.published_at),
            "sourceId": a.source_id,
            "deduplicationHash": a.fingerprint,
            "authorHandle": a.author_handle,
            "upvotes": engagement.likes if engagement else None,
            "comments": engagement.comments if engagement else None,
            "shares": engagement.shares if engagement else None,
            "upvoteRatio": engagement.upvote_ratio if engagement else None,
            "rawSentimentScore": self.raw_score,
            "positiveWords": list(self.positive_words),
            "negativeWords": list(self.negative_words),
            "recencyWeight": self.recency_weight,
            "sourceWeight": self.source_weight,
            "finalWeightedScore": self.final_score,
            "contributionPercentage": self.contribution_percentage,
            "deduplicated": self.deduplicated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ArticleWithSentiment:
        engagement = None
        if data.get("upvotes") is not None or data.get("comments") is not None:
            engagement = EngagementMetrics(
                likes=data.get("upvotes") or 0,
                comments=data.get("comments") or 0,
                shares=data.get("shares"),
                upvote_ratio=data.get("upvoteRatio"),
            )
        article = Article(
            title=data["title"],
            description=data.get("excerpt", ""),
            content=data.get("content", ""),
            link=data.get("link", ""),
            published_at=_parse_dt(data["pubDate"]),
            source_id=data["sourceId"],
            fingerprint=data.get("deduplicationHash", ""),
            author_handle=data.get("authorHandle"),
            engagement=engagement,
        )
        return cls(
            article=article,
            raw_score=data["rawSentimentScore"],
            positive_words=list(data.get("positiveWords", [])),
            negative_words=list(data.get("negativeWords", [])),
            recency_weight=data["recencyWeight"],
            source_weight=data["sourceWeight"],
            final_score=data["finalWeightedScore"],
            contribution_percentage=data.get("contributionPercentage", 0.0),
            deduplicated=data.get("deduplicated", False),
        )


# --- Aggregates ---


@dataclass(frozen=True)
class SentimentBreakdown:
    """Positive/neutral/negative percentages. Always sums to 100."""

    positive: int = 0
    neutral: int = 100
    negative: int = 0

    @property
    def net(self) -> int:
        return self.positive - self.negative

    def to_dict(self) -> dict[str, int]:
        return {
            "positive": self.positive,
            "neutral": self.neutral,
            "negative": self.negative,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SentimentBreakdown:
        return cls(
            positive=int(data.get("positive", 0)),
            neutral=int(data.get("neutral", 0)),
            negative=int(data.get("negative", 0)),
        )


@dataclass
class EngagementStats:
    """Aggregated engagement for one social source in one cycle."""

    total_upvotes: int = 0
    total_comments: int = 0
    avg_upvotes: float = 0.0
    avg_comments: float = 0.0
    avg_upvote_ratio: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalUpvotes": self.total_upvotes,
            "totalComments": self.total_comments,
            "avgUpvotes": self.avg_upvotes,
            "avgComments": self.avg_comments,
            "avgUpvoteRatio": self.avg_upvote_ratio,
        }

    @classmethod
    def from_dict(cls, data: dict) -> EngagementStats:
        return cls(
            total_upvotes=data.get("totalUpvotes", 0),
            total_comments=data.get("totalComments", 0),
            avg_upvotes=data.get("avgUpvotes", 0.0),
            avg_comments=data.get("avgComments", 0.0),
            avg_upvote_ratio=data.get("avgUpvoteRatio"),
        )


@dataclass
class SourceContribution:
    """What one source contributed to one collection cycle."""

    source_id: str
    source_name: str
    source_type: str
    articles_collected: int
    sentiment_breakdown: SentimentBreakdown
    fetched_at: datetime
    fetch_duration_ms: int
    status: str  # success, partial, failed
    error: str | None = None
    engagement_stats: EngagementStats | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "sourceId": self.source_id,
            "sourceName": self.source_name,
            "sourceType": self.source_type,
            "articlesCollected": self.articles_collected,
            "sentimentBreakdown": self.sentiment_breakdown.to_dict(),
            "fetchedAt": _dt_str(self.fetched_at),
            "fetchDurationMs": self.fetch_duration_ms,
            "status": self.status,
        }
        if self.error is not None:
            data["error"] = self.error
        if self.engagement_stats is not None:
            data["engagementStats"] = self.engagement_stats.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> SourceContribution:
        stats = data.get("engagementStats")
        return cls(
            source_id=data["sourceId"],
            source_name=data.get("sourceName", ""),
            source_type=data.get("sourceType", ""),
            articles_collected=data.get("articlesCollected", 0),
            sentiment_breakdown=SentimentBreakdown.from_dict(
                data.get("sentimentBreakdown", {}),
            ),
            fetched_at=_parse_dt(data.get("fetchedAt")),
            fetch_duration_ms=data.get("fetchDurationMs", 0),
            status=data.get("status", STATUS_FAILED),
            error=data.get("error"),
            engagement_stats=EngagementStats.from_dict(stats) if stats else None,
        )


@dataclass
class SourceDiversity:
    total_sources: int = 0
    active_sources: int = 0
    failed_sources: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalSources": self.total_sources,
            "activeSources": self.active_sources,
            "failedSources": self.failed_sources,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SourceDiversity:
        return cls(
            total_sources=data.get("totalSources", 0),
            active_sources=data.get("activeSources", 0),
            failed_sources=data.get("failedSources", 0),
        )


@dataclass
class SentimentDataPoint:
    """One hourly measurement. Immutable once stored."""

    timestamp: datetime
    collection_duration_ms: int
    mood_classification: str
    breakdown: SentimentBreakdown
    summary: str
    articles_analyzed: int
    source_contributions: list[SourceContribution] = field(default_factory=list)
    source_diversity: SourceDiversity = field(default_factory=SourceDiversity)
    confidence: float | None = None
    articles: list[ArticleWithSentiment] | None = None
    errors: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestamp": _dt_str(self.timestamp),
            "collectionDurationMs": self.collection_duration_ms,
            "moodClassification": self.mood_classification,
            "breakdown": self.breakdown.to_dict(),
            "summary": self.summary,
            "articlesAnalyzed": self.articles_analyzed,
            "sourceContributions": [c.to_dict() for c in self.source_contributions],
            "sourceDiversity": self.source_diversity.to_dict(),
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence
        if self.articles is not None:
            data["articles"] = [a.to_dict() for a in self.articles]
        if self.errors is not None:
            data["errors"] = list(self.errors)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> SentimentDataPoint:
        articles = data.get("articles")
        return cls(
            timestamp=_parse_dt(data["timestamp"]),
            collection_duration_ms=data.get("collectionDurationMs", 0),
            mood_classification=data.get("moodClassification", "neutral"),
            breakdown=SentimentBreakdown.from_dict(data.get("breakdown", {})),
            summary=data.get("summary", ""),
            articles_analyzed=data.get("articlesAnalyzed", 0),
            source_contributions=[
                SourceContribution.from_dict(c)
                for c in data.get("sourceContributions", [])
            ],
            source_diversity=SourceDiversity.from_dict(data.get("sourceDiversity", {})),
            confidence=data.get("confidence"),
            articles=(
                [ArticleWithSentiment.from_dict(a) for a in articles]
                if articles is not None else None
            ),
            errors=list(data["errors"]) if data.get("errors") is not None else None,
        )


@dataclass
class SentimentHistory:
    """Persisted rolling window of data points, newest first."""

    version: str = "1.0.0"
    last_updated: datetime = field(default_factory=utcnow)
    data_points: list[SentimentDataPoint] = field(default_factory=list)
    retention_days: int = 7

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "lastUpdated": _dt_str(self.last_updated),
            "dataPoints": [dp.to_dict() for dp in self.data_points],
            "retentionDays": self.retention_days,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SentimentHistory:
        return cls(
            version=data.get("version", "1.0.0"),
            last_updated=_parse_dt(data.get("lastUpdated")) or utcnow(),
            data_points=[
                SentimentDataPoint.from_dict(dp) for dp in data.get("dataPoints", [])
            ],
            retention_days=data.get("retentionDays", 7),
        )


# --- Derived trend structures (never stored) ---


@dataclass
class TrendPeriod:
    """Statistics over a window of stored data points."""

    start: datetime
    end: datetime
    data_points: list[SentimentDataPoint]
    average_breakdown: SentimentBreakdown
    dominant_mood: str
    total_data_points: int
    expected_data_points: int
    missing_hours: int
    data_completeness: float  # 0-100

    def to_dict(self) -> dict[str, Any]:
        return {
            "startDate": _dt_str(self.start),
            "endDate": _dt_str(self.end),
            "dataPoints": [dp.to_dict() for dp in self.data_points],
            "averageMood": self.average_breakdown.to_dict(),
            "dominantMood": self.dominant_mood,
            "totalDataPoints": self.total_data_points,
            "missingHours": self.missing_hours,
            "dataCompleteness": self.data_completeness,
        }


@dataclass
class DataGap:
    start: datetime
    end: datetime

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600


@dataclass
class SentimentSwing:
    data_point: SentimentDataPoint
    swing: int
    index: int


@dataclass
class MovingAveragePoint:
    timestamp: datetime
    breakdown: SentimentBreakdown
