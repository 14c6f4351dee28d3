"""Reddit source adapter using the OAuth2 API (client credentials)."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx

from zorgsentiment.config import get_reddit_keywords, get_reddit_settings
from zorgsentiment.ingest import register_adapter
from zorgsentiment.ingest.base import (
    BaseAdapter,
    InvalidSourceConfigError,
    PermanentSourceError,
)
from zorgsentiment.models import (
    SOCIAL_REDDIT,
    Article,
    EngagementMetrics,
    RedditSourceConfig,
    SourceConfiguration,
    utcnow,
)
from zorgsentiment.retry import is_transient, retry_async

logger = logging.getLogger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
OAUTH_BASE = "https://oauth.reddit.com"

TIME_WINDOWS = ("day", "week", "month")
RETRY_DELAYS = (1.0, 2.0, 4.0)
# Refresh the bearer token this many seconds before Reddit expires it
TOKEN_REFRESH_MARGIN = 60
MIN_COMMENT_LENGTH = 50


@dataclass
class _OAuthToken:
    access_token: str
    expires_at: float  # time.monotonic() deadline


@dataclass
class FilterStats:
    """Why posts were dropped during one fetch."""

    fetched: int = 0
    not_relevant: int = 0
    low_quality: int = 0
    low_upvote_ratio: int = 0
    not_dutch: int = 0
    accepted: int = 0

    @property
    def rejected(self) -> int:
        return self.not_relevant + self.low_quality + self.low_upvote_ratio + self.not_dutch


@dataclass
class KeywordMatcher:
    """Domain keyword relevance scoring for posts."""

    primary: list[str]
    secondary: list[str] = field(default_factory=list)
    insurers: list[str] = field(default_factory=list)
    require_primary: bool = True
    secondary_bonus: int = 1
    insurer_bonus: int = 1
    minimum_score: int = 1

    @classmethod
    def from_config(cls, keywords: dict) -> KeywordMatcher:
        filtering = keywords.get("filtering", {})
        return cls(
            primary=[k.lower() for k in keywords.get("primary", [])],
            secondary=[k.lower() for k in keywords.get("secondary", [])],
            insurers=[k.lower() for k in keywords.get("insurers", [])],
            require_primary=filtering.get("require_primary", True),
            secondary_bonus=filtering.get("secondary_bonus", 1),
            insurer_bonus=filtering.get("insurer_bonus", 1),
            minimum_score=filtering.get("minimum_score", 1),
        )

    def score(self, text: str) -> int | None:
        """Relevance score, or None when a required primary keyword is absent."""
        text = text.lower()
        has_primary = any(kw in text for kw in self.primary)
        if self.require_primary and not has_primary:
            return None
        score = 1 if has_primary else 0
        score += sum(kw in text for kw in self.secondary) * self.secondary_bonus
        score += sum(kw in text for kw in self.insurers) * self.insurer_bonus
        return score

    def is_relevant(self, text: str) -> bool:
        score = self.score(text)
        return score is not None and score >= self.minimum_score

    def has_any_keyword(self, text: str) -> bool:
        """At least one keyword from any list, used as the Dutch-language check."""
        text = text.lower()
        return any(kw in text for kw in (*self.primary, *self.secondary, *self.insurers))


def meets_quality_threshold(post: dict, cfg: RedditSourceConfig) -> bool:
    """Enough upvotes OR enough comments."""
    return (
        (post.get("score") or 0) >= cfg.min_score
        or (post.get("num_comments") or 0) >= cfg.min_comments
    )


def meets_upvote_ratio(post: dict, cfg: RedditSourceConfig) -> bool:
    return (post.get("upvote_ratio") or 0) >= cfg.min_upvote_ratio


def normalize_content(post: dict, comments: list[str], max_length: int) -> str:
    """Post body (or title for link posts) plus top comments, truncated."""
    if post.get("is_self") and post.get("selftext"):
        content = post["selftext"]
    else:
        content = post.get("title", "")
        url = post.get("url") or ""
        if url and "reddit.com" not in url:
            content += "\n\n[External link]"

    if comments:
        content += "\n\n--- Comments ---\n"
        content += "\n\n".join(comments)

    if len(content) > max_length:
        content = content[:max_length] + "..."
    return content


@register_adapter(SOCIAL_REDDIT)
class RedditAdapter(BaseAdapter):
    """Fetch relevant posts (and top comments) from a subreddit."""

    source_type = SOCIAL_REDDIT

    def __init__(self, config: dict | None = None):
        super().__init__(config)
        self._token: _OAuthToken | None = None
        self._token_lock = asyncio.Lock()
        # One adapter serves every Reddit source in a cycle
        self.filter_stats: dict[str, FilterStats] = {}

    @property
    def name(self) -> str:
        return "reddit"

    def config_errors(self, source: SourceConfiguration) -> list[str]:
        errors = super().config_errors(source)
        rc = source.reddit
        if rc is None:
            errors.append("missing reddit section")
            return errors
        if not rc.subreddit.strip():
            errors.append("missing subreddit")
        if rc.time_window not in TIME_WINDOWS:
            errors.append(f"time_window {rc.time_window!r} not one of {TIME_WINDOWS}")
        if rc.min_score < 0 or rc.min_comments < 0:
            errors.append("min_score and min_comments must be >= 0")
        if not 0.0 <= rc.min_upvote_ratio <= 1.0:
            errors.append(f"min_upvote_ratio {rc.min_upvote_ratio} outside 0-1")
        if not 1 <= rc.max_posts <= 100:
            errors.append(f"max_posts {rc.max_posts} outside 1-100")
        return errors

    async def fetch_articles(self, source: SourceConfiguration) -> list[Article]:
        self.ensure_valid(source)
        settings = get_reddit_settings(self.config)
        if not settings["client_id"] or not settings["client_secret"]:
            raise InvalidSourceConfigError("Reddit client_id/client_secret not configured")

        rc = source.reddit
        matcher = KeywordMatcher.from_config(get_reddit_keywords(self.config))

        listing = await self._call(
            f"/r/{rc.subreddit}/hot",
            {"limit": rc.max_posts, "raw_json": 1},
            source.timeout,
        )
        posts = [
            child.get("data", {})
            for child in listing.get("data", {}).get("children", [])
            if child.get("kind") == "t3"
        ]

        stats = FilterStats(fetched=len(posts))
        accepted = []
        for post in posts:
            text = f"{post.get('title', '')} {post.get('selftext') or ''}"
            if not matcher.is_relevant(text):
                stats.not_relevant += 1
            elif not meets_quality_threshold(post, rc):
                stats.low_quality += 1
            elif not meets_upvote_ratio(post, rc):
                stats.low_upvote_ratio += 1
            elif not matcher.has_any_keyword(text):
                stats.not_dutch += 1
            else:
                accepted.append(post)
        stats.accepted = len(accepted)
        self.filter_stats[source.id] = stats

        logger.info(
            "Reddit r/%s: %d/%d posts passed filtering "
            "(not_relevant=%d, low_quality=%d, low_upvote_ratio=%d, not_dutch=%d)",
            rc.subreddit, stats.accepted, stats.fetched,
            stats.not_relevant, stats.low_quality, stats.low_upvote_ratio, stats.not_dutch,
        )

        articles = []
        for post in accepted:
            comments: list[str] = []
            if rc.include_comments and rc.top_comments_count > 0:
                comments = await self._fetch_top_comments(
                    rc.subreddit, post.get("id", ""), rc.top_comments_count, source.timeout,
                )
            articles.append(self._to_article(post, source.id, comments, rc.max_content_length))

        return articles

    async def _call(self, endpoint: str, params: dict, timeout: float):
        """Authenticated GET with fixed-step retries; permanent errors raise at once."""
        try:
            return await retry_async(
                self._api_get, endpoint, params, timeout,
                max_retries=len(RETRY_DELAYS), delays=RETRY_DELAYS,
            )
        except httpx.HTTPStatusError as exc:
            if is_transient(exc):
                raise
            raise PermanentSourceError(
                f"Reddit API {endpoint} returned HTTP {exc.response.status_code}"
            ) from exc

    async def _fetch_top_comments(
        self, subreddit: str, post_id: str, count: int, timeout: float,
    ) -> list[str]:
        """Bodies of the top comments on a post. Empty on any fetch failure."""
        if not post_id:
            return []
        try:
            data = await self._api_get(
                f"/r/{subreddit}/comments/{post_id}",
                {"limit": count, "depth": 1, "sort": "top"},
                timeout,
            )
        except (httpx.HTTPError, PermanentSourceError):
            logger.warning("Reddit comments fetch failed for %s", post_id, exc_info=True)
            return []

        if not isinstance(data, list) or len(data) < 2:
            return []
        bodies = []
        for child in data[1].get("data", {}).get("children", []):
            if child.get("kind") != "t1":
                continue
            body = child.get("data", {}).get("body") or ""
            if len(body) < MIN_COMMENT_LENGTH or "[deleted]" in body or "[removed]" in body:
                continue
            bodies.append(body)
        return bodies[:count]

    @staticmethod
    def _to_article(
        post: dict, source_id: str, comments: list[str], max_length: int,
    ) -> Article:
        title = post.get("title", "")
        content = normalize_content(post, comments, max_length)
        permalink = f"https://reddit.com{post.get('permalink', '')}"

        published_at = utcnow()
        created_utc = post.get("created_utc")
        if created_utc:
            try:
                published_at = datetime.fromtimestamp(created_utc, tz=timezone.utc)
            except (ValueError, OSError, OverflowError):
                pass

        score = post.get("score") or 0
        ratio = post.get("upvote_ratio") or None
        author = post.get("author")

        return Article(
            title=title,
            description=(post.get("selftext") or "")[:200] or title,
            content=content,
            link=permalink,
            published_at=published_at,
            source_id=source_id,
            author_handle=f"u/{author}" if author else None,
            engagement=EngagementMetrics(
                likes=score,
                comments=post.get("num_comments") or 0,
                shares=round(score * ratio) if ratio else None,
                upvote_ratio=ratio,
            ),
        )

    def _cached_token(self) -> str | None:
        if self._token and self._token.expires_at > time.monotonic():
            return self._token.access_token
        return None

    async def _get_token(self, timeout: float) -> str:
        """Return a cached bearer token, refreshing it shortly before expiry.

        Concurrent fetches wait on one refresh instead of each requesting a token.
        """
        token = self._cached_token()
        if token:
            return token
        async with self._token_lock:
            return self._cached_token() or await self._refresh_token(timeout)

    async def _refresh_token(self, timeout: float) -> str:
        settings = get_reddit_settings(self.config)
        try:
            data = await self._request_token(
                settings["client_id"], settings["client_secret"],
                settings["user_agent"], timeout,
            )
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code in (400, 401, 403):
                raise PermanentSourceError(
                    f"Reddit OAuth token request rejected: HTTP {exc.response.status_code}"
                ) from exc
            raise

        token = data.get("access_token")
        if not token:
            raise PermanentSourceError("Reddit OAuth response had no access_token")
        expires_in = float(data.get("expires_in", 3600))
        self._token = _OAuthToken(
            access_token=token,
            expires_at=time.monotonic() + expires_in - TOKEN_REFRESH_MARGIN,
        )
        logger.debug("Reddit OAuth token refreshed (expires in %.0fs)", expires_in)
        return token

    async def _api_get(self, endpoint: str, params: dict, timeout: float):
        token = await self._get_token(timeout)
        headers = {
            "User-Agent": get_reddit_settings(self.config)["user_agent"],
            "Authorization": f"Bearer {token}",
        }
        return await self._fetch_json(f"{OAUTH_BASE}{endpoint}", params, headers, timeout)

    @staticmethod
    async def _request_token(
        client_id: str, client_secret: str, user_agent: str, timeout: float,
    ) -> dict:
        """POST the client-credentials grant."""
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(
                TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(client_id, client_secret),
                headers={"User-Agent": user_agent},
            )
            resp.raise_for_status()
            return resp.json()

    @staticmethod
    async def _fetch_json(url: str, params: dict, headers: dict, timeout: float):
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.json()
