"""RSS feed source adapter."""

from __future__ import annotations

import calendar
import html
import logging
import re
from datetime import datetime, timezone
from urllib.parse import urlparse

import feedparser
import httpx

from zorgsentiment.ingest import register_adapter
from zorgsentiment.ingest.base import (
    MAX_ARTICLES,
    MIN_ARTICLES,
    BaseAdapter,
    PermanentSourceError,
)
from zorgsentiment.models import RSS, Article, SourceConfiguration, utcnow
from zorgsentiment.retry import is_transient, retry_async

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; ZorgSentimentBot/1.0)"

_TAG_RE = re.compile(r"<[^>]+>")
_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_WS_RE = re.compile(r"\s+")


def clean_text(value: str) -> str:
    """Strip CDATA wrappers and markup, decode entities, collapse whitespace."""
    value = _CDATA_RE.sub(r"\1", value or "")
    value = _TAG_RE.sub(" ", value)
    value = html.unescape(value)
    return _WS_RE.sub(" ", value).strip()


def _entry_datetime(entry) -> datetime | None:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    except (OverflowError, ValueError, TypeError):
        return None


@register_adapter(RSS)
class RSSAdapter(BaseAdapter):
    """Fetch articles from a single RSS feed."""

    source_type = RSS

    @property
    def name(self) -> str:
        return "rss"

    def config_errors(self, source: SourceConfiguration) -> list[str]:
        errors = super().config_errors(source)
        parsed = urlparse(source.url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"url {source.url!r} is not an http(s) URL")
        if not MIN_ARTICLES <= source.max_articles <= MAX_ARTICLES:
            errors.append(
                f"max_articles {source.max_articles} outside {MIN_ARTICLES}-{MAX_ARTICLES}"
            )
        return errors

    async def fetch_articles(self, source: SourceConfiguration) -> list[Article]:
        self.ensure_valid(source)

        try:
            xml_text = await retry_async(
                self._fetch_feed, source.url, source.timeout, source.custom_headers,
                max_retries=self.config.get("rss", {}).get("max_retries", 2),
                base_delay=self.config.get("rss", {}).get("retry_delay", 1.0),
            )
        except httpx.HTTPStatusError as exc:
            if is_transient(exc):
                logger.warning(
                    "RSS feed %s still failing after retries (HTTP %d), no articles",
                    source.id, exc.response.status_code,
                )
                return []
            raise PermanentSourceError(
                f"RSS feed {source.url} returned HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ConnectionError, TimeoutError) as exc:
            logger.warning(
                "RSS feed %s unreachable after retries (%s), no articles",
                source.id, type(exc).__name__,
            )
            return []

        entries = self.parse_feed(xml_text)
        # Cap before cross-source dedup
        limited = entries[: source.max_articles]
        articles = [self._to_article(entry, source.id) for entry in limited]
        logger.info("RSS %s: %d articles (%d in feed)", source.id, len(articles), len(entries))
        return articles

    @staticmethod
    def parse_feed(xml_text: str) -> list[dict]:
        """Extract title/description/link/pubDate from feed items.

        Items missing a title or description are skipped.
        """
        feed = feedparser.parse(xml_text)
        if feed.get("bozo") and not feed.entries:
            logger.warning("Feed could not be parsed: %s", feed.get("bozo_exception"))

        items = []
        for entry in feed.entries:
            title = clean_text(entry.get("title", ""))
            description = clean_text(entry.get("summary") or entry.get("description") or "")
            if not title or not description:
                continue
            items.append({
                "title": title,
                "description": description,
                "link": clean_text(entry.get("link", "")),
                "published_at": _entry_datetime(entry),
            })
        return items

    @staticmethod
    def _to_article(item: dict, source_id: str) -> Article:
        return Article(
            title=item["title"],
            description=item["description"],
            content=f"{item['title']} {item['description']}",
            link=item["link"],
            published_at=item["published_at"] or utcnow(),
            source_id=source_id,
        )

    @staticmethod
    async def _fetch_feed(url: str, timeout: float, headers: dict | None = None) -> str:
        """Fetch raw feed XML."""
        request_headers = {"User-Agent": USER_AGENT, **(headers or {})}
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            resp = await client.get(url, headers=request_headers)
            resp.raise_for_status()
            return resp.text
