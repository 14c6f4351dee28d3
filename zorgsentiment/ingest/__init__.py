"""Source adapter registry, keyed by source type."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zorgsentiment.ingest.base import BaseAdapter

ADAPTERS: dict[str, type[BaseAdapter]] = {}


def register_adapter(source_type: str):
    """Decorator to register an adapter for a source type."""

    def decorator(cls):
        ADAPTERS[source_type] = cls
        return cls

    return decorator


# Import implementations to trigger registration
from zorgsentiment.ingest.reddit import RedditAdapter  # noqa: E402, F401
from zorgsentiment.ingest.rss import RSSAdapter  # noqa: E402, F401
