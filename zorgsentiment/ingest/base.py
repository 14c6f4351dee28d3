"""Abstract base class and errors for source adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod

from zorgsentiment.models import Article, SourceConfiguration

MIN_TIMEOUT = 1.0
MAX_TIMEOUT = 30.0
MIN_ARTICLES = 1
MAX_ARTICLES = 100


class SourceError(Exception):
    """A source could not deliver articles."""


class InvalidSourceConfigError(SourceError):
    """Source configuration was rejected before any network I/O."""


class PermanentSourceError(SourceError):
    """A failure that retrying will not fix (auth, not found, bad request)."""


class BaseAdapter(ABC):
    """Turns a source configuration into a list of articles."""

    source_type: str = ""

    def __init__(self, config: dict | None = None):
        self.config = config or {}

    @abstractmethod
    async def fetch_articles(self, source: SourceConfiguration) -> list[Article]:
        """Fetch and normalize articles for a source."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable adapter name."""
        ...

    def supports_type(self, source_type: str) -> bool:
        return source_type == self.source_type

    def config_errors(self, source: SourceConfiguration) -> list[str]:
        """Problems shared by every source type. Subclasses extend this."""
        errors = []
        if not source.id:
            errors.append("missing id")
        if not source.name:
            errors.append("missing name")
        if not self.supports_type(source.type):
            errors.append(f"type {source.type!r} not handled by {self.name}")
        if not MIN_TIMEOUT <= source.timeout <= MAX_TIMEOUT:
            errors.append(
                f"timeout {source.timeout}s outside {MIN_TIMEOUT:g}-{MAX_TIMEOUT:g}s"
            )
        return errors

    def validate_config(self, source: SourceConfiguration) -> bool:
        return not self.config_errors(source)

    def ensure_valid(self, source: SourceConfiguration) -> None:
        errors = self.config_errors(source)
        if errors:
            raise InvalidSourceConfigError(
                f"Invalid configuration for source '{source.id}': {'; '.join(errors)}"
            )
