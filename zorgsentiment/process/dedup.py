"""Cross-source deduplication by fingerprint and edit-distance similarity."""

from __future__ import annotations

import logging

from zorgsentiment.models import Article

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.8
# Titles below this are different stories; skip the full-text comparison
TITLE_SKIP_THRESHOLD = 0.5
# Full texts whose lengths differ by more than this share are never compared
MAX_LENGTH_DIFF_RATIO = 0.5


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum single-character edits turning ``a`` into ``b``."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(min(
                previous[j] + 1,  # deletion
                current[j - 1] + 1,  # insertion
                previous[j - 1] + (ca != cb),  # substitution
            ))
        previous = current
    return previous[-1]


def similarity(text1: str, text2: str) -> float:
    """Case-insensitive similarity in [0, 1]; 1.0 means identical."""
    a = text1.lower().strip()
    b = text2.lower().strip()
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    distance = levenshtein_distance(a, b)
    return max(0.0, min(1.0, 1 - distance / max(len(a), len(b))))


def _full_text(article: Article) -> str:
    return f"{article.title} {article.description}"


def is_duplicate(article: Article, existing: list[Article]) -> bool:
    """True if ``article`` repeats a story already in ``existing``."""
    for other in existing:
        if article.fingerprint == other.fingerprint:
            return True

    for other in existing:
        title_sim = similarity(article.title, other.title)
        if title_sim < TITLE_SKIP_THRESHOLD:
            continue
        if title_sim >= SIMILARITY_THRESHOLD:
            return True

        text_a = _full_text(article)
        text_b = _full_text(other)
        longest = max(len(text_a), len(text_b))
        if longest and abs(len(text_a) - len(text_b)) / longest > MAX_LENGTH_DIFF_RATIO:
            continue
        if similarity(text_a, text_b) >= SIMILARITY_THRESHOLD:
            return True

    return False


def deduplicate(articles: list[Article]) -> list[Article]:
    """Keep the first occurrence of each story, in input order."""
    unique: list[Article] = []
    for article in articles:
        if not is_duplicate(article, unique):
            unique.append(article)

    removed = len(articles) - len(unique)
    if removed:
        logger.info("Dedup removed %d near-duplicates (%d -> %d)", removed, len(articles), len(unique))
    return unique
