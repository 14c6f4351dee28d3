"""Tests for cross-source deduplication."""

from __future__ import annotations

from conftest import make_article

from zorgsentiment.models import make_fingerprint
from zorgsentiment.process.dedup import (
    deduplicate,
    is_duplicate,
    levenshtein_distance,
    similarity,
)

LONG_DESCRIPTION = (
    "Het kabinet heeft vandaag besloten dat de zorgpremie voor alle "
    "verzekerden per januari wordt aangepast."
)


def test_levenshtein_distance():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("zorg", "zorg") == 0


def test_similarity_is_case_and_whitespace_insensitive():
    assert similarity("Eigen Risico ", "eigen risico") == 1.0
    assert similarity("", "zorg") == 0.0
    assert 0.0 < similarity("zorgpremie", "zorgpolis") < 1.0


def test_article_is_duplicate_of_itself():
    article = make_article()
    assert is_duplicate(article, [article])


def test_matching_fingerprint_is_duplicate_despite_different_titles():
    a = make_article(title="Zorgpremie stijgt", fingerprint="same-hash")
    b = make_article(title="Ziekenhuis in Utrecht sluit afdeling", fingerprint="same-hash")
    assert similarity(a.title, b.title) < 0.5
    assert is_duplicate(b, [a])


def test_fingerprint_defaults_to_hash_of_title_and_content():
    a = make_article(title="Titel", content="Inhoud")
    assert a.fingerprint == make_fingerprint("Titel", "Inhoud")
    assert a.fingerprint == make_fingerprint("  TITEL", "INHOUD  ")


def test_near_identical_titles_are_duplicates():
    a = make_article(title="Zorgpremie stijgt volgend jaar met 10 euro")
    b = make_article(title="Zorgpremie stijgt volgend jaar met 12 euro", source_id="skipr")
    assert is_duplicate(b, [a])


def test_different_titles_are_not_duplicates():
    a = make_article(title="Zorgpremie stijgt volgend jaar")
    b = make_article(title="Ziekenhuis in Utrecht sluit spoedeisende hulp")
    assert not is_duplicate(b, [a])


def test_middle_band_title_falls_back_to_full_text():
    a = make_article(title="Premie omhoog", description=LONG_DESCRIPTION)
    b = make_article(title="Premie omlaag", description=LONG_DESCRIPTION)
    assert 0.5 <= similarity(a.title, b.title) < 0.8
    assert is_duplicate(b, [a])


def test_middle_band_with_different_text_is_not_duplicate():
    a = make_article(title="Premie omhoog", description=LONG_DESCRIPTION)
    b = make_article(title="Premie omlaag", description="x" * len(LONG_DESCRIPTION))
    assert not is_duplicate(b, [a])


def test_middle_band_skips_when_lengths_differ_too_much():
    a = make_article(title="Premie omhoog", description=LONG_DESCRIPTION)
    b = make_article(title="Premie omlaag", description="Kort.")
    assert not is_duplicate(b, [a])


def test_deduplicate_keeps_first_occurrence_in_order():
    first = make_article(title="Zorgpremie stijgt volgend jaar met 10 euro")
    repeat = make_article(title="Zorgpremie stijgt volgend jaar met 12 euro", source_id="skipr")
    other = make_article(title="Ziekenhuis in Utrecht sluit spoedeisende hulp")

    unique = deduplicate([first, repeat, other])

    assert unique == [first, other]
    assert unique[0] is first


def test_deduplicate_empty():
    assert deduplicate([]) == []
