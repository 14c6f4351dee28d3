"""Short Dutch mood summaries for the dashboard."""

from __future__ import annotations

from datetime import datetime

from zorgsentiment.models import SentimentBreakdown, SentimentDataPoint

MOOD_TEMPLATES = {
    "positive": (
        "Nederland voelt zich optimistisch over zorgverzekeringen",
        "De stemming over zorg is positief",
        "Er heerst een hoopvol gevoel over gezondheidszorg",
        "Positieve vibes over zorgverzekeringen",
        "Nederland kijkt hoopvol naar de gezondheidszorg",
        "De sfeer rondom zorg is opgewekt",
    ),
    "negative": (
        "Er is onvrede over zorgverzekeringen",
        "De stemming over zorg is negatief",
        "Zorgen over gezondheidszorg domineren",
        "Nederland maakt zich zorgen over de gezondheidszorg",
        "Kritische geluiden over zorgverzekeringen",
        "Onrust over de zorgverzekeringen",
    ),
    "mixed": (
        "De meningen over zorg zijn verdeeld",
        "Een gemengd gevoel over zorgverzekeringen",
        "De stemming over zorg is gemengd",
        "Nederland is verdeeld over de gezondheidszorg",
        "Wisselende meningen over zorgverzekeringen",
        "Een gemêleerd beeld over de gezondheidszorg",
    ),
    "neutral": (
        "Een neutrale stemming over zorgverzekeringen",
        "Kalme reacties op gezondheidszorg",
        "De stemming over zorg is neutraal",
        "Rustig nieuws over gezondheidszorg",
        "Geen sterke reacties op zorgverzekeringen",
        "Evenwichtige berichtgeving over zorg",
    ),
}

MOOD_EMOJI = {
    "positive": "😊",
    "negative": "😟",
    "mixed": "😐",
    "neutral": "😐",
}

NO_DATA_MESSAGE = "We verzamelen nog gegevens over de stemming. Check straks terug!"
STALE_AFTER_HOURS = 24


def mood_summary(mood: str, timestamp: datetime) -> str:
    """Pick a template for the mood, stable for a given collection hour."""
    templates = MOOD_TEMPLATES.get(mood) or MOOD_TEMPLATES["neutral"]
    index = int(timestamp.timestamp() // 3600) % len(templates)
    return templates[index]


def mood_emoji(mood: str) -> str:
    return MOOD_EMOJI.get(mood, MOOD_EMOJI["neutral"])


def format_breakdown(breakdown: SentimentBreakdown) -> str:
    return (
        f"({breakdown.positive}% positief, {breakdown.neutral}% neutraal, "
        f"{breakdown.negative}% negatief)"
    )


def detailed_summary(point: SentimentDataPoint) -> str:
    """Template plus the percentages, e.g. for a share text."""
    base = mood_summary(point.mood_classification, point.timestamp)
    return f"{base} {format_breakdown(point.breakdown)}"


def stale_data_warning(hours_old: float) -> str:
    """Empty while data is fresh."""
    if hours_old < STALE_AFTER_HOURS:
        return ""
    days_old = int(hours_old // 24)
    if days_old == 1:
        return "⚠️ Data is meer dan 1 dag oud"
    return f"⚠️ Data is {days_old} dagen oud"


def format_relative_time(timestamp: datetime, now: datetime) -> str:
    seconds = (now - timestamp).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Zojuist"
    if minutes < 60:
        return f"{minutes} {'minuut' if minutes == 1 else 'minuten'} geleden"
    if hours < 24:
        return f"{hours} uur geleden"
    if days < 7:
        return f"{days} {'dag' if days == 1 else 'dagen'} geleden"
    return timestamp.strftime("%d-%m-%Y")
