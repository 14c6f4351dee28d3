"""CLI entrypoint: python -m zorgsentiment {run|ingest|init-db|stats|trend}."""

from __future__ import annotations

import asyncio
import inspect
import logging
import logging.handlers
import os
import sys
from pathlib import Path

from zorgsentiment.config import (
    get_db_path,
    get_retention_days,
    get_source_configs,
    get_trend_settings,
    load_config,
)
from zorgsentiment.db import StorageError, get_connection, get_history, init_db


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024
NOISY_LOGGERS = ("httpx", "httpcore", "feedparser")


def setup_logging(config: dict) -> None:
    """Log to stderr and to a rotating file beside the database."""
    level = config.get("logging", {}).get("level", "INFO")
    root = logging.getLogger()
    root.setLevel(level)

    log_dir = Path(get_db_path(config)).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            str(log_dir / "zorgsentiment.log"), maxBytes=LOG_MAX_BYTES, backupCount=3,
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


logger = logging.getLogger("zorgsentiment")


def cmd_init_db(config: dict) -> None:
    """Initialize the SQLite database."""
    db_path = get_db_path(config)
    init_db(db_path)
    print(f"Database initialized at {db_path}")


async def cmd_run(config: dict) -> None:
    """Run one collection cycle."""
    from zorgsentiment.analyze.summary import detailed_summary
    from zorgsentiment.pipeline import run_collection

    try:
        point = await run_collection(config)
    except StorageError as exc:
        logger.error("Collection cycle not stored: %s", exc)
        sys.exit(1)
    print(detailed_summary(point))
    d = point.source_diversity
    print(
        f"{point.articles_analyzed} articles from {d.active_sources}/{d.total_sources} "
        f"sources (confidence {point.confidence:.2f})"
    )


async def cmd_ingest(config: dict) -> None:
    """Fetch and dedup without scoring or storing (for testing sources)."""
    from zorgsentiment.orchestrator import fetch_from_all_sources

    result = await fetch_from_all_sources(get_source_configs(config), config)
    for c in result.source_contributions:
        line = f"  {c.source_id:<24} {c.status:<8} {c.articles_collected:>4} articles"
        if c.error:
            line += f"  ({c.error})"
        print(line)

    print(
        f"\nTotal: {result.raw_article_count} fetched, "
        f"{len(result.articles)} unique in {result.total_duration_ms}ms"
    )


def cmd_stats(config: dict) -> None:
    """Show recent data points."""
    from zorgsentiment.analyze.summary import NO_DATA_MESSAGE, stale_data_warning
    from zorgsentiment.models import utcnow

    db_path = get_db_path(config)
    init_db(db_path)
    conn = get_connection(db_path)
    try:
        history = get_history(conn, get_retention_days(config))
    finally:
        conn.close()

    if not history.data_points:
        print(NO_DATA_MESSAGE)
        return

    header = (
        f"{'Timestamp':<26} {'Mood':<9} {'Pos':>4} {'Neu':>4} {'Neg':>4} "
        f"{'Articles':>8} {'Sources':>8}"
    )
    print(header)
    print("-" * 70)
    for dp in history.data_points[:24]:
        d = dp.source_diversity
        print(
            f"{dp.timestamp.isoformat(timespec='seconds'):<26} "
            f"{dp.mood_classification:<9} "
            f"{dp.breakdown.positive:>4} {dp.breakdown.neutral:>4} {dp.breakdown.negative:>4} "
            f"{dp.articles_analyzed:>8} {d.active_sources:>4}/{d.total_sources:<3}"
        )

    newest = max(history.data_points, key=lambda dp: dp.timestamp)
    warning = stale_data_warning((utcnow() - newest.timestamp).total_seconds() / 3600)
    if warning:
        print(f"\n{warning}")


def cmd_trend(config: dict) -> None:
    """Show the 7-day trend, collection gaps and large swings."""
    from datetime import timedelta

    from zorgsentiment.analyze.trends import (
        detect_data_gaps,
        detect_significant_changes,
        moving_averages,
        trend_description,
        weekly_trend,
    )
    from zorgsentiment.models import utcnow

    settings = get_trend_settings(config)
    db_path = get_db_path(config)
    init_db(db_path)
    conn = get_connection(db_path)
    try:
        history = get_history(conn, get_retention_days(config))
    finally:
        conn.close()

    period = weekly_trend(history.data_points, utcnow(), settings["window_days"])
    avg = period.average_breakdown
    print(trend_description(period))
    print(
        f"Average: {avg.positive}% positief, {avg.neutral}% neutraal, {avg.negative}% negatief"
        f" | dominant: {period.dominant_mood}"
    )
    print(
        f"Data points: {period.total_data_points}/{period.expected_data_points} "
        f"({period.data_completeness:.1f}% complete, {period.missing_hours} hours missing)"
    )

    window = settings["moving_average_window"]
    averages = moving_averages(period.data_points, window)
    if averages:
        latest = averages[-1].breakdown
        print(
            f"Moving average (last {window}): {latest.positive}% positief, "
            f"{latest.neutral}% neutraal, {latest.negative}% negatief"
        )

    gaps = detect_data_gaps(
        period.data_points,
        tolerance=timedelta(minutes=settings["gap_tolerance_minutes"]),
    )
    if gaps:
        print(f"\nGaps ({len(gaps)}):")
        for gap in gaps:
            print(
                f"  {gap.start.isoformat(timespec='minutes')} -> "
                f"{gap.end.isoformat(timespec='minutes')} ({gap.duration_hours:.1f}h)"
            )

    swings = detect_significant_changes(period.data_points, settings["swing_threshold"])
    if swings:
        print(f"\nSignificant swings ({len(swings)}):")
        for s in swings:
            print(f"  {s.data_point.timestamp.isoformat(timespec='minutes')}: {s.swing:+d}")


COMMANDS = {
    "run": cmd_run,
    "ingest": cmd_ingest,
    "init-db": cmd_init_db,
    "stats": cmd_stats,
    "trend": cmd_trend,
}


def main() -> None:
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        available = ", ".join(COMMANDS)
        print(f"Usage: python -m zorgsentiment {{{available}}}")
        sys.exit(1)

    command = sys.argv[1]
    config = load_config(os.environ.get("CONFIG_PATH", "config.yaml"))
    setup_logging(config)
    handler = COMMANDS[command]

    if inspect.iscoroutinefunction(handler):
        asyncio.run(handler(config))
    else:
        handler(config)


if __name__ == "__main__":
    main()
