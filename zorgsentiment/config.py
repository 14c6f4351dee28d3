"""YAML configuration with ``${VAR}`` substitution from the environment."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

from zorgsentiment.models import SourceConfiguration

_ENV_REF = re.compile(r"\$\{([^}]+)\}")

DEFAULT_REDDIT_KEYWORDS = {
    "primary": ["zorgverzekering", "eigen risico", "zorgkosten"],
    "secondary": ["premie", "zorg"],
    "insurers": ["CZ", "VGZ", "Menzis"],
    "filtering": {
        "require_primary": True,
        "secondary_bonus": 1,
        "insurer_bonus": 1,
        "minimum_score": 1,
    },
}


def _read_env_file(path: Path) -> dict[str, str]:
    """KEY=value pairs from a .env file; quotes around values are dropped."""
    pairs: dict[str, str] = {}
    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        if key.strip():
            pairs[key.strip()] = value.strip().strip("'\"")
    return pairs


def _load_dotenv(path: str | Path = ".env") -> None:
    """Export .env entries that the real environment does not already set."""
    env_path = Path(path)
    if env_path.is_file():
        for key, value in _read_env_file(env_path).items():
            os.environ.setdefault(key, value)


def _substitute(value: Any) -> Any:
    """Replace ``${VAR}`` references throughout a parsed YAML tree.

    Unset variables become empty strings.
    """
    if isinstance(value, dict):
        return {k: _substitute(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute(v) for v in value]
    if not isinstance(value, str):
        return value
    return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), value)


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Parse the YAML config, after loading .env from the working directory."""
    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return _substitute(raw)


def get_source_configs(config: dict) -> list[SourceConfiguration]:
    """Return all configured sources (active and inactive), in config order."""
    return [SourceConfiguration.from_dict(s) for s in config.get("sources", []) or []]


def get_db_path(config: dict) -> str:
    """Get database path from config."""
    return config.get("storage", {}).get("path", "data/zorgsentiment.db")


def get_retention_days(config: dict) -> int:
    return int(config.get("storage", {}).get("retention_days", 7))


def get_reddit_settings(config: dict) -> dict:
    """OAuth credentials and user agent for the Reddit adapter."""
    cfg = config.get("reddit", {})
    return {
        "client_id": cfg.get("client_id", ""),
        "client_secret": cfg.get("client_secret", ""),
        "user_agent": cfg.get("user_agent") or "zorg-sentiment:1.0.0",
    }


def get_reddit_keywords(config: dict) -> dict:
    """Keyword lists and scoring rules for Reddit relevance filtering."""
    cfg = config.get("reddit", {}).get("keywords") or {}
    filtering = {
        **DEFAULT_REDDIT_KEYWORDS["filtering"],
        **(cfg.get("filtering") or {}),
    }
    return {
        "primary": cfg.get("primary", DEFAULT_REDDIT_KEYWORDS["primary"]),
        "secondary": cfg.get("secondary", DEFAULT_REDDIT_KEYWORDS["secondary"]),
        "insurers": cfg.get("insurers", DEFAULT_REDDIT_KEYWORDS["insurers"]),
        "filtering": filtering,
    }


def get_analysis_settings(config: dict) -> dict:
    cfg = config.get("analysis", {})
    return {
        "recency_half_life_hours": float(cfg.get("recency_half_life_hours", 24)),
        "store_articles": bool(cfg.get("store_articles", True)),
    }


def get_trend_settings(config: dict) -> dict:
    cfg = config.get("trends", {})
    return {
        "window_days": int(cfg.get("window_days", 7)),
        "gap_tolerance_minutes": float(cfg.get("gap_tolerance_minutes", 10)),
        "swing_threshold": int(cfg.get("swing_threshold", 20)),
        "moving_average_window": int(cfg.get("moving_average_window", 6)),
    }
