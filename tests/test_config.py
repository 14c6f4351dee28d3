"""Tests for config loading and env var resolution."""

from __future__ import annotations

import os

import pytest

from zorgsentiment.config import (
    get_analysis_settings,
    get_db_path,
    get_reddit_keywords,
    get_reddit_settings,
    get_retention_days,
    get_source_configs,
    get_trend_settings,
    load_config,
)


def test_load_config(sample_config):
    """Config loads and has expected structure."""
    assert "sources" in sample_config
    assert "storage" in sample_config


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_empty_config_file(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("")
    assert load_config(str(cfg_path)) == {}


def test_env_var_resolution(tmp_path, monkeypatch):
    """Environment variables in ${VAR} format are resolved."""
    monkeypatch.setenv("TEST_REDDIT_ID", "my-client-id")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("""
reddit:
  client_id: "${TEST_REDDIT_ID}"
  user_agent: "bot/${TEST_REDDIT_ID}"
""")
    config = load_config(str(cfg_path))
    assert config["reddit"]["client_id"] == "my-client-id"
    assert config["reddit"]["user_agent"] == "bot/my-client-id"


def test_unset_env_var_resolves_empty(tmp_path, monkeypatch):
    monkeypatch.delenv("UNSET_SECRET_FOR_TEST", raising=False)
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text('reddit:\n  client_secret: "${UNSET_SECRET_FOR_TEST}"\n')
    config = load_config(str(cfg_path))
    assert config["reddit"]["client_secret"] == ""


def test_dotenv_does_not_override_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ZS_ALREADY_SET", "from-env")
    monkeypatch.delenv("ZS_FROM_DOTENV", raising=False)
    (tmp_path / ".env").write_text("ZS_ALREADY_SET=from-file\nZS_FROM_DOTENV='dotenv'\n")
    (tmp_path / "config.yaml").write_text(
        'a: "${ZS_ALREADY_SET}"\nb: "${ZS_FROM_DOTENV}"\n'
    )
    try:
        config = load_config("config.yaml")
    finally:
        os.environ.pop("ZS_FROM_DOTENV", None)
    assert config["a"] == "from-env"
    assert config["b"] == "dotenv"


def test_get_source_configs_keeps_order_and_inactive(sample_config):
    sources = get_source_configs(sample_config)
    assert [s.id for s in sources] == ["nu-gezondheid", "skipr", "old-feed", "reddit-nl"]
    assert sources[2].is_active is False
    assert sources[0].timeout == 10.0
    assert sources[0].max_articles == 30
    assert sources[3].reddit.subreddit == "thenetherlands"
    assert sources[3].reddit.include_comments is False
    assert sources[3].reddit.min_upvote_ratio == 0.4


def test_storage_settings(sample_config):
    assert get_db_path(sample_config).endswith("test.db")
    assert get_retention_days(sample_config) == 7
    assert get_db_path({}) == "data/zorgsentiment.db"


def test_reddit_settings_defaults():
    settings = get_reddit_settings({})
    assert settings["client_id"] == ""
    assert settings["user_agent"] == "zorg-sentiment:1.0.0"


def test_reddit_keywords_merge_with_defaults():
    config = {"reddit": {"keywords": {"primary": ["ziekenhuis"], "filtering": {"minimum_score": 2}}}}
    keywords = get_reddit_keywords(config)
    assert keywords["primary"] == ["ziekenhuis"]
    assert "premie" in keywords["secondary"]
    assert keywords["filtering"]["minimum_score"] == 2
    assert keywords["filtering"]["require_primary"] is True


def test_analysis_and_trend_defaults():
    assert get_analysis_settings({})["recency_half_life_hours"] == 24.0
    trends = get_trend_settings({})
    assert trends["gap_tolerance_minutes"] == 10
    assert trends["swing_threshold"] == 20
    assert trends["window_days"] == 7
