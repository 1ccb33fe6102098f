"""Tests for YAML + environment configuration loading."""

from pathlib import Path

import pytest

from daily_digest.config import (
    DEFAULT_FEEDS,
    AppConfig,
    NotionConfig,
    ProviderConfig,
    get_api_key,
    get_notion_token,
    load_config,
)


def test_defaults_match_original_deployment():
    cfg = load_config(None, environ={})

    assert cfg.feeds == DEFAULT_FEEDS
    assert len(cfg.feeds) == 8
    assert cfg.provider.model == "gpt-4"
    assert cfg.summary.max_chars == 2000
    assert cfg.summary.max_tokens == 500
    assert cfg.summary.temperature == 0.7
    assert cfg.summary.pacing_seconds == 1.0
    assert cfg.filter.window_hours == 24
    assert cfg.schedule.time == "07:00"
    assert cfg.schedule.timezone == "Asia/Seoul"
    assert cfg.server.port == 3000


def test_default_config_instances_are_independent():
    first = AppConfig()
    first.feeds.append("https://example.com/feed")
    assert "https://example.com/feed" not in AppConfig().feeds


def test_yaml_merges_sections_over_defaults(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "feeds:\n"
        "  - https://example.com/rss\n"
        "summary:\n"
        "  language: English\n"
        "schedule:\n"
        "  time: '06:30'\n"
        "unknown_section:\n"
        "  ignored: true\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path), environ={})

    assert cfg.feeds == ["https://example.com/rss"]
    assert cfg.summary.language == "English"
    assert cfg.summary.max_chars == 2000
    assert cfg.schedule.time == "06:30"
    assert cfg.schedule.timezone == "Asia/Seoul"


def test_environment_overrides_page_id_and_port():
    cfg = load_config(None, environ={"NOTION_PAGE_ID": "page-123", "PORT": "8080"})

    assert cfg.notion.page_id == "page-123"
    assert cfg.server.port == 8080


def test_invalid_port_is_rejected():
    with pytest.raises(ValueError, match="PORT"):
        load_config(None, environ={"PORT": "eighty"})


def test_credentials_prefer_inline_values():
    assert get_api_key(ProviderConfig(api_key="inline"), environ={"OPENAI_API_KEY": "env"}) == "inline"
    assert get_api_key(ProviderConfig(), environ={"OPENAI_API_KEY": "env"}) == "env"
    assert get_notion_token(NotionConfig(), environ={"NOTION_TOKEN": "secret"}) == "secret"
    assert get_notion_token(NotionConfig(), environ={}) is None
