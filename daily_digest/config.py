"""
Configuration management using YAML files, dataclasses and environment.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- feeds: RSS/Atom feed URLs polled on every run
- ProviderConfig: LLM provider settings
- FetchConfig: Feed HTTP fetching settings
- FilterConfig: Recency window settings
- SummaryConfig: Prompt and sampling settings
- NotionConfig: Target document and block labels
- ScheduleConfig: Daily trigger settings
- ServerConfig: Manual trigger HTTP server
- StoreConfig: Seen-link store backend
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container

Secrets and deployment values come from the environment after the YAML
file is applied (NOTION_TOKEN, OPENAI_API_KEY or GOOGLE_API_KEY, NOTION_PAGE_ID, PORT).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any, Mapping

import yaml


DEFAULT_FEEDS = [
    "https://openai.com/blog/rss.xml",
    "https://www.deepmind.com/blog/rss",
    "https://www.anthropic.com/feed.xml",
    "https://ai.googleblog.com/feeds/posts/default",
    "https://ai.facebook.com/blog/rss/",
    "https://www.microsoft.com/en-us/research/feed/",
    "https://huggingface.co/blog/rss",
    "https://www.eleuther.ai/feed.xml",
]


# (model, api_key_env, base_url) used when a provider section leaves them unset
PROVIDER_DEFAULTS: dict[str, tuple[str, str, str]] = {
    "openai": ("gpt-4", "OPENAI_API_KEY", "https://api.openai.com/v1"),
    "openai_compatible": ("gpt-4", "OPENAI_API_KEY", "https://api.openai.com/v1"),
    "openai-compatible": ("gpt-4", "OPENAI_API_KEY", "https://api.openai.com/v1"),
    "gemini": ("gemini-3-flash-preview", "GOOGLE_API_KEY", "https://generativelanguage.googleapis.com"),
}
_PROVIDER_DEFAULT_FIELDS = ("model", "api_key_env", "base_url")


@dataclass
class ProviderConfig:
    """Configuration for the LLM provider.

    ``model``, ``api_key_env`` and ``base_url`` default per provider name
    (see ``PROVIDER_DEFAULTS``); set them only to override.

    Attributes:
        name: Provider name ("openai", "openai_compatible" or "gemini")
        model: Model identifier (e.g., "gpt-4")
        api_key_env: Environment variable name containing the API key
        base_url: Base URL for the provider API
        api_key: Optional inline API key (overrides env var)
        timeout_seconds: Request timeout for one completion call
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "openai"
    model: str | None = None
    api_key_env: str | None = None
    base_url: str | None = None
    api_key: str | None = None
    timeout_seconds: float = 60.0
    trust_env: bool = True

    def __post_init__(self) -> None:
        defaults = PROVIDER_DEFAULTS.get(self.name.lower().strip())
        if defaults is None:
            return
        for key, value in zip(_PROVIDER_DEFAULT_FIELDS, defaults):
            if getattr(self, key) is None:
                setattr(self, key, value)


@dataclass
class FetchConfig:
    """Configuration for feed fetching.

    Attributes:
        timeout_seconds: HTTP request timeout per feed
        retries: Extra attempts after a failed request (fixed delay, no backoff)
        retry_delay_seconds: Delay between attempts
        concurrency: Maximum number of feeds fetched at the same time
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    timeout_seconds: float = 20.0
    retries: int = 1
    retry_delay_seconds: float = 1.0
    concurrency: int = 4
    trust_env: bool = True
    user_agent: str = "daily-digest/0.1 (RSS reader)"


@dataclass
class FilterConfig:
    """Configuration for the recency window.

    Attributes:
        window_hours: Items published strictly after now minus this window are recent
    """

    window_hours: float = 24.0


@dataclass
class SummaryConfig:
    """Configuration for LLM summarization.

    Attributes:
        max_chars: Maximum characters of article content sent to the LLM
        target_chars: Soft length target for the summary, stated in the prompt
        language: Human language the summary is written in
        max_tokens: Output token budget per completion
        temperature: Sampling temperature
        pacing_seconds: Minimum delay between two completion calls
        fallback_template: Summary used when the LLM call fails; "{title}" is filled in
    """

    max_chars: int = 2000
    target_chars: int = 300
    language: str = "Korean"
    max_tokens: int = 500
    temperature: float = 0.7
    pacing_seconds: float = 1.0
    fallback_template: str = "요약 생성 실패: {title}"


@dataclass
class NotionConfig:
    """Configuration for the target Notion page and the rendered blocks.

    Attributes:
        page_id: Block or page the digest is appended to
        token: Optional inline integration token (overrides env var)
        token_env: Environment variable name containing the integration token
        base_url: Notion API base URL
        api_version: Value of the Notion-Version header
        timeout_seconds: Request timeout for the append call
        max_blocks: Largest number of children accepted in one append call
        timezone: Zone used to date the run heading
        heading_template: Run heading; "{date}" is filled in
        date_format: Date rendering; "{year}", "{month}", "{day}" are filled in
        source_label: Label placed before the source name
        link_label: Text of the hyperlink run
        link_color: Notion color annotation of the hyperlink run
        empty_summary: Placeholder for a missing summary
    """

    page_id: str | None = None
    token: str | None = None
    token_env: str = "NOTION_TOKEN"
    base_url: str = "https://api.notion.com/v1"
    api_version: str = "2022-06-28"
    timeout_seconds: float = 30.0
    max_blocks: int = 100
    timezone: str = "Asia/Seoul"
    heading_template: str = "AI 뉴스 요약 - {date}"
    date_format: str = "{year}. {month}. {day}."
    source_label: str = "출처"
    link_label: str = "원문 링크"
    link_color: str = "blue"
    empty_summary: str = "요약 없음"


@dataclass
class ScheduleConfig:
    """Configuration for the daily trigger.

    Attributes:
        enabled: Whether the server starts the daily scheduler
        time: Wall-clock fire time, "HH:MM"
        timezone: IANA zone the fire time is expressed in
    """

    enabled: bool = True
    time: str = "07:00"
    timezone: str = "Asia/Seoul"


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000


@dataclass
class StoreConfig:
    """Configuration for the seen-link store.

    Attributes:
        backend: "sqlite" for a store that survives restarts, "memory" for process lifetime
        path: SQLite database file
    """

    backend: str = "sqlite"
    path: str = "data/seen.db"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        directory: Directory holding the log files
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("summary_only", "response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    directory: str = "logs"
    filename: str = "digest.jsonl"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls_authors"
    llm_log_file: str = "llm.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    feeds: list[str] = field(default_factory=lambda: list(DEFAULT_FEEDS))
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    notion: NotionConfig = field(default_factory=NotionConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Load configuration from a YAML file with defaults, then the environment."""
    raw: dict[str, Any] = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    cfg = _merge_config(AppConfig(), raw)
    apply_env_overrides(cfg, os.environ if environ is None else environ)
    return cfg


def apply_env_overrides(cfg: AppConfig, environ: Mapping[str, str]) -> AppConfig:
    """Apply the flat key/value deployment settings."""
    page_id = environ.get("NOTION_PAGE_ID")
    if page_id:
        cfg.notion.page_id = page_id
    port = environ.get("PORT")
    if port:
        try:
            cfg.server.port = int(port)
        except ValueError as exc:
            raise ValueError(f"PORT must be an integer, got {port!r}") from exc
    return cfg


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if key == "provider" and isinstance(value, dict):
            if value.get("name", data[key]["name"]) != data[key]["name"]:
                # Switching provider drops the previous provider's defaults.
                for name in _PROVIDER_DEFAULT_FIELDS:
                    data[key][name] = None
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        feeds=[str(url) for url in data["feeds"] or []],
        provider=ProviderConfig(**data["provider"]),
        fetch=FetchConfig(**data["fetch"]),
        filter=FilterConfig(**data["filter"]),
        summary=SummaryConfig(**data["summary"]),
        notion=NotionConfig(**data["notion"]),
        schedule=ScheduleConfig(**data["schedule"]),
        server=ServerConfig(**data["server"]),
        store=StoreConfig(**data["store"]),
        logging=LoggingConfig(**data["logging"]),
    )


def get_api_key(cfg: ProviderConfig, environ: Mapping[str, str] | None = None) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return (os.environ if environ is None else environ).get(cfg.api_key_env)


def get_notion_token(cfg: NotionConfig, environ: Mapping[str, str] | None = None) -> str | None:
    """Get the Notion integration token from inline config or environment variable."""
    if cfg.token:
        return cfg.token
    return (os.environ if environ is None else environ).get(cfg.token_env)
