"""Abstract interface for LLM completion backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging

from ...config import LoggingConfig, ProviderConfig
from ...core.types import ArticleRecord
from ...logging_utils import log_event, redact_text, redact_value, truncate_text


class CompletionProvider(ABC):
    """Provider interface: one prompt in, generated text out."""

    name = "base"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None,
    ):
        if not api_key:
            raise ValueError(f"Missing API key for provider {cfg.name} (set {cfg.api_key_env})")
        self.cfg = cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        article: ArticleRecord | None = None,
    ) -> str:
        """Return generated text.

        Raises:
            SummarizationError: The request failed or the response held no text
        """
        raise NotImplementedError

    def _log_llm_response(
        self,
        article: ArticleRecord | None,
        status: str,
        content: str,
        prompt: str,
    ) -> None:
        if self.llm_logger is None:
            return
        detail = self.log_cfg.llm_log_detail
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": "llm_summary_response",
            "status": status,
            "provider": self.name,
            "model": self.cfg.model,
            "article_title": article.title if article else None,
            "article_source": article.source if article else None,
            "article_url": redact_value(article.link, redaction) if article else None,
        }
        if detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
            payload["raw_response"] = truncate_text(redact_text(content, redaction))
        elif detail == "response_only":
            payload["raw_response"] = truncate_text(redact_text(content, redaction))
        log_event(self.llm_logger, "LLM response", **payload)
