"""Per-article summarization with a guaranteed result."""

from __future__ import annotations

import logging

from ..config import SummaryConfig
from ..core.errors import SummarizationError
from ..core.types import ArticleRecord, SummaryResult
from ..logging_utils import log_event
from .prompts import build_summary_request
from .providers.base import CompletionProvider


class ArticleSummarizer:
    """Turns one article into summary text.

    ``summarize`` never raises: a failed completion is logged with the
    article title and replaced by the configured fallback string.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        cfg: SummaryConfig,
        logger: logging.Logger | None = None,
    ):
        self.provider = provider
        self.cfg = cfg
        self.logger = logger

    async def summarize(self, article: ArticleRecord) -> SummaryResult:
        try:
            prompt = build_summary_request(article, self.cfg).render()
        except ValueError as exc:
            return self._fallback(article, f"invalid request: {exc}")

        try:
            text = await self.provider.complete(
                prompt,
                max_tokens=self.cfg.max_tokens,
                temperature=self.cfg.temperature,
                article=article,
            )
        except SummarizationError as exc:
            return self._fallback(article, str(exc))
        except Exception as exc:  # noqa: BLE001
            return self._fallback(article, f"{type(exc).__name__}: {exc}")

        return SummaryResult(article=article, summary=text, status="ok")

    def fallback_text(self, article: ArticleRecord) -> str:
        return self.cfg.fallback_template.format(title=article.title)

    def _fallback(self, article: ArticleRecord, reason: str) -> SummaryResult:
        log_event(
            self.logger,
            f"Summary failed for {article.title!r}: {reason}",
            level=logging.WARNING,
            event="summary_fallback",
            title=article.title,
            url=article.link,
            error=reason,
        )
        return SummaryResult(article=article, summary=self.fallback_text(article), status="fallback")
