"""Prompt loading and rendering helpers for LLM providers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from ..config import SummaryConfig
from ..core.types import ArticleRecord


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"
_ELLIPSIS = "..."
# A whitespace cut is only taken when it sits in the last 10% of the budget
_WORD_BOUNDARY_SLACK = 0.1


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


@dataclass(frozen=True)
class SummaryRequest:
    """Named slots of the summary prompt."""

    title: str
    source: str
    content: str
    language: str
    target_chars: int
    max_content_chars: int

    def validate(self) -> None:
        if not self.title.strip():
            raise ValueError("Summary request needs a title")
        if not self.language.strip():
            raise ValueError("Summary request needs a target language")
        if self.target_chars <= 0:
            raise ValueError(f"target_chars must be positive, got {self.target_chars}")
        if self.max_content_chars <= 0:
            raise ValueError(f"max_content_chars must be positive, got {self.max_content_chars}")
        if len(self.content) > self.max_content_chars + len(_ELLIPSIS):
            raise ValueError("Content exceeds the configured character budget")

    def render(self) -> str:
        self.validate()
        return _render_template(
            "summary",
            title=self.title,
            source=self.source,
            content=self.content,
            language=self.language,
            target_chars=str(self.target_chars),
        )


def build_summary_request(article: ArticleRecord, cfg: SummaryConfig) -> SummaryRequest:
    return SummaryRequest(
        title=article.title,
        source=article.source,
        content=truncate_content(article.content, cfg.max_chars),
        language=cfg.language,
        target_chars=cfg.target_chars,
        max_content_chars=cfg.max_chars,
    )


def truncate_content(text: str, max_chars: int) -> str:
    """Cut ``text`` to ``max_chars`` characters and mark the cut.

    Slicing works on code points, so multi-byte text is never split inside a
    character. When the cut lands inside a word and whitespace is near the
    end, the partial word is dropped.
    """
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    if not text[max_chars].isspace():
        boundary = cut.rfind(" ")
        if boundary >= max_chars * (1 - _WORD_BOUNDARY_SLACK):
            cut = cut[:boundary]
    return cut.rstrip() + _ELLIPSIS
