"""
Notion page output.

Builds the block list for one run and appends it to the configured page
in a single request. Block order: one run-date heading, then per article
a bold title heading, a source/link paragraph, a summary paragraph and a
divider. A rejected append fails the whole batch.
"""

from __future__ import annotations

from datetime import date, datetime
import logging
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from ..config import NotionConfig, get_notion_token
from ..core.errors import PublishError
from ..core.types import SummaryResult
from ..logging_utils import log_event, truncate_text


# Notion rejects rich-text objects with more than 2000 characters of content
RICH_TEXT_LIMIT = 2000
# heading_3, source paragraph, summary paragraph, divider
BLOCKS_PER_ARTICLE = 4


def format_run_date(day: date, cfg: NotionConfig) -> str:
    return cfg.date_format.format(year=day.year, month=day.month, day=day.day)


def blocks_needed(article_count: int) -> int:
    """Number of blocks ``build_blocks`` emits for ``article_count`` articles."""
    return 1 + BLOCKS_PER_ARTICLE * article_count


def build_blocks(results: list[SummaryResult], run_date: date, cfg: NotionConfig) -> list[dict[str, Any]]:
    """Return the Notion block descriptors for one run."""
    heading = cfg.heading_template.format(date=format_run_date(run_date, cfg))
    blocks = [_heading_block("heading_2", heading)]

    for result in results:
        article = result.article
        blocks.append(_heading_block("heading_3", article.title, bold=True))
        blocks.append(
            _paragraph_block(
                [
                    _text_run(f"{cfg.source_label}: {article.source} | "),
                    _text_run(
                        cfg.link_label,
                        link=article.link,
                        annotations={"color": cfg.link_color},
                    ),
                ]
            )
        )
        summary = result.summary if result.summary and result.summary.strip() else cfg.empty_summary
        blocks.append(_paragraph_block(_text_runs(summary)))
        blocks.append({"object": "block", "type": "divider", "divider": {}})

    return blocks


def _heading_block(kind: str, content: str, bold: bool = False) -> dict[str, Any]:
    annotations = {"bold": True} if bold else None
    return {
        "object": "block",
        "type": kind,
        kind: {"rich_text": _text_runs(content, annotations)},
    }


def _paragraph_block(rich_text: list[dict[str, Any]]) -> dict[str, Any]:
    return {"object": "block", "type": "paragraph", "paragraph": {"rich_text": rich_text}}


def _text_runs(content: str, annotations: dict[str, Any] | None = None) -> list[dict[str, Any]]:
    chunks = [content[i : i + RICH_TEXT_LIMIT] for i in range(0, len(content), RICH_TEXT_LIMIT)]
    return [_text_run(chunk, annotations=annotations) for chunk in chunks or [""]]


def _text_run(
    content: str,
    link: str | None = None,
    annotations: dict[str, Any] | None = None,
) -> dict[str, Any]:
    text: dict[str, Any] = {"content": content}
    if link:
        text["link"] = {"url": link}
    run: dict[str, Any] = {"type": "text", "text": text}
    if annotations:
        run["annotations"] = annotations
    return run


class NotionPublisher:
    """Appends digest blocks to one Notion page."""

    def __init__(
        self,
        cfg: NotionConfig,
        token: str | None,
        logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not token:
            raise ValueError(f"Missing Notion token (set {cfg.token_env})")
        if not cfg.page_id:
            raise ValueError("Missing Notion page id (set NOTION_PAGE_ID)")
        self.cfg = cfg
        self.token = token
        self.logger = logger
        self._transport = transport

    @classmethod
    def from_config(cls, cfg: NotionConfig, logger: logging.Logger | None = None) -> "NotionPublisher":
        return cls(cfg, get_notion_token(cfg), logger)

    def check_capacity(self, article_count: int) -> None:
        """Raise PublishError when ``article_count`` articles cannot fit in one append call."""
        needed = blocks_needed(article_count)
        if needed > self.cfg.max_blocks:
            raise PublishError(
                f"Batch of {needed} blocks exceeds the append limit of {self.cfg.max_blocks}"
            )

    def today(self) -> date:
        return datetime.now(ZoneInfo(self.cfg.timezone)).date()

    async def publish(self, results: list[SummaryResult], run_date: date | None = None) -> int:
        """Append all blocks for ``results`` in one call.

        Returns:
            Number of blocks appended

        Raises:
            PublishError: The batch is too large or Notion rejected it
        """
        self.check_capacity(len(results))
        blocks = build_blocks(results, run_date or self.today(), self.cfg)

        url = f"{self.cfg.base_url.rstrip('/')}/blocks/{self.cfg.page_id}/children"
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Notion-Version": self.cfg.api_version,
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.cfg.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.patch(url, headers=headers, json={"children": blocks})
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            body = truncate_text(exc.response.text, 2000)
            raise PublishError(
                f"Notion append rejected with HTTP {exc.response.status_code}: {body}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise PublishError(f"Notion append failed: {type(exc).__name__}: {exc}") from exc

        log_event(
            self.logger,
            f"Appended {len(results)} articles to Notion",
            event="publish_done",
            articles=len(results),
            blocks=len(blocks),
        )
        return len(blocks)
