"""
Pipeline orchestration for the daily digest.

One run walks through the stages in order:
1. Fetch every configured feed (a failing feed contributes nothing)
2. Filter to recent entries whose link has not been seen
3. Summarize each article, pausing between completion calls, and mark its
   link as seen as soon as the attempt finishes
4. Append all blocks to the Notion page in a single call

Runs never overlap: a second ``run_once`` while one is in flight is
rejected with RunInProgressError.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Awaitable, Callable

from .config import AppConfig
from .core.errors import DigestError, PublishError, RunInProgressError, UncaughtRunError
from .core.novelty import filter_new
from .core.store import SeenStore, open_store
from .core.types import RunResult, SummaryResult
from .fetch.feeds import fetch_all_feeds
from .llm.providers.factory import create_provider
from .llm.summarizer import ArticleSummarizer
from .logging_utils import log_event, setup_llm_logger
from .output.notion import NotionPublisher


Sleeper = Callable[[float], Awaitable[None]]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DigestPipeline:
    """Runs fetch, filter, summarize and publish for one invocation.

    Attributes:
        cfg: Application configuration
        summarizer: Per-article summarizer
        publisher: Notion publisher (anything with ``publish`` and ``today``)
        store: Seen-link store
        logger: Logger for run events
    """

    def __init__(
        self,
        cfg: AppConfig,
        summarizer: ArticleSummarizer,
        publisher: NotionPublisher,
        store: SeenStore,
        logger: logging.Logger | None = None,
        sleep: Sleeper = asyncio.sleep,
        clock: Clock = _utcnow,
    ):
        self.cfg = cfg
        self.summarizer = summarizer
        self.publisher = publisher
        self.store = store
        self.logger = logger or logging.getLogger("daily_digest")
        self._sleep = sleep
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def run_once(self, trigger: str = "manual") -> RunResult:
        """Execute one full pass.

        Raises:
            RunInProgressError: Another run is in flight
            PublishError: The Notion append failed
            UncaughtRunError: Anything outside the expected failure modes
        """
        if self._lock.locked():
            log_event(
                self.logger,
                "Run rejected: another run is in progress",
                level=logging.WARNING,
                event="run_rejected",
                trigger=trigger,
            )
            raise RunInProgressError("A digest run is already in progress")

        async with self._lock:
            log_event(self.logger, "Run start", event="run_start", trigger=trigger)
            try:
                result = await self._run()
            except PublishError as exc:
                log_event(
                    self.logger,
                    f"Publish failed: {exc}",
                    level=logging.ERROR,
                    event="publish_failed",
                    trigger=trigger,
                    status_code=exc.status_code,
                )
                raise
            except DigestError:
                raise
            except Exception as exc:
                self.logger.exception("Run failed", extra={"event": "run_failed", "trigger": trigger})
                raise UncaughtRunError(f"{type(exc).__name__}: {exc}") from exc

            log_event(
                self.logger,
                "Run complete",
                event="run_complete",
                trigger=trigger,
                status=result.status,
                fetched=result.fetched,
                new=result.new,
                published=result.published,
            )
            return result

    async def _run(self) -> RunResult:
        articles = await fetch_all_feeds(self.cfg.feeds, self.cfg.fetch, self.logger)
        result = RunResult(fetched=len(articles))

        seen = {a.link for a in articles if await self.store.contains(a.link)}
        fresh = filter_new(articles, seen, now=self._clock(), window_hours=self.cfg.filter.window_hours)
        result.new = len(fresh)
        log_event(
            self.logger,
            f"Found {len(fresh)} new articles",
            event="articles_filtered",
            fetched=len(articles),
            new=len(fresh),
        )
        if not fresh:
            log_event(self.logger, "No new articles found", event="run_empty")
            return result

        # Fail before any completion call or seen-link write when the batch cannot be appended.
        self.publisher.check_capacity(len(fresh))

        summaries: list[SummaryResult] = []
        for index, article in enumerate(fresh):
            if index:
                await self._sleep(self.cfg.summary.pacing_seconds)
            log_event(self.logger, f"Summarizing: {article.title}", event="summarize_start", title=article.title)
            summaries.append(await self.summarizer.summarize(article))
            await self.store.add(article.link)

        await self.publisher.publish(summaries, self.publisher.today())
        result.published = len(summaries)
        result.status = "published"
        return result

    async def processed_links(self) -> list[str]:
        return await self.store.links()

    async def aclose(self) -> None:
        await self.store.close()


def build_pipeline(cfg: AppConfig, logger: logging.Logger | None = None) -> DigestPipeline:
    """Wire the pipeline from configuration.

    Raises:
        ValueError: A required credential or identifier is missing, or a
            backend name is not supported
    """
    llm_logger = setup_llm_logger(cfg.logging, Path(cfg.logging.directory))
    provider = create_provider(cfg.provider, cfg.logging, llm_logger)
    summarizer = ArticleSummarizer(provider, cfg.summary, logger)
    publisher = NotionPublisher.from_config(cfg.notion, logger)
    store = open_store(cfg.store)
    return DigestPipeline(cfg, summarizer, publisher, store, logger)
