"""
RSS/Atom feed retrieval and normalization.

Each configured feed is fetched with httpx and parsed with feedparser into
ArticleRecord objects. A failure on one feed is logged and yields no
records; the other feeds are unaffected. Feeds are fetched concurrently up
to ``FetchConfig.concurrency`` and merged back in configured order.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
import logging
from typing import Any

from bs4 import BeautifulSoup
from dateutil.parser import parse as parse_date
import feedparser
import httpx

from ..config import FetchConfig
from ..core.errors import FetchError
from ..core.types import ArticleRecord
from ..logging_utils import log_event


# Common timezone abbreviations found in RFC 822 feed dates
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
    "KST": timezone(timedelta(hours=9)),
}


async def fetch_all_feeds(
    feed_urls: list[str],
    cfg: FetchConfig,
    logger: logging.Logger | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[ArticleRecord]:
    """Fetch every feed and return the merged records in feed order.

    Args:
        feed_urls: Feed URLs to poll
        cfg: Fetch configuration
        logger: Logger for per-feed events
        client: Optional shared client (a new one is created otherwise)

    Returns:
        Records from all reachable feeds; unreachable feeds contribute nothing
    """
    if client is None:
        async with httpx.AsyncClient(
            timeout=cfg.timeout_seconds,
            headers={"User-Agent": cfg.user_agent},
            follow_redirects=True,
            trust_env=cfg.trust_env,
        ) as owned:
            return await fetch_all_feeds(feed_urls, cfg, logger, owned)

    semaphore = asyncio.Semaphore(max(1, cfg.concurrency))

    async def _fetch_isolated(url: str) -> list[ArticleRecord]:
        async with semaphore:
            log_event(logger, "Fetching feed", event="feed_fetch_start", feed_url=url)
            try:
                records = await fetch_feed(client, url, cfg)
            except FetchError as exc:
                log_event(
                    logger,
                    f"Feed fetch failed: {exc}",
                    level=logging.ERROR,
                    event="feed_fetch_failed",
                    feed_url=url,
                    error=exc.reason,
                )
                return []
            except Exception as exc:  # noqa: BLE001
                log_event(
                    logger,
                    f"Feed processing failed: {url}: {type(exc).__name__}: {exc}",
                    level=logging.ERROR,
                    event="feed_fetch_failed",
                    feed_url=url,
                    error=f"{type(exc).__name__}: {exc}",
                )
                return []
        log_event(
            logger,
            f"Fetched {len(records)} entries",
            event="feed_fetch_done",
            feed_url=url,
            count=len(records),
        )
        return records

    results = await asyncio.gather(*(_fetch_isolated(url) for url in feed_urls))
    return [record for records in results for record in records]


async def fetch_feed(client: httpx.AsyncClient, url: str, cfg: FetchConfig) -> list[ArticleRecord]:
    """Fetch and parse a single feed.

    Raises:
        FetchError: The feed could not be retrieved or is not a parsable feed
    """
    content = await _get_with_retry(client, url, cfg)
    return parse_feed(content, url)


async def _get_with_retry(client: httpx.AsyncClient, url: str, cfg: FetchConfig) -> bytes:
    last_error = "no attempt made"
    for attempt in range(cfg.retries + 1):
        try:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.content
        except httpx.HTTPError as exc:
            last_error = f"{type(exc).__name__}: {exc}"
            if attempt < cfg.retries:
                await asyncio.sleep(cfg.retry_delay_seconds)
    raise FetchError(url, last_error)


def parse_feed(content: bytes | str, url: str) -> list[ArticleRecord]:
    """Parse raw feed bytes into records.

    Raises:
        FetchError: The document has no entries and feedparser flagged it malformed
    """
    feed = feedparser.parse(content)
    if feed.bozo and not feed.entries:
        reason = getattr(feed, "bozo_exception", None) or "malformed feed"
        raise FetchError(url, f"parse error: {reason}")

    source = (feed.feed.get("title") or "").strip() or url
    records = []
    for entry in feed.entries:
        record = _entry_to_record(entry, source)
        if record is not None:
            records.append(record)
    return records


def _entry_to_record(entry: Any, source: str) -> ArticleRecord | None:
    link = (entry.get("link") or "").strip()
    if not link:
        return None
    return ArticleRecord(
        title=(entry.get("title") or "").strip() or link,
        link=link,
        content=_entry_content(entry),
        source=source,
        published_at=parse_published_date(entry),
    )


def _entry_content(entry: Any) -> str:
    """Pick the richest text: description, then full content, then empty."""
    summary = entry.get("summary") or entry.get("description")
    if summary:
        text = html_to_text(summary)
        if text:
            return text
    for part in entry.get("content") or []:
        text = html_to_text(part.get("value") or "")
        if text:
            return text
    return ""


def html_to_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return " ".join(soup.get_text(separator=" ").split())


def parse_published_date(entry: Any) -> datetime | None:
    """Parse the publish date, falling back to the update date.

    Returns None when neither is present or parsable; naive values are
    taken as UTC.
    """
    for key in ("published", "updated"):
        raw = entry.get(key)
        if not raw:
            continue
        try:
            dt = parse_date(raw, tzinfos=TZINFOS)
        except (ValueError, OverflowError):
            continue
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    return None
