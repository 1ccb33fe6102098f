from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Collection, Iterable

from .types import ArticleRecord


def is_recent(article: ArticleRecord, now: datetime, window: timedelta) -> bool:
    """Return True when the article was published strictly inside the window."""
    if article.published_at is None:
        return False
    return article.published_at > now - window


def filter_new(
    articles: Iterable[ArticleRecord],
    seen_links: Collection[str],
    now: datetime | None = None,
    window_hours: float = 24.0,
) -> list[ArticleRecord]:
    """Keep articles that are recent and whose link has not been seen.

    Order is preserved. Only the first occurrence of a link inside the batch
    is kept. ``seen_links`` is read, never modified.
    """
    now = now or datetime.now(timezone.utc)
    window = timedelta(hours=window_hours)
    batch_links: set[str] = set()
    kept: list[ArticleRecord] = []

    for article in articles:
        if article.link in seen_links or article.link in batch_links:
            continue
        if not is_recent(article, now, window):
            continue
        batch_links.add(article.link)
        kept.append(article)

    return kept
