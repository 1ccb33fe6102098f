"""
Core data types for the daily digest.

This module defines the records that flow through one pipeline run:
- ArticleRecord: One normalized feed entry
- SummaryResult: An article paired with the summary produced for it
- RunResult: Counts reported back to the trigger that started a run
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ArticleRecord:
    """One entry parsed from an RSS/Atom feed.

    Attributes:
        title: The entry headline
        link: URL of the entry; identifies the article for novelty tracking
        content: Best-effort plain text of the entry, may be empty
        source: Feed display name, or the feed URL when the feed has no title
        published_at: Timezone-aware publish time, or None when the feed
            provides no parsable date (such entries are never recent)
    """

    title: str
    link: str
    content: str = ""
    source: str = ""
    published_at: datetime | None = None


@dataclass(frozen=True)
class SummaryResult:
    """An article with the summary text produced for it.

    Attributes:
        article: The summarized article
        summary: LLM output, or the fallback string when the call failed
        status: "ok" or "fallback"
    """

    article: ArticleRecord
    summary: str
    status: str = "ok"


@dataclass
class RunResult:
    """Outcome of one pipeline pass.

    Attributes:
        fetched: Entries parsed across all feeds
        new: Entries that passed the recency/novelty filter
        published: Articles appended to the document
        status: "published", or "empty" when nothing new was found
    """

    fetched: int = 0
    new: int = 0
    published: int = 0
    status: str = "empty"
