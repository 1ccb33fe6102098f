from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from daily_digest.core.types import ArticleRecord


NOW = datetime(2026, 10, 18, 0, 0, tzinfo=timezone.utc)


def make_article(
    title: str = "Example",
    link: str = "https://example.com/post",
    content: str = "Body text",
    source: str = "Example Blog",
    age: timedelta | None = timedelta(hours=1),
) -> ArticleRecord:
    return ArticleRecord(
        title=title,
        link=link,
        content=content,
        source=source,
        published_at=None if age is None else NOW - age,
    )


@pytest.fixture
def article_factory():
    return make_article
