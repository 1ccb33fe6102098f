"""Tests for feed parsing and per-feed failure isolation."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from daily_digest.config import FetchConfig
from daily_digest.core.errors import FetchError
from daily_digest.fetch.feeds import fetch_all_feeds, fetch_feed, parse_feed


RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Research Blog</title>
    <link>https://research.example.com</link>
    <item>
      <title>New Model Released</title>
      <link>https://research.example.com/new-model</link>
      <description>&lt;p&gt;We release a &lt;b&gt;new&lt;/b&gt; model.&lt;/p&gt;</description>
      <pubDate>Sat, 17 Oct 2026 22:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Undated Post</title>
      <link>https://research.example.com/undated</link>
    </item>
    <item>
      <title>Bad Date</title>
      <link>https://research.example.com/bad-date</link>
      <pubDate>not a date at all</pubDate>
    </item>
    <item>
      <title>No Link</title>
      <description>orphan</description>
    </item>
  </channel>
</rss>
"""

ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Lab</title>
  <entry>
    <title>Atom Entry</title>
    <link href="https://atom.example.com/entry"/>
    <updated>2026-10-17T12:00:00+09:00</updated>
    <content type="html">&lt;p&gt;Full content body&lt;/p&gt;</content>
  </entry>
</feed>
"""

UNTITLED = b"""<?xml version="1.0"?>
<rss version="2.0"><channel>
  <item><title>Post</title><link>https://untitled.example.com/p</link></item>
</channel></rss>
"""


def _cfg() -> FetchConfig:
    return FetchConfig(retries=0, retry_delay_seconds=0.0)


def test_parse_rss_normalizes_entries():
    records = parse_feed(RSS, "https://research.example.com/rss")

    assert [r.title for r in records] == ["New Model Released", "Undated Post", "Bad Date"]
    first = records[0]
    assert first.link == "https://research.example.com/new-model"
    assert first.source == "Research Blog"
    assert first.content == "We release a new model."
    assert first.published_at == datetime(2026, 10, 17, 22, 0, tzinfo=timezone.utc)


def test_unparsable_or_missing_dates_yield_none():
    records = parse_feed(RSS, "https://research.example.com/rss")

    assert records[1].published_at is None
    assert records[2].published_at is None
    assert records[1].content == ""


def test_parse_atom_uses_content_and_updated():
    records = parse_feed(ATOM, "https://atom.example.com/feed")

    assert len(records) == 1
    assert records[0].source == "Atom Lab"
    assert records[0].content == "Full content body"
    assert records[0].published_at == datetime(2026, 10, 17, 3, 0, tzinfo=timezone.utc)


def test_source_falls_back_to_feed_url():
    records = parse_feed(UNTITLED, "https://untitled.example.com/rss")

    assert records[0].source == "https://untitled.example.com/rss"


def test_malformed_feed_raises_fetch_error():
    with pytest.raises(FetchError, match="broken.example.com") as excinfo:
        parse_feed(b"<html><body>not a feed", "https://broken.example.com")
    assert excinfo.value.url == "https://broken.example.com"


def test_http_error_raises_fetch_error_after_retries():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503)

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await fetch_feed(client, "https://down.example.com/rss", FetchConfig(retries=2, retry_delay_seconds=0.0))

    with pytest.raises(FetchError, match="503"):
        asyncio.run(_go())
    assert calls == 3


def test_unreachable_feed_does_not_affect_others():
    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == "research.example.com":
            return httpx.Response(200, content=RSS)
        if host == "atom.example.com":
            return httpx.Response(200, content=ATOM)
        raise httpx.ConnectError("unreachable", request=request)

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_all_feeds(
                [
                    "https://research.example.com/rss",
                    "https://down.example.com/rss",
                    "https://atom.example.com/feed",
                ],
                _cfg(),
                client=client,
            )

    records = asyncio.run(_go())

    assert [r.source for r in records] == ["Research Blog"] * 3 + ["Atom Lab"]


def test_results_keep_configured_feed_order_with_concurrency():
    async def handler(request: httpx.Request) -> httpx.Response:
        # The first feed answers last
        if request.url.host == "research.example.com":
            await asyncio.sleep(0.05)
            return httpx.Response(200, content=RSS)
        return httpx.Response(200, content=ATOM)

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_all_feeds(
                ["https://research.example.com/rss", "https://atom.example.com/feed"],
                FetchConfig(retries=0, concurrency=2),
                client=client,
            )

    records = asyncio.run(_go())

    assert records[0].source == "Research Blog"
    assert records[-1].source == "Atom Lab"
