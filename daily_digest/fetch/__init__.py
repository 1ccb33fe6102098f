"""
Feed retrieval.

This package fetches RSS/Atom feeds and normalizes their entries.
"""

from .feeds import fetch_all_feeds, fetch_feed, html_to_text, parse_feed, parse_published_date

__all__ = [
    "fetch_all_feeds",
    "fetch_feed",
    "parse_feed",
    "parse_published_date",
    "html_to_text",
]
