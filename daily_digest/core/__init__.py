"""
Core domain models and business logic.

This package contains data types, errors and filtering logic that are
independent of any specific pipeline stage.
"""

from .errors import (
    DigestError,
    FetchError,
    PublishError,
    RunInProgressError,
    SummarizationError,
    UncaughtRunError,
)
from .novelty import filter_new, is_recent
from .store import MemorySeenStore, SeenStore, SqliteSeenStore, open_store
from .types import ArticleRecord, RunResult, SummaryResult

__all__ = [
    "ArticleRecord",
    "SummaryResult",
    "RunResult",
    "DigestError",
    "FetchError",
    "SummarizationError",
    "PublishError",
    "UncaughtRunError",
    "RunInProgressError",
    "filter_new",
    "is_recent",
    "SeenStore",
    "MemorySeenStore",
    "SqliteSeenStore",
    "open_store",
]
