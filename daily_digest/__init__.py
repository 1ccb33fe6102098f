"""
Daily Digest - AI blog RSS summarizer publishing to Notion.

This package polls a fixed set of RSS/Atom feeds, keeps entries published
in the last day that were not processed before, summarizes each with a
language model and appends the results to a Notion page. Runs are started
by a daily scheduler or the /run-now endpoint.

Main entry point is the CLI via `daily-digest serve`.

Example:
    $ daily-digest run -c config.yaml
"""

__all__ = ["__version__", "ArticleRecord", "DigestPipeline", "build_pipeline", "load_config"]
__version__ = "0.1.0"

from .config import load_config
from .core.types import ArticleRecord
from .runner import DigestPipeline, build_pipeline
