"""
Output publishers.

This package renders run results into document blocks and delivers them.
"""

from .notion import NotionPublisher, blocks_needed, build_blocks, format_run_date

__all__ = ["NotionPublisher", "blocks_needed", "build_blocks", "format_run_date"]
