"""Exception types raised along the digest pipeline."""

from __future__ import annotations


class DigestError(Exception):
    """Base class for pipeline errors."""


class FetchError(DigestError):
    """A feed could not be retrieved or parsed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class SummarizationError(DigestError):
    """The language model call failed or returned nothing usable."""


class PublishError(DigestError):
    """The document service rejected the append call."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UncaughtRunError(DigestError):
    """An unexpected failure escaped a pipeline run."""


class RunInProgressError(DigestError):
    """A run was requested while another one is still in flight."""
