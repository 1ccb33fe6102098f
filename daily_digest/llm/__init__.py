"""LLM summarization."""

from .prompts import SummaryRequest, build_summary_request, truncate_content
from .providers.base import CompletionProvider
from .providers.factory import available_providers, create_provider
from .providers.gemini import GeminiProvider
from .providers.openai_compatible import OpenAICompatibleProvider
from .summarizer import ArticleSummarizer

__all__ = [
    "ArticleSummarizer",
    "CompletionProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "SummaryRequest",
    "available_providers",
    "build_summary_request",
    "create_provider",
    "truncate_content",
]
