"""OpenAI-compatible chat-completions provider."""

from __future__ import annotations

from typing import Any

import httpx

from ...core.errors import SummarizationError
from ...core.types import ArticleRecord
from .base import CompletionProvider


class OpenAICompatibleProvider(CompletionProvider):
    """Calls ``POST {base_url}/chat/completions`` with a single user message."""

    name = "openai"

    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        article: ArticleRecord | None = None,
    ) -> str:
        payload = {
            "model": self.cfg.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        try:
            data = await self._post(payload)
        except httpx.HTTPError as exc:
            self._log_llm_response(article, "provider_error", str(exc), prompt)
            raise SummarizationError(f"{type(exc).__name__}: {exc}") from exc

        content = _extract_text(data)
        if not content.strip():
            self._log_llm_response(article, "empty_response", "", prompt)
            raise SummarizationError("Completion response contained no text")
        self._log_llm_response(article, "ok", content, prompt)
        return content.strip()

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with self._client() as client:
            resp = await client.post(url, headers=headers, json=payload)
            resp.raise_for_status()
            try:
                return resp.json()
            except ValueError as exc:
                raise httpx.DecodingError(f"Invalid JSON response: {exc}", request=resp.request) from exc

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env)


def _extract_text(data: dict[str, Any]) -> str:
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return ""
