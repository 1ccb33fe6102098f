"""Google Gemini provider."""

from __future__ import annotations

from typing import Any

import httpx

from ...core.errors import SummarizationError
from ...core.types import ArticleRecord
from .base import CompletionProvider


class GeminiProvider(CompletionProvider):
    """Gemini-backed provider using the ``generateContent`` endpoint."""

    name = "gemini"

    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        article: ArticleRecord | None = None,
    ) -> str:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        try:
            data = await self._post(payload)
        except httpx.HTTPError as exc:
            self._log_llm_response(article, "provider_error", str(exc), prompt)
            raise SummarizationError(f"{type(exc).__name__}: {exc}") from exc

        content = _extract_text(data)
        if not content.strip():
            self._log_llm_response(article, "empty_response", "", prompt)
            raise SummarizationError("Gemini response contained no text")
        self._log_llm_response(article, "ok", content, prompt)
        return content.strip()

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{self.cfg.model}:generateContent"
        params = {"key": self.api_key}
        async with self._client() as client:
            resp = await client.post(url, params=params, json=payload)
            resp.raise_for_status()
            try:
                return resp.json()
            except ValueError as exc:
                raise httpx.DecodingError(f"Invalid JSON response: {exc}", request=resp.request) from exc

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env)


def _extract_text(data: dict[str, Any]) -> str:
    """Join the text parts of the first candidate, skipping thought parts when possible."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    texts = [part.get("text", "") for part in parts if not part.get("thought")]
    if not any(texts):
        texts = [part.get("text", "") for part in parts]
    return "".join(texts)
