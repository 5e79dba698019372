"""Gemini adapter using google-genai SDK with native async."""

import os
from typing import Any

from google import genai
from google.genai import types as genai_types

from config.config_loader import ProviderConfig
from qa_agent.providers.base import ProviderAdapter, ProviderError


class GeminiAdapter(ProviderAdapter):
    """Google Gemini via google-genai SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        api_key = os.environ.get(config.api_key_env or "", "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = genai.Client(api_key=api_key)

    def format_request(self, model: str, prompt: str) -> dict[str, Any]:
        return {
            "model": model,
            "contents": prompt,
            "config": genai_types.GenerateContentConfig(
                max_output_tokens=self._config.max_tokens,
            ),
        }

    async def send(self, request: dict[str, Any]) -> Any:
        return await self._client.aio.models.generate_content(**request)

    def parse_response(self, raw: Any) -> str:
        if not raw.text:
            raise ProviderError(self.name(), "Empty response text")
        return raw.text
