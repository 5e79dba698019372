"""Anthropic Claude adapter using anthropic SDK with native async."""

import os
from typing import Any

import anthropic as anthropic_sdk

from config.config_loader import ProviderConfig
from qa_agent.providers.base import ProviderAdapter, ProviderError


class AnthropicAdapter(ProviderAdapter):
    """Anthropic Claude messages API via anthropic SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        api_key = os.environ.get(config.api_key_env or "", "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def format_request(self, model: str, prompt: str) -> dict[str, Any]:
        return {
            "model": model,
            "max_tokens": self._config.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def send(self, request: dict[str, Any]) -> Any:
        return await self._client.messages.create(**request)

    def parse_response(self, raw: Any) -> str:
        if not raw.content:
            raise ProviderError(self.name(), "Empty response content")

        text_blocks = [b.text for b in raw.content if b.type == "text"]
        if not text_blocks:
            raise ProviderError(self.name(), "No text blocks in response")

        return "\n".join(text_blocks)
