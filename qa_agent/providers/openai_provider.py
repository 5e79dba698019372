"""OpenAI adapter using openai SDK with native async."""

import os
from typing import Any

from openai import AsyncOpenAI

from config.config_loader import ProviderConfig
from qa_agent.providers.base import ProviderAdapter, ProviderError


class OpenAIAdapter(ProviderAdapter):
    """OpenAI chat completions via openai SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        api_key = os.environ.get(config.api_key_env or "", "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = AsyncOpenAI(api_key=api_key, base_url=config.base_url)

    def format_request(self, model: str, prompt: str) -> dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self._config.max_tokens,
        }

    async def send(self, request: dict[str, Any]) -> Any:
        return await self._client.chat.completions.create(**request)

    def parse_response(self, raw: Any) -> str:
        choice = raw.choices[0] if raw.choices else None
        if not choice or not choice.message.content:
            raise ProviderError(self.name(), "Empty response content")
        return choice.message.content
