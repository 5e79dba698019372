"""Ollama adapter for a local inference server, over httpx."""

import json
import logging
from typing import Any

import httpx

from config.config_loader import ProviderConfig
from qa_agent.providers.base import ProviderAdapter, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaAdapter(ProviderAdapter):
    """Local Ollama server via POST /api/generate.

    The server streams newline-delimited JSON objects; the ``response`` field
    of every line is concatenated into the final text.
    """

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        self._base_url = (config.base_url or DEFAULT_BASE_URL).rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    def format_request(self, model: str, prompt: str) -> dict[str, Any]:
        return {"model": model, "prompt": prompt}

    async def send(self, request: dict[str, Any]) -> str:
        url = f"{self._base_url}/api/generate"
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout_sec) as client:
                response = await client.post(url, json=request)
                response.raise_for_status()
                return response.text
        except httpx.TimeoutException as exc:
            raise ProviderError(self.name(), f"Request timed out after {self._config.timeout_sec}s") from exc
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                self.name(),
                f"HTTP error {exc.response.status_code}: {exc.response.text[:200]}",
            ) from exc

    def parse_response(self, raw: Any) -> str:
        combined: list[str] = []
        for line in str(raw).splitlines():
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("Skipping non-JSON line from Ollama: %.80s", line)
                continue
            if isinstance(obj, dict) and obj.get("response"):
                combined.append(str(obj["response"]))

        text = "".join(combined).strip()
        if not text:
            raise ProviderError(self.name(), f"Model returned no valid output. Raw response: {str(raw)[:500]}")
        return text
