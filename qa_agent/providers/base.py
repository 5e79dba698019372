"""Abstract base for all provider adapters."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from config.config_loader import ProviderConfig

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class ProviderAdapter(ABC):
    """Turns a prompt into one provider request and the reply back into text.

    Subclasses implement the three transport hooks; ``generate`` ties them
    together and applies the configured timeout.
    """

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    def name(self) -> str:
        """Return the configured provider name (e.g. 'openai', 'ollama')."""
        return self._config.name

    def default_model(self) -> str:
        return self._config.model

    @abstractmethod
    def format_request(self, model: str, prompt: str) -> dict[str, Any]:
        """Build the request payload for a single prompt. Must not do I/O."""
        ...

    @abstractmethod
    async def send(self, request: dict[str, Any]) -> Any:
        """Perform exactly one outbound request and return the raw reply."""
        ...

    @abstractmethod
    def parse_response(self, raw: Any) -> str:
        """Extract the response text.

        Raises:
            ProviderError: If the reply carries no usable text.
        """
        ...

    async def generate(self, model: str, prompt: str) -> str:
        """Send ``prompt`` to ``model`` and return the response text.

        Raises:
            ProviderError: On API failure, timeout, or invalid response.
        """
        request = self.format_request(model, prompt)
        start = time.monotonic()
        try:
            raw = await asyncio.wait_for(self.send(request), timeout=self._config.timeout_sec)
        except TimeoutError as exc:
            raise ProviderError(self.name(), f"Request timed out after {self._config.timeout_sec}s") from exc
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(self.name(), f"API call failed: {exc}") from exc

        latency = time.monotonic() - start
        text = self.parse_response(raw)
        logger.info("%s (%s): %.2fs, %d chars", self.name(), model, latency, len(text))
        return text
