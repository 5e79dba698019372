"""Agent Caller: one model invocation, failures returned as data."""

import logging

from config.config_loader import AppConfig
from qa_agent.models import AgentSpec, CallResult
from qa_agent.providers.anthropic import AnthropicAdapter
from qa_agent.providers.base import ProviderAdapter, ProviderError
from qa_agent.providers.gemini import GeminiAdapter
from qa_agent.providers.ollama import OllamaAdapter
from qa_agent.providers.openai_provider import OpenAIAdapter
from qa_agent.providers.xai import XAIAdapter

logger = logging.getLogger(__name__)

ADAPTER_CLASSES: dict[str, type[ProviderAdapter]] = {
    "openai": OpenAIAdapter,
    "anthropic": AnthropicAdapter,
    "gemini": GeminiAdapter,
    "xai": XAIAdapter,
    "ollama": OllamaAdapter,
}


def build_adapters(config: AppConfig) -> dict[str, ProviderAdapter]:
    """Build adapters for every available provider. Returns dict keyed by provider name."""
    adapters: dict[str, ProviderAdapter] = {}
    for name in sorted(config.available_providers):
        provider_cfg = config.providers[name]
        adapter_cls = ADAPTER_CLASSES.get(provider_cfg.sdk)
        if adapter_cls is None:
            logger.warning("Provider '%s' uses unknown sdk '%s', skipping", name, provider_cfg.sdk)
            continue
        try:
            adapters[name] = adapter_cls(provider_cfg)
        except ProviderError as exc:
            logger.warning("Failed to instantiate provider '%s': %s", name, exc)
    return adapters


class AgentCaller:
    """Invokes one configured model per call and never raises.

    Every failure (unknown provider, transport error, empty reply) comes back
    as ``CallResult(success=False, error=...)`` so a strategy can carry on
    after a partial failure. No retries happen here.
    """

    def __init__(self, adapters: dict[str, ProviderAdapter]) -> None:
        self._adapters = dict(adapters)

    @property
    def providers(self) -> list[str]:
        return list(self._adapters)

    def adapter_for(self, provider: str) -> ProviderAdapter | None:
        return self._adapters.get(provider)

    async def call(self, agent: AgentSpec, text: str) -> CallResult:
        adapter = self._adapters.get(agent.provider)
        if adapter is None:
            error = f"Unknown provider: {agent.provider}"
            logger.warning("Call to %s failed: %s", agent.label, error)
            return CallResult(success=False, error=error)

        if not text.strip():
            logger.warning("Calling %s with empty input", agent.label)

        try:
            response_text = await adapter.generate(agent.model, text)
        except ProviderError as exc:
            logger.warning("Call to %s failed: %s", agent.label, exc)
            return CallResult(success=False, error=str(exc))
        except Exception as exc:
            logger.warning("Call to %s failed unexpectedly: %s", agent.label, exc)
            return CallResult(success=False, error=f"Unexpected error: {exc}")

        return CallResult(success=True, text=response_text)
