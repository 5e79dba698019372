"""xAI Grok adapter (OpenAI-compatible API)."""

from config.config_loader import ProviderConfig
from qa_agent.providers.base import ProviderError
from qa_agent.providers.openai_provider import OpenAIAdapter


class XAIAdapter(OpenAIAdapter):
    """Grok over the OpenAI wire format; base_url is mandatory."""

    def __init__(self, config: ProviderConfig) -> None:
        if not config.base_url:
            raise ProviderError(config.name, "base_url is required for xAI provider")
        super().__init__(config)
