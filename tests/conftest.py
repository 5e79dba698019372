"""Shared pytest fixtures."""

import asyncio
from pathlib import Path
from typing import Any

import pytest

from config.config_loader import AppConfig, CollaborationConfig, DefaultsConfig, ProviderConfig
from qa_agent.models import AgentSpec, CallResult
from qa_agent.providers.base import ProviderAdapter, ProviderError


def ok(text: str) -> CallResult:
    return CallResult(success=True, text=text)


def fail(error: str = "API error") -> CallResult:
    return CallResult(success=False, error=error)


class ScriptedCaller:
    """Test double for AgentCaller.

    ``script`` maps an AgentSpec to a CallResult or a list of CallResults
    consumed one per call. Unscripted agents answer "Response from <label>".
    Every call is recorded in ``calls`` as (agent, prompt).
    """

    def __init__(
        self,
        script: dict[AgentSpec, CallResult | list[CallResult]] | None = None,
        delays: dict[AgentSpec, float] | None = None,
    ) -> None:
        self._script = {k: list(v) if isinstance(v, list) else v for k, v in (script or {}).items()}
        self._delays = delays or {}
        self.calls: list[tuple[AgentSpec, str]] = []
        self.completed: list[AgentSpec] = []

    def prompts_for(self, agent: AgentSpec) -> list[str]:
        return [prompt for a, prompt in self.calls if a == agent]

    async def call(self, agent: AgentSpec, text: str) -> CallResult:
        self.calls.append((agent, text))
        if agent in self._delays:
            await asyncio.sleep(self._delays[agent])
        scripted = self._script.get(agent)
        if isinstance(scripted, list):
            result = scripted.pop(0)
        elif scripted is None:
            result = ok(f"Response from {agent.label}")
        else:
            result = scripted
        self.completed.append(agent)
        return result


class MockAdapter(ProviderAdapter):
    """Test double ProviderAdapter; ``reply`` is returned by send, or raised if an exception."""

    def __init__(self, config: ProviderConfig, reply: Any = "Mock response") -> None:
        super().__init__(config)
        self.reply = reply
        self.requests: list[dict[str, Any]] = []

    def format_request(self, model: str, prompt: str) -> dict[str, Any]:
        return {"model": model, "prompt": prompt}

    async def send(self, request: dict[str, Any]) -> Any:
        self.requests.append(request)
        if isinstance(self.reply, BaseException):
            raise self.reply
        return self.reply

    def parse_response(self, raw: Any) -> str:
        if not raw:
            raise ProviderError(self.name(), "Empty response content")
        return str(raw)


def make_provider_config(name: str = "mock", **overrides: Any) -> ProviderConfig:
    values: dict[str, Any] = {
        "name": name,
        "sdk": "mock",
        "model": "mock-model",
        "timeout_sec": 30,
        "max_tokens": 1024,
        "api_key_env": None,
        "base_url": None,
    }
    values.update(overrides)
    return ProviderConfig(**values)


@pytest.fixture
def sample_provider_config() -> ProviderConfig:
    return make_provider_config()


@pytest.fixture
def collaboration_config() -> CollaborationConfig:
    return CollaborationConfig(mode="debate", rounds=2, max_rounds=3, parallel_consensus=True)


@pytest.fixture
def sample_app_config(tmp_path: Path, collaboration_config: CollaborationConfig) -> AppConfig:
    return AppConfig(
        defaults=DefaultsConfig(
            output_dir=tmp_path / "output",
            session_file=tmp_path / "sessions" / "history.jsonl",
            export_format="md",
            default_agents=["mock"],
        ),
        collaboration=collaboration_config,
        providers={
            "mock": make_provider_config("mock"),
            "openai": make_provider_config("openai", sdk="openai", model="gpt-4", api_key_env="OPENAI_API_KEY"),
            "ollama": make_provider_config(
                "ollama", sdk="ollama", model="gemma2:2b", base_url="http://localhost:11434",
            ),
        },
        available_providers={"mock", "ollama"},
    )


@pytest.fixture
def agent_a() -> AgentSpec:
    return AgentSpec("openai", "gpt-4")


@pytest.fixture
def agent_b() -> AgentSpec:
    return AgentSpec("claude", "claude-sonnet")


@pytest.fixture
def agent_c() -> AgentSpec:
    return AgentSpec("ollama", "gemma2:2b")


@pytest.fixture
def three_agents(agent_a: AgentSpec, agent_b: AgentSpec, agent_c: AgentSpec) -> list[AgentSpec]:
    return [agent_a, agent_b, agent_c]
