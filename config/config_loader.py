"""Load settings.yaml into typed dataclasses. Reports which providers have credentials."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ProviderConfig:
    name: str
    sdk: str
    model: str
    timeout_sec: int
    max_tokens: int
    api_key_env: str | None = None
    base_url: str | None = None


@dataclass
class CollaborationConfig:
    mode: str = "debate"
    rounds: int = 2
    max_rounds: int = 5
    parallel_consensus: bool = True


@dataclass
class DefaultsConfig:
    output_dir: Path
    session_file: Path
    export_format: str = "md"
    default_agents: list[str] = field(default_factory=list)


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    collaboration: CollaborationConfig
    providers: dict[str, ProviderConfig]
    available_providers: set[str] = field(default_factory=set)


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing.
    Logs providers whose API key is missing but does not raise; callers check
    available_providers before building adapters.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        output_dir=Path(defaults_raw["output_dir"]),
        session_file=Path(defaults_raw["session_file"]),
        export_format=str(defaults_raw.get("export_format", "md")),
        default_agents=list(defaults_raw.get("default_agents", [])),
    )

    collab_raw = raw.get("collaboration", {})
    collaboration = CollaborationConfig(
        mode=str(collab_raw.get("mode", "debate")),
        rounds=int(collab_raw.get("rounds", 2)),
        max_rounds=int(collab_raw.get("max_rounds", 5)),
        parallel_consensus=bool(collab_raw.get("parallel_consensus", True)),
    )
    if collaboration.rounds > collaboration.max_rounds:
        raise ValueError(
            f"collaboration.rounds ({collaboration.rounds}) exceeds "
            f"collaboration.max_rounds ({collaboration.max_rounds})"
        )

    providers: dict[str, ProviderConfig] = {}
    available_providers: set[str] = set()

    for provider_name, provider_raw in raw["providers"].items():
        provider_cfg = ProviderConfig(
            name=provider_name,
            sdk=provider_raw["sdk"],
            model=provider_raw["model"],
            timeout_sec=int(provider_raw["timeout_sec"]),
            max_tokens=int(provider_raw["max_tokens"]),
            api_key_env=provider_raw.get("api_key_env"),
            base_url=provider_raw.get("base_url"),
        )
        providers[provider_name] = provider_cfg

        # Local providers (no api_key_env) are always considered available
        if not provider_cfg.api_key_env:
            available_providers.add(provider_name)
            logger.info("Provider available (no key required): %s", provider_name)
            continue

        api_key = os.environ.get(provider_cfg.api_key_env, "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s (set %s in .env)",
                provider_name,
                provider_cfg.api_key_env,
            )

    return AppConfig(
        defaults=defaults,
        collaboration=collaboration,
        providers=providers,
        available_providers=available_providers,
    )
