"""Load settings.yaml into typed dataclasses. Checks provider API keys at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

_PROVIDER_KINDS = {"sentiment", "transcription"}


@dataclass
class ProviderConfig:
    name: str
    kind: str              # "sentiment" or "transcription"
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int = 0
    base_url: str | None = None


@dataclass
class TrialConfig:
    max_rounds: int
    settle_delay_sec: float
    verdict_margin: float
    cases_dir: Path
    output_dir: Path
    sentiment_provider: str
    transcription_provider: str


@dataclass
class RebuttalConfig:
    strong: list[str] = field(default_factory=list)
    balanced: list[str] = field(default_factory=list)
    weak: list[str] = field(default_factory=list)
    fallback: str = "The prosecution rests."


@dataclass
class JurorConfig:
    name: str
    sympathy_for_defense: float = 0.5


@dataclass
class AppConfig:
    trial: TrialConfig
    providers: dict[str, ProviderConfig]
    rebuttals: RebuttalConfig
    jury: list[JurorConfig] = field(default_factory=list)
    available_providers: set[str] = field(default_factory=set)

    def providers_of_kind(self, kind: str) -> list[str]:
        return [name for name, cfg in self.providers.items() if cfg.kind == kind]


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError on an
    unknown provider kind. Logs which providers lack API keys but does not
    raise — callers check available_providers.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    trial_raw = raw["trial"]
    trial = TrialConfig(
        max_rounds=int(trial_raw["max_rounds"]),
        settle_delay_sec=float(trial_raw.get("settle_delay_sec", 2.0)),
        verdict_margin=float(trial_raw.get("verdict_margin", 0.5)),
        cases_dir=Path(trial_raw["cases_dir"]),
        output_dir=Path(trial_raw["output_dir"]),
        sentiment_provider=str(trial_raw["sentiment_provider"]),
        transcription_provider=str(trial_raw["transcription_provider"]),
    )

    rebuttals_raw = raw.get("rebuttals", {})
    rebuttals = RebuttalConfig(
        strong=[str(t).strip() for t in rebuttals_raw.get("strong", [])],
        balanced=[str(t).strip() for t in rebuttals_raw.get("balanced", [])],
        weak=[str(t).strip() for t in rebuttals_raw.get("weak", [])],
        fallback=str(rebuttals_raw.get("fallback", "The prosecution rests.")),
    )

    jury = [
        JurorConfig(
            name=str(j["name"]),
            sympathy_for_defense=float(j.get("sympathy_for_defense", 0.5)),
        )
        for j in raw.get("jury", [])
    ]

    providers: dict[str, ProviderConfig] = {}
    available_providers: set[str] = set()

    for provider_name, provider_raw in raw["providers"].items():
        kind = str(provider_raw["kind"])
        if kind not in _PROVIDER_KINDS:
            raise ValueError(f"Provider {provider_name!r} has unknown kind {kind!r}")
        provider_cfg = ProviderConfig(
            name=provider_name,
            kind=kind,
            sdk=provider_raw["sdk"],
            model=provider_raw["model"],
            api_key_env=provider_raw["api_key_env"],
            timeout_sec=int(provider_raw["timeout_sec"]),
            max_tokens=int(provider_raw.get("max_tokens", 0)),
            base_url=provider_raw.get("base_url"),
        )
        providers[provider_name] = provider_cfg

        api_key = os.environ.get(provider_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s (%s)", provider_name, kind)
        else:
            logger.info(
                "Provider skipped (no API key): %s — set %s in .env",
                provider_name,
                provider_raw["api_key_env"],
            )

    return AppConfig(
        trial=trial,
        providers=providers,
        rebuttals=rebuttals,
        jury=jury,
        available_providers=available_providers,
    )
