"""Shared pytest fixtures."""

import asyncio
import random
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, JurorConfig, ProviderConfig, RebuttalConfig, TrialConfig
from courtroom.models import CaseData, LabelScore, SentimentReading
from courtroom.providers.base import SentimentProvider, TranscriptionProvider
from courtroom.strategy import RebuttalPool
from courtroom.trial import TrialObserver


def make_reading(positive: float, negative: float, neutral: float) -> SentimentReading:
    return [
        LabelScore("Positive", positive),
        LabelScore("Negative", negative),
        LabelScore("Neutral", neutral),
    ]


@pytest.fixture
def sample_provider_config() -> ProviderConfig:
    return ProviderConfig(
        name="test_model",
        kind="sentiment",
        sdk="httpx",
        model="org/test-sentiment",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        base_url="https://example.test/models/",
    )


@pytest.fixture
def sample_rebuttal_config() -> RebuttalConfig:
    return RebuttalConfig(
        strong=["Strong rebuttal."],
        balanced=["Balanced rebuttal."],
        weak=["Weak rebuttal."],
    )


@pytest.fixture
def sample_app_config(tmp_path: Path, sample_rebuttal_config: RebuttalConfig) -> AppConfig:
    return AppConfig(
        trial=TrialConfig(
            max_rounds=3,
            settle_delay_sec=0.0,
            verdict_margin=0.5,
            cases_dir=tmp_path / "cases",
            output_dir=tmp_path / "output",
            sentiment_provider="huggingface",
            transcription_provider="whisper",
        ),
        providers={
            "huggingface": ProviderConfig(
                name="huggingface", kind="sentiment", sdk="httpx",
                model="tabularisai/multilingual-sentiment-analysis",
                api_key_env="TEST_HF_KEY", timeout_sec=30,
            ),
            "whisper": ProviderConfig(
                name="whisper", kind="transcription", sdk="openai",
                model="whisper-1", api_key_env="TEST_OPENAI_KEY", timeout_sec=60,
            ),
        },
        rebuttals=sample_rebuttal_config,
        jury=[JurorConfig("Juror 1", 0.5), JurorConfig("Juror 2", 0.9)],
        available_providers={"huggingface", "whisper"},
    )


@pytest.fixture
def sample_case() -> CaseData:
    return CaseData(
        title="State v. Test",
        charge="Petty Theft",
        summary="A bicycle went missing from the library rack.",
        defendant="Alex Doe",
        victim="City Library",
    )


@pytest.fixture
def rebuttal_pool(sample_rebuttal_config: RebuttalConfig) -> RebuttalPool:
    return RebuttalPool.from_config(sample_rebuttal_config, rng=random.Random(7))


class MockSentimentProvider(SentimentProvider):
    """Test double SentimentProvider."""

    def __init__(self, provider_name: str = "mock", reading: SentimentReading | None = None) -> None:
        self._name = provider_name
        self._reading = reading if reading is not None else make_reading(0.2, 0.2, 0.6)
        # Shadow the class method with an AsyncMock at the instance level.
        self.analyze = AsyncMock(return_value=self._reading)  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-sentiment"

    async def analyze(self, text: str, round_number: int) -> SentimentReading:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return self._reading


class GatedSentimentProvider(SentimentProvider):
    """Holds every analysis until the test opens the gate."""

    def __init__(self, reading: SentimentReading) -> None:
        self.reading = reading
        self.gate = asyncio.Event()
        self.calls: list[tuple[str, int]] = []

    def name(self) -> str:
        return "gated"

    def model_string(self) -> str:
        return "gated-sentiment"

    async def analyze(self, text: str, round_number: int) -> SentimentReading:
        self.calls.append((text, round_number))
        await self.gate.wait()
        return self.reading


class MockTranscriber(TranscriptionProvider):
    def __init__(self, text: str = "Transcribed argument.") -> None:
        self.transcribe = AsyncMock(return_value=text)  # type: ignore[assignment]

    def name(self) -> str:
        return "mock-stt"

    def model_string(self) -> str:
        return "mock-stt-model"

    async def transcribe(self, audio: bytes, round_number: int) -> str:  # type: ignore[override]
        return ""


class RecordingObserver(TrialObserver):
    """Collects every event as (hook, payload) tuples."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def hooks(self, name: str) -> list[object]:
        return [payload for hook, payload in self.events if hook == name]

    def on_trial_start(self, case, max_rounds):
        self.events.append(("trial_start", max_rounds))

    def on_round_start(self, round_number, max_rounds):
        self.events.append(("round_start", round_number))

    def on_human_argument(self, round_number, text):
        self.events.append(("human_argument", text))

    def on_opponent_thinking(self, round_number, strategy):
        self.events.append(("opponent_thinking", strategy))

    def on_opponent_argument(self, round_number, text, strategy):
        self.events.append(("opponent_argument", text))

    def on_reaction(self, event):
        self.events.append(("reaction", event))

    def on_analysis_failed(self, failure):
        self.events.append(("analysis_failed", failure))

    def on_round_complete(self, record):
        self.events.append(("round_complete", record))

    def on_verdict(self, event):
        self.events.append(("verdict", event))

    def on_reset(self):
        self.events.append(("reset", None))


@pytest.fixture
def mock_sentiment() -> MockSentimentProvider:
    return MockSentimentProvider()


@pytest.fixture
def recorder() -> RecordingObserver:
    return RecordingObserver()
