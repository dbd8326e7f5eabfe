"""Abstract bases for the sentiment and transcription providers."""

from abc import ABC, abstractmethod

from courtroom.models import SentimentReading


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class SentimentProvider(ABC):
    """Classifies a text into per-label sentiment probabilities."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'huggingface', 'claude')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def analyze(self, text: str, round_number: int) -> SentimentReading:
        """Classify the sentiment of a single argument.

        Args:
            text: The argument text to classify.
            round_number: The trial round number (1-indexed, 0 for health checks).

        Returns:
            List of LabelScore entries, one per classifier label.

        Raises:
            ProviderError: On API failure, timeout, or invalid response.
        """
        ...


class TranscriptionProvider(ABC):
    """Turns recorded audio into argument text."""

    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def model_string(self) -> str:
        ...

    @abstractmethod
    async def transcribe(self, audio: bytes, round_number: int) -> str:
        """Transcribe WAV audio bytes.

        Raises:
            ProviderError: On API failure, timeout, or empty transcript.
        """
        ...
