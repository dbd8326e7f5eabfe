"""OpenAI Whisper transcription using openai SDK with native async."""

import asyncio
import logging
import os
import time

from openai import AsyncOpenAI

from config.config_loader import ProviderConfig
from courtroom.providers.base import ProviderError, TranscriptionProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(TranscriptionProvider):
    """Whisper speech-to-text via openai SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = AsyncOpenAI(api_key=api_key, base_url=config.base_url)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def transcribe(self, audio: bytes, round_number: int) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.audio.transcriptions.create(
                    model=self._config.model,
                    file=("argument.wav", audio, "audio/wav"),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        text = (response.text or "").strip()
        if not text:
            raise ProviderError(self._config.name, "Empty transcription")

        logger.info(
            "Whisper round %d: %.2fs, %d bytes -> %d chars",
            round_number,
            latency,
            len(audio),
            len(text),
        )
        return text
