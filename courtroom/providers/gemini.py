"""Gemini transcription using google-genai SDK with native async."""

import asyncio
import logging
import os
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import ProviderConfig
from courtroom.providers.base import ProviderError, TranscriptionProvider

logger = logging.getLogger(__name__)

_TRANSCRIBE_PROMPT = (
    "Transcribe this recording of a defense lawyer's courtroom argument. "
    "Reply with the spoken words only, no commentary."
)


class GeminiProvider(TranscriptionProvider):
    """Google Gemini speech-to-text via google-genai SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = genai.Client(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def transcribe(self, audio: bytes, round_number: int) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model,
                    contents=[
                        _TRANSCRIBE_PROMPT,
                        genai_types.Part.from_bytes(data=audio, mime_type="audio/wav"),
                    ],
                    config=genai_types.GenerateContentConfig(
                        max_output_tokens=self._config.max_tokens or None,
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        if not response.text:
            raise ProviderError(self._config.name, "Empty response text")

        logger.info(
            "Gemini round %d: %.2fs, %d bytes audio",
            round_number,
            latency,
            len(audio),
        )
        return response.text.strip()
