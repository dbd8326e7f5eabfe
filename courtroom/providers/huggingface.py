"""Hugging Face inference router sentiment provider over httpx."""

import asyncio
import logging
import os
import time

import httpx

from config.config_loader import ProviderConfig
from courtroom.models import SentimentReading
from courtroom.providers.base import ProviderError, SentimentProvider
from courtroom.sentiment import parse_reading

logger = logging.getLogger(__name__)

_DEFAULT_ROUTER_URL = "https://router.huggingface.co/hf-inference/models/"


class HuggingFaceProvider(SentimentProvider):
    """Text-classification model hosted on the Hugging Face inference router."""

    def __init__(self, config: ProviderConfig, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        base_url = (config.base_url or _DEFAULT_ROUTER_URL).rstrip("/") + "/"
        self._url = f"{base_url}{config.model}"
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = client

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def _post(self, text: str) -> httpx.Response:
        payload = {"inputs": [text]}
        if self._client is not None:
            return await self._client.post(self._url, json=payload, headers=self._headers)
        async with httpx.AsyncClient() as client:
            return await client.post(self._url, json=payload, headers=self._headers)

    async def analyze(self, text: str, round_number: int) -> SentimentReading:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._post(text),
                timeout=self._config.timeout_sec,
            )
            response.raise_for_status()
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                self._config.name,
                f"API error {exc.response.status_code}: {exc.response.text[:200]}",
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        try:
            reading = parse_reading(response.json())
        except ValueError as exc:
            raise ProviderError(self._config.name, f"Parse error: {exc}") from exc

        logger.info(
            "HuggingFace round %d: %.2fs, %d labels",
            round_number,
            latency,
            len(reading),
        )
        return reading
