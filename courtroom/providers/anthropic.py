"""Claude as a sentiment classifier, via the anthropic SDK with native async."""

import asyncio
import json
import logging
import os
import re
import time

import anthropic as anthropic_sdk

from config.config_loader import ProviderConfig
from courtroom.models import SentimentReading
from courtroom.providers.base import ProviderError, SentimentProvider
from courtroom.sentiment import parse_reading

logger = logging.getLogger(__name__)

SENTIMENT_LABELS = ["Very Negative", "Negative", "Neutral", "Positive", "Very Positive"]

_CLASSIFY_PROMPT = """Classify the sentiment of the courtroom argument below.

Reply with a single JSON object and nothing else. Its keys must be exactly
{labels} and each value the probability (0 to 1) of that label. The values
should sum to 1.

Argument:
\"\"\"{text}\"\"\""""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def _extract_json(content: str) -> dict:
    """Pull the first JSON object out of a model reply (tolerates code fences)."""
    match = _JSON_OBJECT.search(content)
    if not match:
        raise ValueError("No JSON object in response")
    data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("Response JSON is not an object")
    return data


class AnthropicProvider(SentimentProvider):
    """Anthropic Claude sentiment classifier via anthropic SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def analyze(self, text: str, round_number: int) -> SentimentReading:
        prompt = _CLASSIFY_PROMPT.format(labels=json.dumps(SENTIMENT_LABELS), text=text)
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(
                    model=self._config.model,
                    max_tokens=self._config.max_tokens or 256,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        text_blocks = [b.text for b in response.content if b.type == "text"]
        if not text_blocks:
            raise ProviderError(self._config.name, "No text blocks in response")

        try:
            reading = parse_reading(_extract_json("\n".join(text_blocks)))
        except ValueError as exc:
            raise ProviderError(self._config.name, f"Parse error: {exc}") from exc

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info(
            "Anthropic round %d: %.2fs, %s tokens",
            round_number,
            latency,
            token_count,
        )
        return reading
