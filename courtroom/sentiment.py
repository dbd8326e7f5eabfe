"""Sentiment aggregation and argument scoring.

The classifier reports graded labels ("Very Positive", "Positive", "Neutral",
"Negative", "Very Negative"). They are folded into three channels:

  positive  sum of every label containing "positive"
  negative  sum of every label containing "negative"
  neutral   the score of the neutral label, assigned rather than summed;
            if several labels contain "neutral" the last one wins
"""

import logging
import math
from typing import Any

from courtroom.models import AggregatedSentiment, LabelScore, Sentiment, SentimentReading

logger = logging.getLogger(__name__)


class SentimentError(ValueError):
    """Raised when a classifier payload cannot be turned into a reading."""


def dominant_sentiment(positive: float, negative: float, neutral: float) -> Sentiment:
    """Return the strictly greatest channel; ties fall back to NEUTRAL."""
    if positive > negative and positive > neutral:
        return Sentiment.POSITIVE
    if negative > positive and negative > neutral:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def aggregate(reading: SentimentReading) -> AggregatedSentiment:
    """Fold a raw classifier reading into positive/negative/neutral channels."""
    positive = 0.0
    negative = 0.0
    neutral = 0.0

    for entry in reading:
        label = entry.label.lower()
        if "positive" in label:
            positive += entry.score
        elif "negative" in label:
            negative += entry.score
        elif "neutral" in label:
            neutral = entry.score
        else:
            logger.debug("Ignoring unknown sentiment label %r", entry.label)

    result = AggregatedSentiment(
        positive=positive,
        negative=negative,
        neutral=neutral,
        dominant=dominant_sentiment(positive, negative, neutral),
    )
    logger.debug(
        "Sentiment aggregated: dominant=%s (P:%.2f, N:%.2f, U:%.2f)",
        result.dominant.value, positive, negative, neutral,
    )
    return result


def score(agg: AggregatedSentiment) -> float:
    """Argument strength: positive minus negative, not clamped."""
    return agg.positive - agg.negative


def parse_reading(payload: Any) -> SentimentReading:
    """Normalize a classifier JSON payload into a SentimentReading.

    Accepts a flat list of {"label", "score"} objects, the nested [[...]]
    form returned by the inference API for batched inputs, or a
    {label: score} mapping.

    Raises:
        SentimentError: If the payload has an unexpected shape.
    """
    if isinstance(payload, dict):
        if "error" in payload:
            raise SentimentError(f"Classifier error: {payload['error']}")
        items = [{"label": k, "score": v} for k, v in payload.items()]
    elif isinstance(payload, list):
        items = payload
        # Batched responses nest one list per input; we only ever send one.
        while len(items) == 1 and isinstance(items[0], list):
            items = items[0]
    else:
        raise SentimentError(f"Unexpected payload type: {type(payload).__name__}")

    reading: SentimentReading = []
    for item in items:
        if not isinstance(item, dict) or "label" not in item or "score" not in item:
            raise SentimentError(f"Malformed label entry: {item!r}")
        try:
            value = float(item["score"])
        except (TypeError, ValueError) as exc:
            raise SentimentError(f"Non-numeric score for {item['label']!r}") from exc
        if not math.isfinite(value) or value < 0:
            raise SentimentError(f"Invalid probability for {item['label']!r}: {value}")
        reading.append(LabelScore(label=str(item["label"]), score=value))

    if not reading:
        raise SentimentError("Classifier returned no labels")
    return reading
