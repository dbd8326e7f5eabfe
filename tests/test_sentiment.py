"""Tests for courtroom/sentiment.py."""

import pytest

from courtroom.models import AggregatedSentiment, LabelScore, Sentiment
from courtroom.sentiment import SentimentError, aggregate, dominant_sentiment, parse_reading, score


FIVE_CLASS_READING = [
    LabelScore("Very Positive", 0.50),
    LabelScore("Positive", 0.20),
    LabelScore("Neutral", 0.15),
    LabelScore("Negative", 0.10),
    LabelScore("Very Negative", 0.05),
]


def test_aggregate_sums_graded_positive_and_negative_labels():
    agg = aggregate(FIVE_CLASS_READING)
    assert agg.positive == pytest.approx(0.70)
    assert agg.negative == pytest.approx(0.15)
    assert agg.neutral == pytest.approx(0.15)
    assert agg.dominant is Sentiment.POSITIVE


def test_aggregate_matches_labels_case_insensitively():
    agg = aggregate([LabelScore("VERY NEGATIVE", 0.4), LabelScore("negative", 0.3), LabelScore("NeUtRaL", 0.3)])
    assert agg.negative == pytest.approx(0.7)
    assert agg.neutral == pytest.approx(0.3)
    assert agg.dominant is Sentiment.NEGATIVE


def test_aggregate_neutral_is_assigned_last_wins():
    agg = aggregate([LabelScore("Neutral", 0.3), LabelScore("Mostly neutral", 0.1)])
    assert agg.neutral == pytest.approx(0.1)


def test_aggregate_ignores_unknown_labels():
    agg = aggregate([LabelScore("Positive", 0.4), LabelScore("Sarcastic", 0.9)])
    assert agg.positive == pytest.approx(0.4)
    assert agg.negative == 0.0
    assert agg.neutral == 0.0


def test_aggregate_empty_reading_is_neutral_zero():
    agg = aggregate([])
    assert agg == AggregatedSentiment(0.0, 0.0, 0.0, Sentiment.NEUTRAL)


def test_scenario_positive_reading():
    agg = aggregate([LabelScore("Positive", 0.8), LabelScore("Negative", 0.1), LabelScore("Neutral", 0.1)])
    assert score(agg) == pytest.approx(0.7)
    assert agg.dominant is Sentiment.POSITIVE


def test_scenario_negative_reading():
    agg = aggregate([LabelScore("Positive", 0.1), LabelScore("Negative", 0.8), LabelScore("Neutral", 0.1)])
    assert score(agg) == pytest.approx(-0.7)
    assert agg.dominant is Sentiment.NEGATIVE


@pytest.mark.parametrize(
    "values, expected",
    [
        ((0.5, 0.3, 0.2), Sentiment.POSITIVE),
        ((0.2, 0.5, 0.3), Sentiment.NEGATIVE),
        ((0.2, 0.3, 0.5), Sentiment.NEUTRAL),
        ((0.4, 0.4, 0.2), Sentiment.NEUTRAL),   # positive/negative tie
        ((0.4, 0.2, 0.4), Sentiment.NEUTRAL),   # positive/neutral tie
        ((0.2, 0.4, 0.4), Sentiment.NEUTRAL),   # negative/neutral tie
        ((1 / 3, 1 / 3, 1 / 3), Sentiment.NEUTRAL),
        ((0.0, 0.0, 0.0), Sentiment.NEUTRAL),
    ],
)
def test_dominant_sentiment_requires_strict_maximum(values, expected):
    assert dominant_sentiment(*values) is expected


def test_score_is_not_clamped():
    # Double-counted graded labels can push a channel past 1.
    agg = AggregatedSentiment(positive=1.4, negative=0.0, neutral=0.0, dominant=Sentiment.POSITIVE)
    assert score(agg) == pytest.approx(1.4)
    agg = AggregatedSentiment(positive=0.0, negative=1.3, neutral=0.0, dominant=Sentiment.NEGATIVE)
    assert score(agg) == pytest.approx(-1.3)


def test_score_ignores_neutral_channel():
    a = AggregatedSentiment(0.5, 0.2, 0.0, Sentiment.POSITIVE)
    b = AggregatedSentiment(0.5, 0.2, 0.9, Sentiment.NEUTRAL)
    assert score(a) == score(b)


def test_parse_reading_nested_batch_payload():
    payload = [[{"label": "Positive", "score": 0.6}, {"label": "Negative", "score": 0.4}]]
    reading = parse_reading(payload)
    assert reading == [LabelScore("Positive", 0.6), LabelScore("Negative", 0.4)]


def test_parse_reading_flat_payload():
    reading = parse_reading([{"label": "Neutral", "score": 1}])
    assert reading == [LabelScore("Neutral", 1.0)]


def test_parse_reading_mapping_payload():
    reading = parse_reading({"Very Positive": 0.3, "Neutral": 0.7})
    assert {r.label for r in reading} == {"Very Positive", "Neutral"}


def test_parse_reading_error_payload():
    with pytest.raises(SentimentError, match="Model is loading"):
        parse_reading({"error": "Model is loading"})


@pytest.mark.parametrize(
    "payload",
    [
        "not a list",
        [],
        [[]],
        [{"label": "Positive"}],
        [{"label": "Positive", "score": "high"}],
        [{"label": "Positive", "score": -0.1}],
        [{"label": "Positive", "score": float("nan")}],
        [{"label": "Positive", "score": float("inf")}],
        [{"label": "Positive", "score": "NaN"}],
    ],
)
def test_parse_reading_rejects_malformed_payloads(payload):
    with pytest.raises(SentimentError):
        parse_reading(payload)
