"""Tests for courtroom/strategy.py."""

import random
from collections import Counter

import pytest

from courtroom.errors import TrialConfigurationError
from courtroom.models import AggregatedSentiment, Sentiment, StrategyTier
from courtroom.strategy import RebuttalPool, select_strategy


def _agg(dominant: Sentiment) -> AggregatedSentiment:
    return AggregatedSentiment(0.3, 0.3, 0.3, dominant)


@pytest.mark.parametrize(
    "dominant, tier",
    [
        (Sentiment.NEGATIVE, StrategyTier.STRONG),
        (Sentiment.POSITIVE, StrategyTier.WEAK),
        (Sentiment.NEUTRAL, StrategyTier.BALANCED),
    ],
)
def test_select_strategy_by_dominant(dominant, tier):
    assert select_strategy(_agg(dominant)) is tier


def test_select_strategy_depends_only_on_dominant():
    strong_text = AggregatedSentiment(0.45, 0.55, 0.0, Sentiment.NEGATIVE)
    crushing = AggregatedSentiment(0.0, 1.0, 0.0, Sentiment.NEGATIVE)
    assert select_strategy(strong_text) is select_strategy(crushing) is StrategyTier.STRONG


def test_select_strategy_without_sentiment_is_balanced():
    assert select_strategy(None) is StrategyTier.BALANCED


def test_pick_draws_from_matching_pool(rebuttal_pool):
    assert rebuttal_pool.pick(StrategyTier.STRONG) == "Strong rebuttal."
    assert rebuttal_pool.pick(StrategyTier.BALANCED) == "Balanced rebuttal."
    assert rebuttal_pool.pick(StrategyTier.WEAK) == "Weak rebuttal."


def test_pick_is_uniform_and_allows_repeats():
    texts = ["a", "b", "c"]
    pool = RebuttalPool({tier: texts for tier in StrategyTier}, rng=random.Random(1))
    counts = Counter(pool.pick(StrategyTier.WEAK) for _ in range(3000))
    assert set(counts) == set(texts)
    assert all(800 < n < 1200 for n in counts.values())


def test_pick_same_seed_same_sequence():
    pools = {tier: ["a", "b", "c", "d"] for tier in StrategyTier}
    first = RebuttalPool(pools, rng=random.Random(42))
    second = RebuttalPool(pools, rng=random.Random(42))
    assert [first.pick(StrategyTier.STRONG) for _ in range(10)] == [
        second.pick(StrategyTier.STRONG) for _ in range(10)
    ]


def test_pick_empty_pool_uses_fallback(caplog):
    pool = RebuttalPool({StrategyTier.STRONG: ["x"]}, fallback="We rest.")
    assert pool.pick(StrategyTier.WEAK) == "We rest."
    assert any("fallback" in msg for msg in caplog.messages)


def test_validate_passes_with_all_pools(rebuttal_pool):
    rebuttal_pool.validate()


def test_validate_names_empty_tiers():
    pool = RebuttalPool({StrategyTier.STRONG: ["x"], StrategyTier.WEAK: []})
    with pytest.raises(TrialConfigurationError, match="balanced, weak"):
        pool.validate()


def test_from_config_copies_pools(sample_rebuttal_config):
    pool = RebuttalPool.from_config(sample_rebuttal_config, rng=random.Random(0))
    sample_rebuttal_config.strong.append("Added later.")
    assert {pool.pick(StrategyTier.STRONG) for _ in range(50)} == {"Strong rebuttal."}
