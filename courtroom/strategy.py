"""Opponent counter-strategy and the pre-authored rebuttal pools it draws from."""

import logging
import random

from config.config_loader import RebuttalConfig
from courtroom.errors import TrialConfigurationError
from courtroom.models import AggregatedSentiment, Sentiment, StrategyTier

logger = logging.getLogger(__name__)

_FALLBACK_REBUTTAL = "The prosecution rests."

# Inverse feedback: the better the defense lands, the weaker the counter.
_TIER_BY_DOMINANT: dict[Sentiment, StrategyTier] = {
    Sentiment.NEGATIVE: StrategyTier.STRONG,
    Sentiment.POSITIVE: StrategyTier.WEAK,
    Sentiment.NEUTRAL: StrategyTier.BALANCED,
}


def select_strategy(human_sentiment: AggregatedSentiment | None) -> StrategyTier:
    """Pick the opponent's rebuttal tier from the defense's dominant sentiment.

    A missing sentiment (the analysis failed) is treated as neutral.
    """
    if human_sentiment is None:
        return StrategyTier.BALANCED
    return _TIER_BY_DOMINANT[human_sentiment.dominant]


class RebuttalPool:
    """Pre-authored opponent arguments, one pool per strategy tier."""

    def __init__(
        self,
        pools: dict[StrategyTier, list[str]],
        fallback: str = _FALLBACK_REBUTTAL,
        rng: random.Random | None = None,
    ) -> None:
        self._pools = {tier: list(pools.get(tier, [])) for tier in StrategyTier}
        self._fallback = fallback
        self._rng = rng or random.Random()

    @classmethod
    def from_config(cls, config: RebuttalConfig, rng: random.Random | None = None) -> "RebuttalPool":
        return cls(
            pools={
                StrategyTier.STRONG: config.strong,
                StrategyTier.BALANCED: config.balanced,
                StrategyTier.WEAK: config.weak,
            },
            fallback=config.fallback,
            rng=rng,
        )

    def validate(self) -> None:
        """Raise TrialConfigurationError if any tier has nothing to say."""
        empty = [tier.value for tier in StrategyTier if not self._pools[tier]]
        if empty:
            raise TrialConfigurationError(
                f"Rebuttal pool is empty for tier(s): {', '.join(empty)}"
            )

    def pick(self, tier: StrategyTier) -> str:
        """Uniform random choice from the tier's pool; repeats are allowed."""
        pool = self._pools[tier]
        if not pool:
            logger.warning("No %s rebuttals configured, using fallback", tier.value)
            return self._fallback
        return self._rng.choice(pool)
