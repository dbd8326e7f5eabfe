"""Jury reactions: each juror leans toward a side and reacts to every argument."""

import logging
import random
from dataclasses import dataclass

from config.config_loader import JurorConfig
from courtroom.models import AggregatedSentiment, CaseData, ReactionEvent, Side, Verdict, VerdictEvent
from courtroom.trial import TrialObserver

logger = logging.getLogger(__name__)

_LEANING_LIMIT = 2.0

REACTION_FACES = {
    "happy": "😊",
    "heart": "❤️",
    "sad": "😢",
    "angry": "😠",
    "neutral": "😐",
    "confused": "😕",
}


def argument_impact(sentiment: AggregatedSentiment) -> float:
    """How much an argument moves a juror, before sympathy weighting."""
    if sentiment.positive > 0.6:
        return 1.0
    if sentiment.positive > 0.4:
        return 0.5
    if sentiment.negative > 0.6:
        return -0.5  # backfired
    return 0.2


@dataclass
class Juror:
    name: str
    sympathy_for_defense: float = 0.5   # 0 = prosecution bias, 1 = defense bias
    defense_leaning: float = 0.0
    last_reaction: str | None = None

    def react(self, sentiment: AggregatedSentiment, side: Side, rng: random.Random) -> str:
        """Update leaning for one argument and return the reaction name."""
        impact = argument_impact(sentiment)
        if side is Side.HUMAN:
            self.defense_leaning += impact * (0.5 + self.sympathy_for_defense * 0.5)
        else:
            self.defense_leaning -= impact * (0.5 + (1.0 - self.sympathy_for_defense) * 0.5)
        self.defense_leaning = max(-_LEANING_LIMIT, min(_LEANING_LIMIT, self.defense_leaning))

        if sentiment.positive > 0.6:
            reaction = rng.choice(["happy", "heart"])
        elif sentiment.positive > 0.4:
            reaction = "happy"
        elif sentiment.negative > 0.6:
            reaction = rng.choice(["sad", "angry"])
        elif sentiment.negative > 0.4:
            reaction = "sad"
        else:
            reaction = rng.choice(["neutral", "confused"])

        self.last_reaction = reaction
        return reaction

    def react_to_verdict(self, verdict: Verdict) -> str:
        if verdict is Verdict.FAVOR_HUMAN:
            reaction = "heart" if self.defense_leaning > 0 else "confused"
        elif verdict is Verdict.FAVOR_OPPONENT:
            reaction = "neutral" if self.defense_leaning < 0 else "sad"
        else:
            reaction = "confused"
        self.last_reaction = reaction
        return reaction

    def reset(self) -> None:
        self.defense_leaning = 0.0
        self.last_reaction = None


class JuryBox(TrialObserver):
    """Fans trial events out to the jurors and remembers their latest faces."""

    def __init__(self, jurors: list[Juror], rng: random.Random | None = None) -> None:
        self.jurors = jurors
        self._rng = rng or random.Random()

    @classmethod
    def from_config(cls, jury: list[JurorConfig], rng: random.Random | None = None) -> "JuryBox":
        jurors = [Juror(name=j.name, sympathy_for_defense=j.sympathy_for_defense) for j in jury]
        return cls(jurors, rng=rng)

    def reactions(self) -> dict[str, str | None]:
        return {j.name: j.last_reaction for j in self.jurors}

    def leaning(self) -> float:
        """Average defense leaning across the jury."""
        if not self.jurors:
            return 0.0
        return sum(j.defense_leaning for j in self.jurors) / len(self.jurors)

    def on_trial_start(self, case: CaseData | None, max_rounds: int) -> None:
        self.on_reset()

    def on_reaction(self, event: ReactionEvent) -> None:
        for juror in self.jurors:
            juror.react(event.sentiment, event.side, self._rng)
        logger.debug("Jury leaning after round %d %s: %+.2f",
                     event.round_number, event.side.value, self.leaning())

    def on_verdict(self, event: VerdictEvent) -> None:
        for juror in self.jurors:
            juror.react_to_verdict(event.verdict)

    def on_reset(self) -> None:
        for juror in self.jurors:
            juror.reset()
