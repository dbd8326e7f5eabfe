"""Pure dataclasses and enums for the courtroom trial engine. No logic, no deps."""

from dataclasses import dataclass
from enum import Enum


class Sentiment(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Side(Enum):
    HUMAN = "defense"
    OPPONENT = "prosecution"


class StrategyTier(Enum):
    STRONG = "strong"
    BALANCED = "balanced"
    WEAK = "weak"


class TrialPhase(Enum):
    IDLE = "idle"
    AWAITING_HUMAN_ARGUMENT = "awaiting_human_argument"
    SCORING_HUMAN = "scoring_human"
    AWAITING_OPPONENT_ARGUMENT = "awaiting_opponent_argument"
    SCORING_OPPONENT = "scoring_opponent"
    ROUND_COMPLETE = "round_complete"
    CONCLUDED = "concluded"


class Verdict(Enum):
    FAVOR_HUMAN = "NOT GUILTY"
    FAVOR_OPPONENT = "GUILTY"
    INCONCLUSIVE = "HUNG JURY"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class LabelScore:
    label: str             # classifier label, e.g. "Very Positive"
    score: float


# Raw classifier output: one entry per label, probabilities not normalized
SentimentReading = list[LabelScore]


@dataclass(frozen=True)
class AggregatedSentiment:
    positive: float
    negative: float
    neutral: float
    dominant: Sentiment


@dataclass(frozen=True)
class RoundRecord:
    round_number: int
    human_text: str
    human_sentiment: AggregatedSentiment | None
    human_score: float | None
    opponent_text: str
    opponent_sentiment: AggregatedSentiment | None
    opponent_score: float | None
    strategy: StrategyTier


@dataclass
class TrialState:
    current_round: int = 0
    max_rounds: int = 3
    cumulative_human_score: float = 0.0
    cumulative_opponent_score: float = 0.0
    phase: TrialPhase = TrialPhase.IDLE


@dataclass
class CaseData:
    title: str
    charge: str
    summary: str
    defendant: str
    victim: str
    source: str = "builtin"   # file path or "builtin"

    @property
    def subject(self) -> str:
        return self.defendant.strip() or "Defendant"

    def context(self) -> str:
        return (
            f"Case: {self.title}\nCharge: {self.charge}\nDefendant: {self.defendant}\n"
            f"Victim: {self.victim}\n\nSummary: {self.summary}"
        )


@dataclass(frozen=True)
class ReactionEvent:
    round_number: int
    side: Side
    sentiment: AggregatedSentiment
    score: float


@dataclass(frozen=True)
class AnalysisFailure:
    round_number: int
    side: Side
    message: str


@dataclass(frozen=True)
class VerdictEvent:
    verdict: Verdict
    subject: str
    human_total: float
    opponent_total: float


@dataclass
class TrialResult:
    case: CaseData | None
    rounds: list[RoundRecord]
    state: TrialState
    verdict: Verdict
    total_duration_sec: float
