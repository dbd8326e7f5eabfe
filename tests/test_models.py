"""Tests for courtroom/models.py dataclasses."""

import dataclasses

import pytest

from courtroom.models import (
    AggregatedSentiment,
    CaseData,
    LabelScore,
    RoundRecord,
    Sentiment,
    Side,
    StrategyTier,
    TrialPhase,
    TrialState,
)


def test_trial_state_defaults():
    state = TrialState()
    assert state.current_round == 0
    assert state.max_rounds == 3
    assert state.cumulative_human_score == 0.0
    assert state.cumulative_opponent_score == 0.0
    assert state.phase is TrialPhase.IDLE


def test_label_score_is_frozen():
    item = LabelScore("Positive", 0.9)
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.score = 0.1  # type: ignore[misc]


def test_round_record_allows_failed_analysis():
    record = RoundRecord(
        round_number=1,
        human_text="I was at home.",
        human_sentiment=None,
        human_score=None,
        opponent_text="Consider the facts.",
        opponent_sentiment=AggregatedSentiment(0.2, 0.2, 0.6, Sentiment.NEUTRAL),
        opponent_score=0.0,
        strategy=StrategyTier.BALANCED,
    )
    assert record.human_score is None
    assert record.opponent_sentiment.dominant is Sentiment.NEUTRAL


def test_side_values_name_the_courtroom_roles():
    assert Side.HUMAN.value == "defense"
    assert Side.OPPONENT.value == "prosecution"


def test_case_subject_is_defendant(sample_case):
    assert sample_case.subject == "Alex Doe"


def test_case_subject_defaults_when_blank():
    case = CaseData(title="State v. Nobody", charge="", summary="Facts.", defendant="  ", victim="")
    assert case.subject == "Defendant"


def test_case_source_defaults_to_builtin(sample_case):
    assert sample_case.source == "builtin"


def test_case_context_includes_all_fields(sample_case):
    context = sample_case.context()
    assert "State v. Test" in context
    assert "Petty Theft" in context
    assert "Alex Doe" in context
    assert "City Library" in context
    assert "bicycle" in context
