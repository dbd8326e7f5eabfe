"""Final verdict: compare cumulative scores, assemble the TrialResult."""

import logging
import time

from courtroom.models import CaseData, RoundRecord, TrialResult, TrialState, Verdict

logger = logging.getLogger(__name__)

DEFAULT_VERDICT_MARGIN = 0.5


def resolve_verdict(
    human_total: float,
    opponent_total: float,
    margin: float = DEFAULT_VERDICT_MARGIN,
) -> Verdict:
    """Resolve the three-way outcome from the two cumulative totals.

    The defense wins only when it leads by more than ``margin``; the
    prosecution only when it leads by more than ``margin``. Anything
    closer is a hung jury.
    """
    difference = human_total - opponent_total
    if difference > margin:
        verdict = Verdict.FAVOR_HUMAN
    elif difference < -margin:
        verdict = Verdict.FAVOR_OPPONENT
    else:
        verdict = Verdict.INCONCLUSIVE

    logger.info(
        "Defense score: %.3f | Prosecution score: %.3f | Verdict: %s",
        human_total, opponent_total, verdict.label,
    )
    return verdict


def build_result(
    case: CaseData | None,
    history: list[RoundRecord],
    state: TrialState,
    verdict: Verdict,
    trial_start_time: float,
) -> TrialResult:
    """Package a concluded trial for output.

    Args:
        case: The case that was tried, if one was set.
        history: Completed rounds in order.
        state: Final trial state snapshot.
        verdict: The resolved verdict.
        trial_start_time: monotonic time when the trial started (for duration).
    """
    return TrialResult(
        case=case,
        rounds=list(history),
        state=state,
        verdict=verdict,
        total_duration_sec=time.monotonic() - trial_start_time,
    )
