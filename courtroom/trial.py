"""Trial orchestration: the round state machine that drives sentiment scoring.

One trial runs at a time per orchestrator. Each accepted defense argument
spawns a round task that walks the phases

  SCORING_HUMAN -> AWAITING_OPPONENT_ARGUMENT -> SCORING_OPPONENT
  -> ROUND_COMPLETE -> (AWAITING_HUMAN_ARGUMENT | CONCLUDED)

Every await inside a round is tagged with the trial epoch and round number;
a result that comes back after a reset or restart no longer matches and is
dropped.
"""

import asyncio
import dataclasses
import logging
import time
from collections.abc import Iterable

from courtroom.errors import TrialConfigurationError
from courtroom.models import (
    AggregatedSentiment,
    AnalysisFailure,
    CaseData,
    ReactionEvent,
    RoundRecord,
    Side,
    StrategyTier,
    TrialPhase,
    TrialResult,
    TrialState,
    Verdict,
    VerdictEvent,
)
from courtroom.providers.base import ProviderError, SentimentProvider
from courtroom.sentiment import aggregate, score
from courtroom.strategy import RebuttalPool, select_strategy
from courtroom.verdict import DEFAULT_VERDICT_MARGIN, build_result, resolve_verdict

logger = logging.getLogger(__name__)

# Phases in which the front-end has something to do
_TURN_PHASES = {
    TrialPhase.IDLE,
    TrialPhase.AWAITING_HUMAN_ARGUMENT,
    TrialPhase.CONCLUDED,
}


class TrialObserver:
    """Receives trial events. Subclasses override only the hooks they need.

    Hooks are called synchronously from the orchestrator and must not block.
    Exceptions raised by a hook are logged and otherwise ignored.
    """

    def on_trial_start(self, case: CaseData | None, max_rounds: int) -> None:
        pass

    def on_round_start(self, round_number: int, max_rounds: int) -> None:
        pass

    def on_human_argument(self, round_number: int, text: str) -> None:
        pass

    def on_opponent_thinking(self, round_number: int, strategy: StrategyTier) -> None:
        pass

    def on_opponent_argument(self, round_number: int, text: str, strategy: StrategyTier) -> None:
        pass

    def on_reaction(self, event: ReactionEvent) -> None:
        pass

    def on_analysis_failed(self, failure: AnalysisFailure) -> None:
        pass

    def on_round_complete(self, record: RoundRecord) -> None:
        pass

    def on_verdict(self, event: VerdictEvent) -> None:
        pass

    def on_reset(self) -> None:
        pass


class TrialOrchestrator:
    """Sequences rounds, scores both sides, and resolves the verdict."""

    def __init__(
        self,
        sentiment_provider: SentimentProvider,
        rebuttals: RebuttalPool,
        max_rounds: int = 3,
        settle_delay_sec: float = 2.0,
        verdict_margin: float = DEFAULT_VERDICT_MARGIN,
        observers: Iterable[TrialObserver] = (),
    ) -> None:
        self._sentiment = sentiment_provider
        self._rebuttals = rebuttals
        self._settle_delay_sec = settle_delay_sec
        self._verdict_margin = verdict_margin
        self._observers: list[TrialObserver] = list(observers)

        self._state = TrialState(max_rounds=max_rounds)
        self._history: list[RoundRecord] = []
        self._case: CaseData | None = None
        self._verdict: Verdict | None = None
        self._result: TrialResult | None = None
        self._started_at = 0.0

        self._epoch = 0
        self._round_task: asyncio.Task | None = None
        self._turn = asyncio.Event()
        self._turn.set()

    # --- queries ---

    @property
    def phase(self) -> TrialPhase:
        return self._state.phase

    @property
    def current_round(self) -> int:
        return self._state.current_round

    @property
    def max_rounds(self) -> int:
        return self._state.max_rounds

    @property
    def state(self) -> TrialState:
        """Snapshot of the trial state; mutating it has no effect."""
        return dataclasses.replace(self._state)

    @property
    def history(self) -> tuple[RoundRecord, ...]:
        return tuple(self._history)

    @property
    def case(self) -> CaseData | None:
        return self._case

    @property
    def verdict(self) -> Verdict | None:
        return self._verdict

    @property
    def result(self) -> TrialResult | None:
        return self._result

    # --- observers ---

    def add_observer(self, observer: TrialObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: TrialObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, hook: str, *args: object) -> None:
        for observer in list(self._observers):
            try:
                getattr(observer, hook)(*args)
            except Exception:
                logger.exception("Observer %s failed in %s", type(observer).__name__, hook)

    # --- lifecycle ---

    def set_case(self, case: CaseData | None) -> None:
        self._case = case
        logger.info("Current case set: %s", case.title if case else None)

    def start_trial(self) -> None:
        """Reset totals and history and open round 1.

        Raises:
            TrialConfigurationError: If max_rounds < 1 or a rebuttal pool is empty.
        """
        if self._state.max_rounds < 1:
            raise TrialConfigurationError(
                f"max_rounds must be at least 1, got {self._state.max_rounds}"
            )
        self._rebuttals.validate()

        self._discard_in_flight()
        self._state = TrialState(max_rounds=self._state.max_rounds)
        self._history.clear()
        self._verdict = None
        self._result = None
        self._started_at = time.monotonic()

        logger.info(
            "Trial started: %s (%d rounds)",
            self._case.title if self._case else "untitled case",
            self._state.max_rounds,
        )
        self._notify("on_trial_start", self._case, self._state.max_rounds)
        self._start_next_round()

    def reset_trial(self) -> None:
        """Abandon the current trial from any phase and return to IDLE."""
        self._discard_in_flight()
        self._state = TrialState(max_rounds=self._state.max_rounds)
        self._history.clear()
        self._verdict = None
        self._result = None
        self._set_phase(TrialPhase.IDLE)
        logger.info("Trial reset")
        self._notify("on_reset")

    def submit_human_argument(self, text: str) -> bool:
        """Hand the defense argument for the current round to the engine.

        Must be called from a running event loop. Returns False, changing
        nothing, when the engine is not waiting for an argument.
        """
        if self._state.phase is not TrialPhase.AWAITING_HUMAN_ARGUMENT:
            logger.debug("Ignoring argument submitted during %s", self._state.phase.value)
            return False

        loop = asyncio.get_running_loop()
        epoch = self._epoch
        round_number = self._state.current_round
        self._set_phase(TrialPhase.SCORING_HUMAN)
        self._notify("on_human_argument", round_number, text)
        if not self._is_current(epoch, round_number):
            return True

        task = loop.create_task(
            self._play_round(epoch, round_number, text),
            name=f"trial-round-{round_number}",
        )
        task.add_done_callback(self._on_round_task_done)
        self._round_task = task
        return True

    async def wait_for_turn(self) -> TrialPhase:
        """Wait until a defense argument is needed, or the trial is over."""
        await self._turn.wait()
        return self._state.phase

    # --- internals ---

    def _set_phase(self, phase: TrialPhase) -> None:
        self._state.phase = phase
        if phase in _TURN_PHASES:
            self._turn.set()
        else:
            self._turn.clear()

    def _discard_in_flight(self) -> None:
        self._epoch += 1
        if self._round_task is not None and not self._round_task.done():
            logger.debug("Cancelling in-flight round %d", self._state.current_round)
            self._round_task.cancel()
        self._round_task = None

    def _is_current(self, epoch: int, round_number: int) -> bool:
        return epoch == self._epoch and round_number == self._state.current_round

    def _on_round_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Round task %s crashed", task.get_name(), exc_info=exc)

    def _start_next_round(self) -> None:
        next_round = self._state.current_round + 1
        if next_round > self._state.max_rounds:
            self._conclude()
            return

        self._state.current_round = next_round
        self._set_phase(TrialPhase.AWAITING_HUMAN_ARGUMENT)
        logger.info("Starting round %d/%d", next_round, self._state.max_rounds)
        self._notify("on_round_start", next_round, self._state.max_rounds)

    async def _analyze(
        self,
        text: str,
        round_number: int,
    ) -> AggregatedSentiment | ProviderError:
        """Classify one argument. Never raises — returns ProviderError on failure."""
        try:
            reading = await self._sentiment.analyze(text, round_number)
        except ProviderError as exc:
            return exc
        except Exception as exc:
            return ProviderError(self._sentiment.name(), f"Unexpected error: {exc}")
        return aggregate(reading)

    def _apply(
        self,
        side: Side,
        round_number: int,
        result: AggregatedSentiment | ProviderError,
    ) -> tuple[AggregatedSentiment | None, float | None]:
        """Add a successful analysis to the side's total; report a failed one."""
        if isinstance(result, ProviderError):
            # Skipped, not zero: the total is left untouched.
            logger.warning(
                "Sentiment analysis failed for %s in round %d: %s",
                side.value, round_number, result,
            )
            self._notify("on_analysis_failed", AnalysisFailure(round_number, side, str(result)))
            return None, None

        value = score(result)
        if side is Side.HUMAN:
            self._state.cumulative_human_score += value
        else:
            self._state.cumulative_opponent_score += value
        logger.info(
            "Round %d %s score: %+.3f (dominant %s)",
            round_number, side.value, value, result.dominant.value,
        )
        self._notify("on_reaction", ReactionEvent(round_number, side, result, value))
        return result, value

    async def _play_round(self, epoch: int, round_number: int, human_text: str) -> None:
        result = await self._analyze(human_text, round_number)
        if not self._is_current(epoch, round_number):
            logger.debug("Dropping stale defense analysis for round %d", round_number)
            return
        human_sentiment, human_score = self._apply(Side.HUMAN, round_number, result)
        if not self._is_current(epoch, round_number):
            return

        strategy = select_strategy(human_sentiment)
        self._set_phase(TrialPhase.AWAITING_OPPONENT_ARGUMENT)
        self._notify("on_opponent_thinking", round_number, strategy)
        if not self._is_current(epoch, round_number):
            return
        opponent_text = self._rebuttals.pick(strategy)
        await asyncio.sleep(0)
        if not self._is_current(epoch, round_number):
            return
        logger.info("Round %d opponent strategy: %s", round_number, strategy.value)

        self._set_phase(TrialPhase.SCORING_OPPONENT)
        self._notify("on_opponent_argument", round_number, opponent_text, strategy)
        if not self._is_current(epoch, round_number):
            return

        result = await self._analyze(opponent_text, round_number)
        if not self._is_current(epoch, round_number):
            logger.debug("Dropping stale prosecution analysis for round %d", round_number)
            return
        opponent_sentiment, opponent_score = self._apply(Side.OPPONENT, round_number, result)
        if not self._is_current(epoch, round_number):
            return

        record = RoundRecord(
            round_number=round_number,
            human_text=human_text,
            human_sentiment=human_sentiment,
            human_score=human_score,
            opponent_text=opponent_text,
            opponent_sentiment=opponent_sentiment,
            opponent_score=opponent_score,
            strategy=strategy,
        )
        self._history.append(record)
        self._set_phase(TrialPhase.ROUND_COMPLETE)
        self._notify("on_round_complete", record)

        await asyncio.sleep(self._settle_delay_sec)
        if not self._is_current(epoch, round_number):
            return
        self._start_next_round()

    def _conclude(self) -> None:
        human_total = self._state.cumulative_human_score
        opponent_total = self._state.cumulative_opponent_score
        logger.info("Trial complete — calculating verdict")

        self._verdict = resolve_verdict(human_total, opponent_total, self._verdict_margin)
        self._set_phase(TrialPhase.CONCLUDED)
        self._result = build_result(
            case=self._case,
            history=self._history,
            state=dataclasses.replace(self._state),
            verdict=self._verdict,
            trial_start_time=self._started_at,
        )

        subject = self._case.subject if self._case else "Defendant"
        self._notify(
            "on_verdict",
            VerdictEvent(self._verdict, subject, human_total, opponent_total),
        )
