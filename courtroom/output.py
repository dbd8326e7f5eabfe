"""Rich console rendering of a live trial and markdown transcript save."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from courtroom.jury import REACTION_FACES, JuryBox
from courtroom.models import (
    AggregatedSentiment,
    AnalysisFailure,
    CaseData,
    ReactionEvent,
    RoundRecord,
    Side,
    StrategyTier,
    TrialResult,
    Verdict,
    VerdictEvent,
)
from courtroom.trial import TrialObserver

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_VERDICT_STYLES = {
    Verdict.FAVOR_HUMAN: "bold green",
    Verdict.FAVOR_OPPONENT: "bold red",
    Verdict.INCONCLUSIVE: "bold yellow",
}


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _format_sentiment(sentiment: AggregatedSentiment | None) -> str:
    if sentiment is None:
        return "analysis failed"
    return (
        f"{sentiment.dominant.value} "
        f"(P:{sentiment.positive:.2f}, N:{sentiment.negative:.2f}, U:{sentiment.neutral:.2f})"
    )


def _format_score(value: float | None) -> str:
    return "—" if value is None else f"{value:+.2f}"


class ConsoleObserver(TrialObserver):
    """Prints the trial as it happens."""

    def __init__(self, jury: JuryBox | None = None, out: Console | None = None) -> None:
        self._jury = jury
        self._console = out or console

    def on_trial_start(self, case: CaseData | None, max_rounds: int) -> None:
        title = case.title if case else "Untitled case"
        self._console.print(Rule(f"[bold cyan]{title}[/bold cyan]"))
        if case:
            self._console.print(Panel(Text(case.context()), title="[bold]Case file[/bold]", border_style="cyan"))
        self._console.print(Text(f"{max_rounds} rounds", style="dim"))

    def on_round_start(self, round_number: int, max_rounds: int) -> None:
        self._console.print(Rule(f"[bold]Round {round_number}/{max_rounds}[/bold]"))
        self._console.print(f"[cyan]Round {round_number}: Present your argument[/cyan]")

    def on_human_argument(self, round_number: int, text: str) -> None:
        self._console.print(Panel(text, title="[bold]Defense[/bold]", border_style="green"))

    def on_opponent_thinking(self, round_number: int, strategy: StrategyTier) -> None:
        self._console.print(Text("Prosecution is thinking...", style="dim italic"))

    def on_opponent_argument(self, round_number: int, text: str, strategy: StrategyTier) -> None:
        self._console.print(Panel(text, title="[bold]Prosecution[/bold]", border_style="red"))

    def on_reaction(self, event: ReactionEvent) -> None:
        label = "Defense" if event.side is Side.HUMAN else "Prosecution"
        line = f"{label} argument: {_format_sentiment(event.sentiment)} → score {event.score:+.2f}"
        self._console.print(Text(line, style="dim"))
        if self._jury is not None:
            self._console.print(self._jury_faces())

    def on_analysis_failed(self, failure: AnalysisFailure) -> None:
        label = "defense" if failure.side is Side.HUMAN else "prosecution"
        self._console.print(
            f"[yellow]Warning:[/yellow] could not score the {label} argument "
            f"in round {failure.round_number}; it counts for nothing."
        )

    def on_verdict(self, event: VerdictEvent) -> None:
        style = _VERDICT_STYLES[event.verdict]
        body = Text.assemble(
            (f"{event.subject}\n\n", "bold"),
            (event.verdict.label, style),
            (f"\n\nDefense {event.human_total:+.2f} | Prosecution {event.opponent_total:+.2f}", "dim"),
        )
        self._console.print(Panel(body, title="[bold]Verdict[/bold]", border_style=style))
        if self._jury is not None:
            self._console.print(self._jury_faces())

    def on_reset(self) -> None:
        self._console.print("[dim]Trial reset.[/dim]")

    def _jury_faces(self) -> str:
        faces = [
            f"{name}: {REACTION_FACES.get(reaction, '·') if reaction else '·'}"
            for name, reaction in self._jury.reactions().items()
        ]
        return "  ".join(faces)


def print_round_table(history: list[RoundRecord]) -> None:
    """Print a per-round score summary."""
    table = Table(title="Scores by round")
    table.add_column("Round", justify="right")
    table.add_column("Defense", justify="right")
    table.add_column("Strategy")
    table.add_column("Prosecution", justify="right")
    for record in history:
        table.add_row(
            str(record.round_number),
            _format_score(record.human_score),
            record.strategy.value,
            _format_score(record.opponent_score),
        )
    console.print(table)


def save_transcript(result: TrialResult, output_dir: Path, slug_override: str | None = None) -> Path:
    """Save the full trial transcript as a markdown file.

    Args:
        result: The concluded TrialResult.
        output_dir: Directory to save the file in.
        slug_override: If provided, use this as the filename stem instead of
            deriving one from the case title.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    title = result.case.title if result.case else "Untitled case"
    subject = result.case.subject if result.case else "Defendant"
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = slug_override if slug_override is not None else _slug(title)
    filepath = output_dir / f"{timestamp}_{slug}.md"

    state = result.state
    lines: list[str] = [
        f"# Trial Transcript: {title}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Defendant:** {subject}",
    ]
    if result.case:
        lines.append(f"**Charge:** {result.case.charge}")
        lines.append(f"**Source:** {result.case.source}")
    lines += [
        f"**Rounds:** {len(result.rounds)}/{state.max_rounds}",
        f"**Duration:** {result.total_duration_sec:.1f}s",
        "",
        "---",
        "",
    ]

    for record in result.rounds:
        lines += [
            f"## Round {record.round_number}",
            "",
            "### Defense",
            "",
            record.human_text,
            "",
            f"*Sentiment: {_format_sentiment(record.human_sentiment)} | "
            f"Score: {_format_score(record.human_score)}*",
            "",
            f"### Prosecution ({record.strategy.value} rebuttal)",
            "",
            record.opponent_text,
            "",
            f"*Sentiment: {_format_sentiment(record.opponent_sentiment)} | "
            f"Score: {_format_score(record.opponent_score)}*",
            "",
        ]

    lines += [
        f"## Verdict: {result.verdict.label}",
        "",
        f"- Defense total: {state.cumulative_human_score:+.3f}",
        f"- Prosecution total: {state.cumulative_opponent_score:+.3f}",
        f"- Difference: {state.cumulative_human_score - state.cumulative_opponent_score:+.3f}",
        "",
    ]

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Transcript saved to: %s", filepath)
    return filepath
