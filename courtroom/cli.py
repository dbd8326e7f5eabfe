"""Click CLI — loads config and case, builds providers, runs one interactive trial."""

import asyncio
import logging
import random
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

import click
import yaml
from dotenv import load_dotenv
from rich.logging import RichHandler
from rich.table import Table

from config.config_loader import AppConfig, load_config
from courtroom.cases import load_cases, parse_case
from courtroom.errors import TrialConfigurationError
from courtroom.healthcheck import run_health_checks
from courtroom.jury import JuryBox
from courtroom.models import CaseData, TrialPhase, TrialResult
from courtroom.output import ConsoleObserver, console, print_round_table, save_transcript
from courtroom.providers.anthropic import AnthropicProvider
from courtroom.providers.base import ProviderError, SentimentProvider, TranscriptionProvider
from courtroom.providers.gemini import GeminiProvider
from courtroom.providers.huggingface import HuggingFaceProvider
from courtroom.providers.openai_provider import OpenAIProvider
from courtroom.strategy import RebuttalPool
from courtroom.trial import TrialOrchestrator

logger = logging.getLogger(__name__)

SENTIMENT_CLASSES: dict[str, type[SentimentProvider]] = {
    "httpx": HuggingFaceProvider,
    "anthropic": AnthropicProvider,
}

TRANSCRIPTION_CLASSES: dict[str, type[TranscriptionProvider]] = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}

ArgumentReader = Callable[[int], Awaitable[str]]


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _build_providers(config: AppConfig, kind: str) -> dict:
    """Build every available provider of one kind. Returns dict keyed by name."""
    classes = SENTIMENT_CLASSES if kind == "sentiment" else TRANSCRIPTION_CLASSES
    providers: dict = {}
    for name in config.providers_of_kind(kind):
        if name not in config.available_providers:
            continue
        provider_cfg = config.providers[name]
        if provider_cfg.sdk not in classes:
            logger.warning("Provider '%s' uses unknown sdk '%s', skipping", name, provider_cfg.sdk)
            continue
        try:
            providers[name] = classes[provider_cfg.sdk](provider_cfg)
        except Exception as exc:
            logger.warning("Failed to instantiate provider '%s': %s", name, exc)
    return providers


def _pick_provider(providers: dict, requested: str, kind: str):
    """Return the requested provider, or fall back to any available one."""
    if requested in providers:
        return providers[requested]
    if providers:
        fallback = sorted(providers)[0]
        logger.warning("%s provider '%s' unavailable, using '%s'", kind.title(), requested, fallback)
        return providers[fallback]
    return None


def _choose_case(cases: list[CaseData]) -> CaseData:
    """Let the user pick a case when more than one is on file."""
    if len(cases) == 1:
        return cases[0]
    for i, case in enumerate(cases, start=1):
        console.print(f"  [bold]{i}[/bold]. {case.title} [dim]({case.charge})[/dim]")
    index = click.prompt("Choose a case", type=click.IntRange(1, len(cases)), default=1)
    return cases[index - 1]


def _print_cases(cases: list[CaseData]) -> None:
    table = Table(title="Available cases")
    table.add_column("Title")
    table.add_column("Charge")
    table.add_column("Defendant")
    table.add_column("File", style="dim")
    for case in cases:
        table.add_row(case.title, case.charge, case.subject, case.source)
    console.print(table)


def _transcript_slug(case: CaseData) -> str | None:
    """Name transcripts after the case file they were tried from."""
    if case.source == "builtin":
        return None
    return Path(case.source).stem


def _check_sentiment_provider(provider: SentimentProvider) -> None:
    """Ping the classifier; exit if it is down and the user won't continue."""
    console.print("\n[bold]Checking sentiment provider...[/bold]")
    results = asyncio.run(run_health_checks({provider.name(): provider}))
    ok, err = results[provider.name()]
    if ok:
        console.print(f"  [green]OK  [/green] {provider.name()}\n")
        return
    short_err = err.splitlines()[0][:120] if err else "unknown error"
    console.print(f"  [red]FAIL[/red] {provider.name()}: {short_err}")
    console.print("[yellow]Unscored arguments count for nothing toward the verdict.[/yellow]")
    if not click.confirm("Start the trial anyway?", default=False):
        sys.exit(1)


def _make_reader(transcriber: TranscriptionProvider | None) -> ArgumentReader:
    """Build the coroutine that collects one defense argument per round."""

    async def read_typed(round_number: int) -> str:
        while True:
            text = await asyncio.to_thread(click.prompt, "Your argument")
            if text.strip():
                return text.strip()

    async def read_recorded(round_number: int) -> str:
        while True:
            path = await asyncio.to_thread(
                click.prompt,
                "Path to WAV recording",
                type=click.Path(exists=True, dir_okay=False, path_type=Path),
            )
            try:
                return await transcriber.transcribe(path.read_bytes(), round_number)
            except ProviderError as exc:
                logger.warning("Transcription failed in round %d: %s", round_number, exc)
                console.print("[yellow]Warning:[/yellow] transcription failed, record again.")

    return read_typed if transcriber is None else read_recorded


async def run_trial(orchestrator: TrialOrchestrator, read_argument: ArgumentReader) -> TrialResult | None:
    """Drive a trial to its verdict, asking read_argument for each defense turn.

    Returns the TrialResult, or None if the trial was reset before concluding.
    """
    orchestrator.start_trial()
    while True:
        phase = await orchestrator.wait_for_turn()
        if phase is TrialPhase.CONCLUDED:
            return orchestrator.result
        if phase is TrialPhase.IDLE:
            return None
        text = await read_argument(orchestrator.current_round)
        orchestrator.submit_human_argument(text)


@click.command()
@click.option("--case", "case_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Case file (.md with frontmatter) to try")
@click.option("--cases-dir", default=None, type=click.Path(file_okay=False, path_type=Path),
              help="Directory of case files (default: from config)")
@click.option("--list-cases", is_flag=True, help="List available cases and exit")
@click.option("--rounds", default=None, type=int, help="Number of trial rounds (default: from config)")
@click.option("--sentiment", "sentiment_name", default=None,
              help="Sentiment provider to score arguments (default: from config)")
@click.option("--audio", "use_audio", is_flag=True,
              help="Argue with WAV recordings transcribed by the speech provider instead of typing")
@click.option("--transcriber", "transcriber_name", default=None,
              help="Speech-to-text provider for --audio (default: from config)")
@click.option("--seed", default=None, type=int, help="Seed rebuttal and jury randomness")
@click.option("--settle-delay", default=None, type=float, help="Pause between rounds in seconds")
@click.option("--output", "output_path", default=None, help="Transcript directory (default: from config)")
@click.option("--no-save", is_flag=True, help="Do not write a transcript file")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the sentiment provider check at startup")
def main(
    case_file: Path | None,
    cases_dir: Path | None,
    list_cases: bool,
    rounds: int | None,
    sentiment_name: str | None,
    use_audio: bool,
    transcriber_name: str | None,
    seed: int | None,
    settle_delay: float | None,
    output_path: str | None,
    no_save: bool,
    verbose: bool,
    skip_health_check: bool,
) -> None:
    """Courtroom -- argue a case against a sentiment-scored prosecution.

    \b
    Examples:
      courtroom
      courtroom --case cases/state-v-hawthorne.md --rounds 5
      courtroom --audio --transcriber gemini
      courtroom --list-cases
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    effective_cases_dir = cases_dir if cases_dir else config.trial.cases_dir
    if case_file:
        try:
            cases = [parse_case(case_file)]
        except (ValueError, yaml.YAMLError) as exc:
            console.print(f"[bold red]Case error:[/bold red] {exc}")
            sys.exit(1)
    else:
        cases = load_cases(effective_cases_dir)

    if list_cases:
        _print_cases(cases)
        return

    if not cases:
        console.print(f"[bold red]Error:[/bold red] No case files found in {effective_cases_dir}.")
        sys.exit(1)

    sentiment_providers = _build_providers(config, "sentiment")
    sentiment = _pick_provider(
        sentiment_providers, sentiment_name or config.trial.sentiment_provider, "sentiment"
    )
    if sentiment is None:
        console.print("[bold red]Error:[/bold red] No sentiment provider available. Check API keys in .env.")
        sys.exit(1)

    transcriber = None
    if use_audio:
        transcriber = _pick_provider(
            _build_providers(config, "transcription"),
            transcriber_name or config.trial.transcription_provider,
            "transcription",
        )
        if transcriber is None:
            console.print("[bold red]Error:[/bold red] --audio needs a transcription provider. Check API keys in .env.")
            sys.exit(1)

    if not skip_health_check:
        _check_sentiment_provider(sentiment)

    case = _choose_case(cases)
    rng = random.Random(seed)
    jury = JuryBox.from_config(config.jury, rng=rng)
    orchestrator = TrialOrchestrator(
        sentiment_provider=sentiment,
        rebuttals=RebuttalPool.from_config(config.rebuttals, rng=rng),
        max_rounds=rounds if rounds is not None else config.trial.max_rounds,
        settle_delay_sec=settle_delay if settle_delay is not None else config.trial.settle_delay_sec,
        verdict_margin=config.trial.verdict_margin,
        observers=[jury, ConsoleObserver(jury)],
    )
    orchestrator.set_case(case)

    console.print(f"\n[bold cyan]Courtroom[/bold cyan] — scoring with {sentiment.name()} ({sentiment.model_string()})")
    if transcriber is not None:
        console.print(f"Transcribing with {transcriber.name()} ({transcriber.model_string()})")

    try:
        result = asyncio.run(run_trial(orchestrator, _make_reader(transcriber)))
    except TrialConfigurationError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    if result is None:
        return

    print_round_table(result.rounds)
    if not no_save:
        output_dir = Path(output_path) if output_path else config.trial.output_dir
        saved = save_transcript(result, output_dir, slug_override=_transcript_slug(case))
        console.print(f"\n[dim]Saved to: {saved}[/dim]")


if __name__ == "__main__":
    main()
