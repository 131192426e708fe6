"""
CLI entry point for vocabfsrs.
"""

# Standard library imports
import json
import logging
import random
from datetime import datetime
from pathlib import Path
from typing import Dict, List, NoReturn, Optional

# Third-party imports
import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Local application imports
from vocabfsrs.config import get_settings
from vocabfsrs.exceptions import SchedulerError
from vocabfsrs.models import CardState, Rating, ReviewLog, SchedulerParams
from vocabfsrs.params import load_params_file
from vocabfsrs.review_queue import select_due_cards
from vocabfsrs.scheduler import FSRSScheduler
from vocabfsrs.stats import compute_study_stats


console = Console()

app = typer.Typer(
    name="vocabfsrs",
    help="vocabfsrs: FSRS scheduling for vocabulary cards.",
    add_completion=False,
    rich_markup_mode="markdown",
)

_CARD_MAP_ADAPTER = TypeAdapter(Dict[str, CardState])
_REVIEW_LIST_ADAPTER = TypeAdapter(List[ReviewLog])


@app.callback()
def _configure(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
):
    """Configure logging before any command runs."""
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error: {escape(message)}[/bold red]")
    raise typer.Exit(code=1)


def _parse_rating(value: str) -> Rating:
    """Accepts a rating name (again/hard/good/easy) or its number (1-4)."""
    normalized = value.strip().lower()
    for rating in Rating:
        if normalized in (rating.name.lower(), str(rating.value)):
            return rating
    _fail(
        f"Invalid rating: {value}. Must be 1-4 or one of again, hard, good, easy."
    )


def _parse_now(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        _fail(f"Invalid --now timestamp: {value}. Use ISO 8601.")


def _load_params(params_file: Optional[Path], no_fuzz: bool) -> SchedulerParams:
    try:
        if params_file is not None:
            params = load_params_file(params_file)
        else:
            params = get_settings().scheduler_params()
    except (SchedulerError, ValidationError) as e:
        _fail(str(e))
    if no_fuzz:
        params = params.model_copy(update={"enable_fuzz": False})
    return params


def _build_scheduler(
    params_file: Optional[Path], no_fuzz: bool, seed: Optional[int]
) -> FSRSScheduler:
    rng = random.Random(seed) if seed is not None else None
    return FSRSScheduler(_load_params(params_file, no_fuzz), rng=rng)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        _fail(f"File not found: {path}")
    except IOError as e:
        _fail(f"Could not read {path}: {e}")


def _load_card(card_file: Path) -> CardState:
    content = _read_text(card_file)
    try:
        return CardState.model_validate_json(content)
    except ValidationError as e:
        _fail(f"Invalid card in {card_file}: {e}")


def _dump_card(card: CardState) -> str:
    return card.model_dump_json(by_alias=True, indent=2)


def _emit_card(card: CardState, output: Optional[Path]) -> None:
    payload = _dump_card(card)
    if output is not None:
        output.write_text(payload + "\n", encoding="utf-8")
        console.print(f"Card written to [cyan]{output}[/cyan]")
    else:
        console.print_json(payload)


_params_option = typer.Option(  # noqa: B008
    None,
    "--params",
    help="YAML/JSON parameter document. Falls back to VOCABFSRS_* settings.",
)

_now_option = typer.Option(  # noqa: B008
    None,
    "--now",
    help="Review time as an ISO 8601 timestamp (defaults to now, UTC).",
)

_no_fuzz_option = typer.Option(  # noqa: B008
    False, "--no-fuzz", help="Disable interval fuzzing."
)

_fuzz_seed_option = typer.Option(  # noqa: B008
    None, "--seed", help="Seed for the fuzzing random source."
)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def init(
    output: Optional[Path] = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Write the new card to this file."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for the random source."
    ),
    params_file: Optional[Path] = _params_option,
    now: Optional[str] = _now_option,
):
    """Create the state of a card that has never been reviewed."""
    scheduler = _build_scheduler(params_file, no_fuzz=False, seed=seed)
    _emit_card(scheduler.init_card(_parse_now(now)), output)


@app.command()
def review(
    card_file: Path = typer.Argument(..., help="JSON file holding the card state."),  # noqa: B008
    rating: str = typer.Argument(..., help="again, hard, good, easy or 1-4."),
    write: bool = typer.Option(
        False, "--write", "-w", help="Overwrite CARD_FILE with the new state."
    ),
    no_fuzz: bool = _no_fuzz_option,
    seed: Optional[int] = _fuzz_seed_option,
    params_file: Optional[Path] = _params_option,
    now: Optional[str] = _now_option,
):
    """Apply one rating to a card and show the resulting state."""
    card = _load_card(card_file)
    parsed_rating = _parse_rating(rating)
    scheduler = _build_scheduler(params_file, no_fuzz, seed)
    try:
        new_card = scheduler.schedule(card, parsed_rating, _parse_now(now))
    except SchedulerError as e:
        _fail(str(e))

    console.print(
        f"[bold]{parsed_rating.name}[/bold]: {card.status.value} -> "
        f"[green]{new_card.status.value}[/green], next review in "
        f"{new_card.scheduled_days} day(s)"
    )
    _emit_card(new_card, card_file if write else None)


@app.command()
def preview(
    card_file: Path = typer.Argument(..., help="JSON file holding the card state."),  # noqa: B008
    no_fuzz: bool = _no_fuzz_option,
    seed: Optional[int] = _fuzz_seed_option,
    params_file: Optional[Path] = _params_option,
    now: Optional[str] = _now_option,
):
    """Show the outcome of every possible rating without changing the card."""
    card = _load_card(card_file)
    scheduler = _build_scheduler(params_file, no_fuzz, seed)
    advice = scheduler.get_study_advice(card, _parse_now(now))

    if advice.retrievability_percent is None:
        recall = "not yet reviewed"
    else:
        recall = f"{advice.retrievability_percent}%"
    console.print(f"Difficulty: [bold]{advice.difficulty_label}[/bold]")
    console.print(f"Retrievability: [bold]{recall}[/bold]")

    table = Table(title="Next review by rating")
    table.add_column("Rating", style="cyan")
    table.add_column("Interval (days)", justify="right")
    table.add_column("Due")
    table.add_column("Stability", justify="right")
    for rating, forecast in advice.forecasts.items():
        table.add_row(
            rating.name,
            str(forecast.scheduled_days),
            forecast.due.strftime("%Y-%m-%d %H:%M"),
            f"{forecast.stability:.2f}",
        )
    console.print(table)


@app.command()
def due(
    cards_file: Path = typer.Argument(  # noqa: B008
        ..., help="JSON object mapping card ids to card states."
    ),
    limit: int = typer.Option(20, "--limit", "-n", help="0 for no limit."),
    now: Optional[str] = _now_option,
):
    """List the cards to study next: new cards first, then the most overdue."""
    content = _read_text(cards_file)
    try:
        cards = _CARD_MAP_ADAPTER.validate_json(content)
    except ValidationError as e:
        _fail(f"Invalid cards in {cards_file}: {e}")

    selected = select_due_cards(cards.items(), now=_parse_now(now), limit=limit)
    if not selected:
        console.print("[green]No cards due.[/green]")
        return

    table = Table(title=f"{len(selected)} card(s) due")
    table.add_column("Card", style="cyan")
    table.add_column("Status")
    table.add_column("Due")
    for card_id, card in selected:
        table.add_row(
            card_id,
            card.status.value,
            card.due.strftime("%Y-%m-%d %H:%M") if card.due else "-",
        )
    console.print(table)


@app.command()
def stats(
    reviews_file: Path = typer.Argument(  # noqa: B008
        ..., help="JSON list of review log entries."
    ),
    days: int = typer.Option(30, "--days", "-d", help="Look-back window in days."),
    now: Optional[str] = _now_option,
):
    """Summarize recent reviews: accuracy, time spent and rating distribution."""
    content = _read_text(reviews_file)
    try:
        reviews = _REVIEW_LIST_ADAPTER.validate_json(content)
        study_stats = compute_study_stats(reviews, days=days, now=_parse_now(now))
    except (ValidationError, ValueError) as e:
        _fail(str(e))

    table = Table(title=f"Study stats (last {days} days)")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total reviews", str(study_stats.total_reviews))
    table.add_row("Accuracy", f"{study_stats.accuracy}%")
    table.add_row("Average time (ms)", str(study_stats.average_time_ms))
    for name, count in study_stats.rating_distribution.items():
        table.add_row(f"Rated {name}", str(count))
    console.print(table)


@app.command()
def defaults():
    """Print the default parameter set."""
    console.print_json(json.dumps(SchedulerParams().model_dump(by_alias=True)))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application.

    If an unexpected exception occurs, print a bold red error message to the console and exit the process with status code 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {e}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
