"""
quiztrack CLI - take quizzes in the terminal.

Usage:
    quiztrack take questions.json            # Take (or resume) a quiz
    quiztrack take questions.json --restart  # Discard saved progress first
    quiztrack inspect questions.json         # Catalog statistics and statement review
    quiztrack progress                       # Show saved in-progress state
    quiztrack clear                          # Erase saved in-progress state

Progress is saved after every answer, so an interrupted session picks up
where it left off the next time ``take`` runs with the same --key.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from quiztrack.config import get_settings
from quiztrack.errors import InvalidConfiguration, QuizError
from quiztrack.quiz import Quiz, QuizConfig, QuizStore, load_catalog
from quiztrack.quiz.catalog import QuestionCatalog, create_question
from quiztrack.quiz.questions import QuestionKind
from quiztrack.quiz.questions.true_false import validate_statement

from .render import parse_choice, prompt_for, render_question, render_result, render_statistics

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="quiztrack",
    help="Take quizzes in the terminal with save/resume and scoring.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

QUIT_INPUTS = {"q", "quit", "exit"}
MILESTONES = (25, 50, 75)

KeyOption = Annotated[
    str | None, typer.Option("--key", "-k", help="Storage key for saved progress")
]
StoreDirOption = Annotated[
    Path | None, typer.Option("--store-dir", help="Directory holding saved progress")
]


def configure_logging(level: str) -> None:
    """Route loguru output to stderr at ``level``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
) -> None:
    """quiztrack - quiz progress tracking with resumable sessions."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)


def _open_store(store_dir: Path | None) -> QuizStore:
    return QuizStore.in_directory(store_dir or get_settings().storage_dir)


def _load_catalog_or_exit(catalog: Path) -> QuestionCatalog:
    try:
        return load_catalog(catalog)
    except QuizError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


# =============================================================================
# Commands
# =============================================================================


@app.command()
def take(
    catalog: Annotated[Path, typer.Argument(help="Question catalog (JSON)")],
    key: KeyOption = None,
    threshold: Annotated[
        float | None, typer.Option("--threshold", "-t", help="Pass threshold in (0, 1]")
    ] = None,
    shuffle: Annotated[
        bool | None, typer.Option("--shuffle/--no-shuffle", help="Shuffle question order")
    ] = None,
    seed: Annotated[int | None, typer.Option("--seed", help="Shuffle seed")] = None,
    restart: Annotated[
        bool, typer.Option("--restart", help="Discard saved progress and start over")
    ] = False,
    store_dir: StoreDirOption = None,
    export: Annotated[
        Path | None, typer.Option("--export", help="Write a JSON export after submission")
    ] = None,
) -> None:
    """
    Take a quiz, resuming saved progress if there is any.

    Answer with the option number (multiple choice) or T/F; 'q' quits and
    keeps your progress.
    """
    overrides = {
        "pass_threshold": threshold,
        "shuffle_questions": shuffle,
        "shuffle_seed": seed,
        "storage_key": key,
    }
    try:
        config = QuizConfig.from_settings().replace(
            **{name: value for name, value in overrides.items() if value is not None}
        )
        questions = _load_catalog_or_exit(catalog).create_question_instances()
    except InvalidConfiguration as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    quiz = Quiz(questions, config=config, store=_open_store(store_dir))

    if restart:
        quiz.reset_all_answers()
    elif quiz.load_progress():
        console.print(
            f"[cyan]Resumed saved progress: {quiz.answered_count}/{quiz.total_questions} answered[/cyan]"
        )

    console.print(
        Panel(
            f"[bold cyan]QUIZ[/]\n"
            f"Questions: {quiz.total_questions}\n"
            f"Pass mark: {round(config.pass_threshold * 100)}%",
            border_style="cyan",
        )
    )

    while True:
        if not _ask_questions(quiz):
            console.print("[yellow]Progress saved. Run the same command to resume.[/yellow]")
            return

        result = quiz.submit_quiz()
        console.print(render_result(result))

        if export is not None:
            export.write_text(quiz.export_data(), encoding="utf-8")
            console.print(f"[dim]Exported to {export}[/dim]")

        if not quiz.can_retake() or not Confirm.ask("Retake the quiz?", default=False, console=console):
            return
        quiz.reset_all_answers()


def _ask_questions(quiz: Quiz) -> bool:
    """Prompt for every unanswered question. Returns False if the user quit."""
    total = quiz.total_questions
    for position, question in enumerate(quiz.questions, start=1):
        if question.is_answered:
            continue

        snapshot = question.snapshot()
        console.print(render_question(snapshot, position, total))

        while True:
            raw = Prompt.ask(prompt_for(snapshot), console=console)
            if raw.strip().lower() in QUIT_INPUTS:
                return False
            choice = parse_choice(snapshot, raw)
            if choice is not None and quiz.set_answer(snapshot["id"], choice):
                break
            console.print("[yellow]Please pick one of the listed options ('q' to quit)[/yellow]")

        percent = quiz.get_progress_percentage()
        if percent in MILESTONES:
            console.print(f"[green]{percent}% Complete! Keep going![/green]")

        remaining = quiz.get_remaining_time()
        if remaining is not None:
            console.print(f"[dim]Time remaining: {int(remaining // 60)}m {int(remaining % 60)}s[/dim]")

    return True


@app.command()
def inspect(
    catalog: Annotated[Path, typer.Argument(help="Question catalog (JSON)")],
) -> None:
    """Show catalog statistics and review true/false statements."""
    pool = _load_catalog_or_exit(catalog)
    stats = pool.statistics()

    table = Table(title="Catalog", show_header=False)
    table.add_column("Field", style="dim")
    table.add_column("Value", style="bold")
    table.add_row("Questions", str(stats["total"]))
    for kind, count in stats["types"].items():
        table.add_row(f"  {kind}", str(count))
    for category, count in stats["categories"].items():
        table.add_row(escape(f"  [{category}]"), str(count))
    table.add_row("Avg. options (MC)", str(stats["averageOptionsPerMC"]))
    console.print(table)

    flagged = 0
    for spec in pool.by_type(QuestionKind.TRUE_FALSE):
        try:
            review = validate_statement(create_question(spec))
        except QuizError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(code=1) from e
        if review.is_valid:
            continue
        flagged += 1
        console.print(f"[yellow]Question {spec.id}:[/yellow] {escape(spec.text)}")
        for warning in review.warnings:
            console.print(f"  [dim]- {warning}[/dim]")
        for suggestion in review.suggestions:
            console.print(f"  [cyan]> {suggestion}[/cyan]")

    if not flagged:
        console.print("[green]All true/false statements look clear.[/green]")


@app.command()
def progress(
    key: KeyOption = None,
    store_dir: StoreDirOption = None,
    catalog: Annotated[
        Path | None, typer.Option("--catalog", "-c", help="Catalog to show per-type progress for")
    ] = None,
) -> None:
    """Show saved in-progress state."""
    key = key or get_settings().storage_key
    store = _open_store(store_dir)

    if catalog is not None:
        questions = _load_catalog_or_exit(catalog).create_question_instances()
        quiz = Quiz(questions, config=QuizConfig.from_settings().replace(storage_key=key), store=store)
        if not quiz.load_progress():
            console.print(f"[dim]No saved progress for '{key}'[/dim]")
            return
        console.print(render_statistics(quiz.get_statistics()))
        return

    state = store.load(key)
    if state is None:
        console.print(f"[dim]No saved progress for '{key}'[/dim]")
        return

    started = state.start_time.isoformat(timespec="seconds") if state.start_time else "-"
    console.print(
        f"[cyan]{escape(key)}[/cyan]: {state.answered_count}/{len(state.answers)} answered, "
        f"started {started}, {state.attempts} previous attempt(s)"
    )


@app.command()
def clear(
    key: KeyOption = None,
    store_dir: StoreDirOption = None,
) -> None:
    """Erase saved in-progress state."""
    key = key or get_settings().storage_key
    _open_store(store_dir).clear(key)
    console.print(f"[green]Cleared saved progress for '{key}'[/green]")


def run() -> None:
    """Entry point for the ``quiztrack`` console script."""
    app()


if __name__ == "__main__":
    run()
