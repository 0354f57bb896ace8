"""
Terminal rendering for quiz questions and results.

Renderers work on read-only question snapshots (``Question.snapshot()``)
and never touch the quiz; the caller reports the parsed answer back
through ``Quiz.set_answer``. Each question kind registers its own
renderer and input parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from rich import box
from rich.console import Group, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from quiztrack.quiz import QuestionKind, QuizResult, QuizStatistics

Snapshot = dict[str, Any]


@dataclass
class KindRenderer:
    """Presentation hooks for one question kind."""
    title: str
    render_options: Callable[[Snapshot], RenderableType]
    parse: Callable[[Snapshot, str], str | None]
    prompt: Callable[[Snapshot], str]


RENDERERS: dict[QuestionKind, KindRenderer] = {}


def renderer(
    kind: QuestionKind,
    title: str,
    parse: Callable[[Snapshot, str], str | None],
    prompt: Callable[[Snapshot], str],
):
    """Decorator to register the options renderer for a question kind."""
    def decorator(render_options: Callable[[Snapshot], RenderableType]):
        RENDERERS[kind] = KindRenderer(title, render_options, parse, prompt)
        return render_options
    return decorator


# =============================================================================
# Multiple choice
# =============================================================================


def _parse_multiple_choice(snapshot: Snapshot, raw: str) -> str | None:
    choice = raw.strip()
    if not choice.isdigit():
        return None
    index = int(choice) - 1
    options = snapshot["options"]
    if 0 <= index < len(options):
        return options[index]
    return None


@renderer(
    QuestionKind.MULTIPLE_CHOICE,
    "MULTIPLE CHOICE",
    parse=_parse_multiple_choice,
    prompt=lambda snapshot: f"Choice [1-{len(snapshot['options'])}]",
)
def _render_multiple_choice(snapshot: Snapshot) -> RenderableType:
    table = Table(box=box.MINIMAL, show_header=False)
    table.add_column("Index", style="cyan", justify="right", width=4)
    table.add_column("Option", style="white")
    for i, option in enumerate(snapshot["options"]):
        marker = " [green]<[/green]" if option == snapshot["selectedAnswer"] else ""
        table.add_row(f"[{i + 1}]", f"{escape(option)}{marker}")
    return table


# =============================================================================
# True/False
# =============================================================================

_TRUE_INPUTS = {"t", "true", "y", "yes"}
_FALSE_INPUTS = {"f", "false", "n", "no"}


def _parse_true_false(snapshot: Snapshot, raw: str) -> str | None:
    response = raw.strip().lower()
    if response in _TRUE_INPUTS:
        return "True"
    if response in _FALSE_INPUTS:
        return "False"
    return None


@renderer(
    QuestionKind.TRUE_FALSE,
    "TRUE OR FALSE",
    parse=_parse_true_false,
    prompt=lambda snapshot: "[T/F]",
)
def _render_true_false(snapshot: Snapshot) -> RenderableType:
    selected = snapshot["selectedAnswer"]
    line = Text()
    for option, mark in (("True", "✓"), ("False", "✗")):
        style = "bold green" if option == selected else "bold"
        line.append(f"  {mark} {option}  ", style=style)
    return line


# =============================================================================
# Public helpers
# =============================================================================


def _renderer_for(snapshot: Snapshot) -> KindRenderer:
    return RENDERERS[QuestionKind(snapshot["type"])]


def render_question(snapshot: Snapshot, position: int, total: int) -> RenderableType:
    kind_renderer = _renderer_for(snapshot)
    body = Group(Text(snapshot["text"], style="bold"), Text(""), kind_renderer.render_options(snapshot))
    return Panel(
        body,
        title=f"[bold cyan]{kind_renderer.title}[/bold cyan]",
        subtitle=f"[dim]{position}/{total}[/dim]",
        border_style="cyan",
        box=box.HEAVY,
        padding=(1, 2),
    )


def parse_choice(snapshot: Snapshot, raw: str) -> str | None:
    """Map raw terminal input to one of the question's options, or None."""
    return _renderer_for(snapshot).parse(snapshot, raw)


def prompt_for(snapshot: Snapshot) -> str:
    return _renderer_for(snapshot).prompt(snapshot)


def render_result(result: QuizResult) -> RenderableType:
    verdict = (
        "[bold green]Congratulations! You Passed![/bold green]"
        if result.passed
        else "[bold red]Sorry, You Failed[/bold red]"
    )

    summary = Table(box=box.SIMPLE, show_header=False)
    summary.add_column("Field", style="dim")
    summary.add_column("Value", style="bold")
    summary.add_row("Score", f"{result.score}/{result.total}")
    summary.add_row("Percentage", f"{result.percentage}%")
    summary.add_row("Passing score", str(result.passing_score))
    summary.add_row("Duration", f"{result.duration}s")
    summary.add_row("Attempt", str(result.attempts))

    parts: list[RenderableType] = [Text.from_markup(verdict), summary]

    if result.questions is not None:
        breakdown = Table(box=box.MINIMAL, title="Answers")
        breakdown.add_column("#", justify="right", style="cyan")
        breakdown.add_column("Question")
        breakdown.add_column("Your answer")
        breakdown.add_column("Correct answer")
        for line in result.questions:
            style = "green" if line.is_correct else "red"
            breakdown.add_row(
                str(line.id),
                escape(line.text),
                f"[{style}]{escape(str(line.selected_answer))}[/{style}]",
                escape(line.correct_answer),
            )
        parts.append(breakdown)

    return Panel(
        Group(*parts),
        title="[bold]RESULT[/bold]",
        border_style="green" if result.passed else "red",
        box=box.HEAVY,
    )


def render_statistics(stats: QuizStatistics) -> RenderableType:
    table = Table(box=box.SIMPLE, title="Progress")
    table.add_column("Type")
    table.add_column("Total", justify="right")
    table.add_column("Answered", justify="right")
    table.add_column("Correct", justify="right")
    for kind, counts in stats.question_types.items():
        table.add_row(kind, str(counts.total), str(counts.answered), str(counts.correct))
    table.caption = f"{stats.answered_questions}/{stats.total_questions} answered ({stats.progress}%)"
    return table
