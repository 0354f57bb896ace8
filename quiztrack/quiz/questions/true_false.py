"""
True/False questions.

Binary choice. The options are always the literal strings "True" and
"False"; booleans are only accepted through the convenience helpers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from quiztrack.errors import InvalidConfiguration

from . import QuestionKind, register
from .base import Question

TRUE = "True"
FALSE = "False"
OPTIONS = (TRUE, FALSE)

# Words that make a statement hard to judge as strictly true or false
AMBIGUOUS_WORDS = ("sometimes", "usually", "often", "rarely", "might", "could", "may")


@register(QuestionKind.TRUE_FALSE)
class TrueFalseRules:
    """Rules for true/false questions."""

    default_options = OPTIONS

    def validate(self, options: tuple[str, ...], correct_answer: Any) -> None:
        if correct_answer not in OPTIONS:
            raise InvalidConfiguration(
                'Correct answer for True/False question must be "True" or "False"'
            )
        if options != OPTIONS:
            raise InvalidConfiguration('True/False questions must have exactly the options "True" and "False"')

    def difficulty(self, question: Question) -> str:
        return "Easy"

    def describe(self, question: Question) -> dict[str, Any]:
        return {
            "questionType": "True/False",
            "difficulty": self.difficulty(question),
            "correctAnswerBoolean": correct_answer_as_bool(question),
            "selectedAnswerBoolean": selected_answer_as_bool(question),
        }


@dataclass
class StatementReview:
    """Authoring feedback for a true/false statement."""
    is_valid: bool
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


def true_false_question(
    question_id: int,
    text: str,
    correct_answer: str,
    category: str | None = None,
) -> Question:
    """Build a validated true/false question."""
    return Question(
        question_id,
        text,
        OPTIONS,
        correct_answer,
        kind=QuestionKind.TRUE_FALSE,
        category=category,
    )


def from_boolean(question_id: int, statement: str, is_true: bool, category: str | None = None) -> Question:
    """Build a true/false question from a boolean correct answer."""
    return true_false_question(question_id, statement, _to_literal(is_true), category=category)


def _to_literal(value: bool) -> str:
    return TRUE if value else FALSE


def _require_true_false(question: Question) -> None:
    if question.kind is not QuestionKind.TRUE_FALSE:
        raise InvalidConfiguration(f"Question {question.id} is not a true/false question")


def correct_answer_as_bool(question: Question) -> bool:
    _require_true_false(question)
    return question.correct_answer == TRUE


def selected_answer_as_bool(question: Question) -> bool | None:
    """Selected answer as a bool, or None when unanswered."""
    _require_true_false(question)
    if question.selected_answer is None:
        return None
    return question.selected_answer == TRUE


def set_answer_from_bool(question: Question, value: bool) -> None:
    _require_true_false(question)
    question.set_answer(_to_literal(value))


def validate_statement(question: Question) -> StatementReview:
    """Flag wording that makes a true/false statement ambiguous."""
    _require_true_false(question)
    statement = question.text.lower()
    warnings: list[str] = []

    for word in AMBIGUOUS_WORDS:
        if word in statement:
            warnings.append(f'Statement contains ambiguous word: "{word}"')

    if " and " in statement or " or " in statement:
        warnings.append("Statement appears to be compound - consider splitting into multiple questions")

    if "?" in statement:
        warnings.append("True/False statements should be declarative, not questions")

    return StatementReview(
        is_valid=not warnings,
        warnings=warnings,
        suggestions=_suggestions(warnings),
    )


def _suggestions(warnings: list[str]) -> list[str]:
    suggestions = []
    if any("ambiguous" in w for w in warnings):
        suggestions.append('Use absolute terms like "always", "never", "all", "none" for clearer True/False questions')
    if any("compound" in w for w in warnings):
        suggestions.append("Split compound statements into separate True/False questions")
    if any("declarative" in w for w in warnings):
        suggestions.append("Rephrase as a declarative statement rather than a question")
    return suggestions


def opposite(question: Question, id_offset: int = 1000) -> Question:
    """Negated statement with the opposite answer, under a shifted id."""
    _require_true_false(question)
    answer = FALSE if question.correct_answer == TRUE else TRUE
    return true_false_question(
        question.id + id_offset,
        _negate(question.text),
        answer,
        category=question.category,
    )


def _negate(statement: str) -> str:
    lowered = statement.lower()
    if lowered.startswith("the ") or lowered.startswith("a "):
        return f"{statement} is not true"
    return f"It is not true that {lowered}"
