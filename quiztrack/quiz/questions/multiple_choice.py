"""
Multiple choice questions.

- Presents a prompt with 2 to 6 options.
- Exactly one option is correct.
- Options can be reshuffled into a fresh, unanswered copy.
"""

from __future__ import annotations

import random
from typing import Any, Sequence

from quiztrack.errors import InvalidConfiguration

from . import QuestionKind, register
from .base import Question

MIN_OPTIONS = 2
MAX_OPTIONS = 6


@register(QuestionKind.MULTIPLE_CHOICE)
class MultipleChoiceRules:
    """Rules for multiple choice questions."""

    default_options = None

    def validate(self, options: tuple[str, ...], correct_answer: Any) -> None:
        if not MIN_OPTIONS <= len(options) <= MAX_OPTIONS:
            raise InvalidConfiguration(
                f"Multiple choice questions must have between {MIN_OPTIONS} and {MAX_OPTIONS} options"
            )

    def difficulty(self, question: Question) -> str:
        # More distractors, harder guess
        option_count = len(question.options)
        if option_count <= 2:
            return "Easy"
        if option_count <= 3:
            return "Medium"
        return "Hard"

    def describe(self, question: Question) -> dict[str, Any]:
        return {
            "optionCount": len(question.options),
            "questionType": "Multiple Choice",
            "difficulty": self.difficulty(question),
        }


def multiple_choice_question(
    question_id: int,
    text: str,
    options: Sequence[str],
    correct_answer: str,
    category: str | None = None,
) -> Question:
    """Build a validated multiple choice question."""
    return Question(
        question_id,
        text,
        options,
        correct_answer,
        kind=QuestionKind.MULTIPLE_CHOICE,
        category=category,
    )


def shuffled(question: Question, rng: random.Random | None = None) -> Question:
    """Return an unanswered copy of ``question`` with its options shuffled."""
    if question.kind is not QuestionKind.MULTIPLE_CHOICE:
        raise InvalidConfiguration(f"Question {question.id} is not a multiple choice question")
    options = list(question.options)
    (rng or random).shuffle(options)
    return question.copy(options=options)
