"""
Base types for quiz questions.

``Question`` is the single value type shared by every variant. The kind
tag selects a ``QuestionRules`` implementation from the registry, which
adds the variant's own construction checks and statistics.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from quiztrack.errors import InvalidAnswer, InvalidConfiguration

from . import QuestionKind, get_rules


class QuestionRules(Protocol):
    """Protocol for per-kind question rules."""

    # Options implied by the kind, or None when the caller supplies them
    default_options: tuple[str, ...] | None

    def validate(self, options: tuple[str, ...], correct_answer: Any) -> None:
        """Raise InvalidConfiguration if options/answer break the kind's rules."""
        ...

    def difficulty(self, question: Question) -> str:
        """Rough difficulty label for the question."""
        ...

    def describe(self, question: Question) -> dict[str, Any]:
        """Kind-specific statistics, merged into the question snapshot."""
        ...


def _coerce_kind(kind: str | QuestionKind) -> QuestionKind:
    try:
        return QuestionKind(kind.lower() if isinstance(kind, str) else kind)
    except ValueError as exc:
        raise InvalidConfiguration(f"Unknown question type: {kind}") from exc


def _coerce_options(options: Any) -> tuple[str, ...]:
    if isinstance(options, (str, bytes)) or not isinstance(options, (list, tuple)):
        raise InvalidConfiguration("Options must be provided as a list of strings")
    if not all(isinstance(option, str) and option for option in options):
        raise InvalidConfiguration("Every option must be a non-empty string")
    return tuple(options)


def _validate_common(
    question_id: Any, text: Any, options: tuple[str, ...], correct_answer: Any
) -> None:
    if isinstance(question_id, bool) or not isinstance(question_id, int) or question_id <= 0:
        raise InvalidConfiguration(f"Question id must be a positive integer, got {question_id!r}")
    if not isinstance(text, str) or not text.strip():
        raise InvalidConfiguration(f"Question {question_id} has no text")
    if not isinstance(correct_answer, str) or not correct_answer:
        raise InvalidConfiguration(f"Question {question_id} has no correct answer")
    if len(options) < 2:
        raise InvalidConfiguration(f"Question {question_id} needs at least two options")
    if len(set(options)) != len(options):
        raise InvalidConfiguration(f"Question {question_id} has duplicate options")
    if correct_answer not in options:
        raise InvalidConfiguration("Correct answer must be one of the provided options")


class Question:
    """A single prompt with a fixed answer set and one correct answer."""

    __slots__ = (
        "_id",
        "_text",
        "_options",
        "_correct_answer",
        "_kind",
        "_category",
        "_selected_answer",
    )

    def __init__(
        self,
        question_id: int,
        text: str,
        options: Sequence[str],
        correct_answer: str,
        kind: str | QuestionKind = QuestionKind.MULTIPLE_CHOICE,
        category: str | None = None,
    ):
        kind = _coerce_kind(kind)
        options = _coerce_options(options)
        get_rules(kind).validate(options, correct_answer)
        _validate_common(question_id, text, options, correct_answer)

        self._id = question_id
        self._text = text
        self._options = options
        self._correct_answer = correct_answer
        self._kind = kind
        self._category = category
        self._selected_answer: str | None = None

    @property
    def id(self) -> int:
        return self._id

    @property
    def text(self) -> str:
        return self._text

    @property
    def options(self) -> tuple[str, ...]:
        return self._options

    @property
    def correct_answer(self) -> str:
        return self._correct_answer

    @property
    def kind(self) -> QuestionKind:
        return self._kind

    @property
    def type(self) -> str:
        """Wire name of the kind (``multiple-choice`` / ``true-false``)."""
        return self._kind.value

    @property
    def category(self) -> str | None:
        return self._category

    @property
    def selected_answer(self) -> str | None:
        return self._selected_answer

    @property
    def is_answered(self) -> bool:
        return self._selected_answer is not None

    def set_answer(self, value: str) -> None:
        """Select an answer. Re-answering replaces the previous selection."""
        if value not in self._options:
            raise InvalidAnswer(self._id, value)
        self._selected_answer = value

    def reset_answer(self) -> None:
        self._selected_answer = None

    def is_correct(self) -> bool:
        """True iff the selected answer matches; unanswered counts as incorrect."""
        return self._selected_answer is not None and self._selected_answer == self._correct_answer

    def difficulty(self) -> str:
        return get_rules(self._kind).difficulty(self)

    def snapshot(self) -> dict[str, Any]:
        """Read-only view for renderers. Does not include the correct answer."""
        return {
            "id": self._id,
            "text": self._text,
            "options": list(self._options),
            "type": self.type,
            "selectedAnswer": self._selected_answer,
            "isAnswered": self.is_answered,
        }

    def describe(self) -> dict[str, Any]:
        """Snapshot plus the kind's statistics (type label, difficulty, extras)."""
        return {**self.snapshot(), **get_rules(self._kind).describe(self)}

    def to_dict(self) -> dict[str, Any]:
        """Full-fidelity representation, including the correct answer."""
        data = {
            "id": self._id,
            "text": self._text,
            "options": list(self._options),
            "correctAnswer": self._correct_answer,
            "type": self.type,
            "selectedAnswer": self._selected_answer,
        }
        if self._category is not None:
            data["category"] = self._category
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        """Rebuild a question from ``to_dict`` output, restoring its selection."""
        kind = _coerce_kind(data.get("type", QuestionKind.MULTIPLE_CHOICE))
        options = data.get("options") or get_rules(kind).default_options
        try:
            question = cls(
                data["id"],
                data["text"],
                options,
                data["correctAnswer"],
                kind=kind,
                category=data.get("category"),
            )
        except KeyError as exc:
            raise InvalidConfiguration(f"Question data is missing field {exc.args[0]!r}") from exc

        selected = data.get("selectedAnswer")
        if selected:
            question.set_answer(selected)
        return question

    def copy(self, **changes: Any) -> Question:
        """Unanswered copy with some constructor fields replaced."""
        fields = {
            "question_id": self._id,
            "text": self._text,
            "options": self._options,
            "correct_answer": self._correct_answer,
            "kind": self._kind,
            "category": self._category,
        }
        fields.update(changes)
        return type(self)(**fields)

    def __repr__(self) -> str:
        return (
            f"Question(id={self._id}, kind={self.type}, options={len(self._options)}, "
            f"selected={self._selected_answer!r})"
        )
