"""
Result and statistics projections over a Quiz.

Everything here reads quiz state and never mutates it. Numbers that
users see follow two rules:
- percentages round half up (74.5 -> 75)
- the passing score is a ceiling (10 questions at 0.7 need 7)

Both are computed with exact fractions so float thresholds such as 0.7
behave like the decimal the user wrote.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from fractions import Fraction
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .quiz import Quiz


# =============================================================================
# Numeric helpers
# =============================================================================


def round_half_up(value: Fraction | int | float) -> int:
    return math.floor(Fraction(value) + Fraction(1, 2))


def _as_fraction(threshold: float | Fraction) -> Fraction:
    # str() keeps 0.7 as 7/10 instead of its binary expansion
    if isinstance(threshold, Fraction):
        return threshold
    return Fraction(str(threshold))


def percentage(part: int, total: int) -> int:
    """100 * part / total rounded half up; 0 for an empty total."""
    if total == 0:
        return 0
    return round_half_up(Fraction(100 * part, total))


def passing_score(total: int, threshold: float | Fraction) -> int:
    """Minimum number of correct answers needed to pass."""
    return math.ceil(total * _as_fraction(threshold))


def meets_threshold(score: int, total: int, threshold: float | Fraction) -> bool:
    """score / total >= threshold. An empty quiz never passes."""
    if total == 0:
        return False
    return Fraction(score, total) >= _as_fraction(threshold)


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class QuestionResult:
    """Per-question line of a submitted quiz."""
    id: int
    text: str
    selected_answer: str | None
    correct_answer: str
    is_correct: bool
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "selectedAnswer": self.selected_answer,
            "correctAnswer": self.correct_answer,
            "isCorrect": self.is_correct,
            "type": self.type,
        }


@dataclass(frozen=True)
class QuizResult:
    """Immutable scoring summary produced by a successful submission."""
    score: int
    total: int
    percentage: int
    passed: bool
    passing_score: int
    duration: int  # seconds
    attempts: int
    completed_at: str  # ISO format
    questions: tuple[QuestionResult, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "total": self.total,
            "percentage": self.percentage,
            "passed": self.passed,
            "passingScore": self.passing_score,
            "duration": self.duration,
            "attempts": self.attempts,
            "completedAt": self.completed_at,
            "questions": (
                [question.to_dict() for question in self.questions]
                if self.questions is not None
                else None
            ),
        }


def build_result(quiz: Quiz) -> QuizResult:
    """Result snapshot for a completed quiz."""
    total = quiz.total_questions
    completed_at = quiz.end_time or quiz.clock()

    breakdown = None
    if quiz.config.show_correct_answers:
        breakdown = tuple(
            QuestionResult(
                id=question.id,
                text=question.text,
                selected_answer=question.selected_answer,
                correct_answer=question.correct_answer,
                is_correct=question.is_correct(),
                type=question.type,
            )
            for question in quiz.questions
        )

    return QuizResult(
        score=quiz.score,
        total=total,
        percentage=percentage(quiz.score, total),
        passed=meets_threshold(quiz.score, total, quiz.pass_threshold),
        passing_score=passing_score(total, quiz.pass_threshold),
        duration=quiz.duration,
        attempts=quiz.attempts,
        completed_at=completed_at.isoformat(),
        questions=breakdown,
    )


# =============================================================================
# Statistics
# =============================================================================


@dataclass
class TypeStats:
    """Counts for one question kind."""
    total: int = 0
    answered: int = 0
    correct: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "answered": self.answered, "correct": self.correct}


@dataclass(frozen=True)
class QuizStatistics:
    """Read-only progress/score projection of a quiz."""
    total_questions: int
    answered_questions: int
    correct_answers: int
    progress: int
    is_completed: bool
    passed: bool | None
    duration: int
    average_time_per_question: float
    attempts: int
    question_types: dict[str, TypeStats] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalQuestions": self.total_questions,
            "answeredQuestions": self.answered_questions,
            "correctAnswers": self.correct_answers,
            "progress": self.progress,
            "isCompleted": self.is_completed,
            "passed": self.passed,
            "duration": self.duration,
            "averageTimePerQuestion": self.average_time_per_question,
            "questionTypes": {kind: stats.to_dict() for kind, stats in self.question_types.items()},
            "attempts": self.attempts,
        }


def type_breakdown(quiz: Quiz) -> dict[str, TypeStats]:
    stats: dict[str, TypeStats] = {}
    for question in quiz.questions:
        entry = stats.setdefault(question.type, TypeStats())
        entry.total += 1
        if question.is_answered:
            entry.answered += 1
            if question.is_correct():
                entry.correct += 1
    return stats


def build_statistics(quiz: Quiz) -> QuizStatistics:
    answered = quiz.answered_count
    duration = quiz.duration
    completed = quiz.completed

    return QuizStatistics(
        total_questions=quiz.total_questions,
        answered_questions=answered,
        correct_answers=quiz.score if completed else 0,
        progress=quiz.get_progress_percentage(),
        is_completed=completed,
        passed=quiz.is_passed() if completed else None,
        duration=duration,
        average_time_per_question=duration / answered if answered else 0.0,
        attempts=quiz.attempts,
        question_types=type_breakdown(quiz),
    )


# =============================================================================
# Export
# =============================================================================


def build_export(quiz: Quiz, exported_at: datetime | None = None) -> dict[str, Any]:
    """
    Full-fidelity dump of a quiz, correct answers included.

    Callers showing this to learners must filter out ``correctAnswer``.
    """
    return {
        "questions": [question.to_dict() for question in quiz.questions],
        "config": quiz.config.to_dict(),
        "statistics": build_statistics(quiz).to_dict(),
        "exportedAt": (exported_at or quiz.clock()).isoformat(),
    }
