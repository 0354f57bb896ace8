"""
Quiz: the answer-tracking and scoring state machine.

States:
    NOT_STARTED -> IN_PROGRESS -> COMPLETED

NOT_STARTED and IN_PROGRESS differ only in whether the clock has started
(first answer). Both accept answers. COMPLETED is reached by a successful
submit_quiz() and left only through reset_all_answers(), which returns to
NOT_STARTED.

Every answer change on an unsubmitted quiz is written through the
injected QuizStore (if any); submission and reset erase the record.
"""

from __future__ import annotations

import dataclasses
import json
import random
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable

from loguru import logger

from quiztrack.config import Settings, get_settings
from quiztrack.errors import (
    AlreadySubmitted,
    IncompleteQuiz,
    InvalidConfiguration,
    InvalidAnswer,
    QuestionNotFound,
    QuizAlreadyCompleted,
    QuizError,
)

from .questions import Question, QuestionKind
from .questions.true_false import FALSE, TRUE
from .results import (
    QuizResult,
    QuizStatistics,
    build_export,
    build_result,
    build_statistics,
    meets_threshold,
    percentage,
)
from .session_store import PersistedState, QuizStore, SavedAnswer


def _as_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _seconds_between(start: datetime, end: datetime) -> float:
    """Elapsed seconds, tolerating one naive and one offset-aware timestamp."""
    if (start.tzinfo is None) != (end.tzinfo is None):
        start, end = _as_local_naive(start), _as_local_naive(end)
    return (end - start).total_seconds()


class QuizState(str, Enum):
    """Lifecycle state of a quiz."""
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class QuizConfig:
    """Per-quiz options, fixed at construction."""

    pass_threshold: float = 0.7
    max_attempts: int | None = None
    time_limit_minutes: float | None = None
    shuffle_questions: bool = False
    shuffle_seed: int | None = None
    show_correct_answers: bool = True
    save_progress: bool = True
    storage_key: str = "quizState"

    def __post_init__(self) -> None:
        if not 0 < self.pass_threshold <= 1:
            raise InvalidConfiguration(
                f"Pass threshold must be in (0, 1], got {self.pass_threshold}"
            )
        if self.max_attempts is not None and self.max_attempts < 1:
            raise InvalidConfiguration("max_attempts must be at least 1")
        if self.time_limit_minutes is not None and self.time_limit_minutes <= 0:
            raise InvalidConfiguration("time_limit_minutes must be positive")
        if not self.storage_key:
            raise InvalidConfiguration("storage_key must not be empty")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> QuizConfig:
        """Build a config from environment-driven settings."""
        settings = settings or get_settings()
        return cls(
            pass_threshold=settings.pass_threshold,
            max_attempts=settings.max_attempts,
            time_limit_minutes=settings.time_limit_minutes,
            shuffle_questions=settings.shuffle_questions,
            shuffle_seed=settings.shuffle_seed,
            show_correct_answers=settings.show_correct_answers,
            save_progress=settings.save_progress,
            storage_key=settings.storage_key,
        )

    def replace(self, **changes: Any) -> QuizConfig:
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "passThreshold": self.pass_threshold,
            "maxAttempts": self.max_attempts,
            "timeLimit": self.time_limit_minutes,
            "shuffleQuestions": self.shuffle_questions,
            "shuffleSeed": self.shuffle_seed,
            "showCorrectAnswers": self.show_correct_answers,
            "saveProgress": self.save_progress,
            "storageKey": self.storage_key,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuizConfig:
        """Inverse of ``to_dict``; missing keys fall back to defaults."""
        defaults = cls()
        return cls(
            pass_threshold=data.get("passThreshold", defaults.pass_threshold),
            max_attempts=data.get("maxAttempts", defaults.max_attempts),
            time_limit_minutes=data.get("timeLimit", defaults.time_limit_minutes),
            shuffle_questions=data.get("shuffleQuestions", defaults.shuffle_questions),
            shuffle_seed=data.get("shuffleSeed", defaults.shuffle_seed),
            show_correct_answers=data.get("showCorrectAnswers", defaults.show_correct_answers),
            save_progress=data.get("saveProgress", defaults.save_progress),
            storage_key=data.get("storageKey", defaults.storage_key),
        )


class Quiz:
    """
    An ordered collection of questions plus session scoring state.

    Handles:
    - Answer tracking and progress
    - Single submission and scoring against the pass threshold
    - Session timing (start on first answer, end on submission)
    - Transparent save/resume through an injected QuizStore
    """

    def __init__(
        self,
        questions: Iterable[Question] = (),
        config: QuizConfig | None = None,
        store: QuizStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the quiz.

        Args:
            questions: Questions in presentation order
            config: Quiz options (defaults to QuizConfig())
            store: Persistence adapter; None disables save/resume
            clock: Returns the current time (defaults to datetime.now)
        """
        self.config = config or QuizConfig()
        self.clock: Callable[[], datetime] = clock or datetime.now
        self._store = store

        self._questions: list[Question] = []
        self._completed = False
        self._score = 0
        self._start_time: datetime | None = None
        self._end_time: datetime | None = None
        self._attempts = 0

        for index, question in enumerate(questions):
            if not isinstance(question, Question):
                raise TypeError(f"Question at index {index} is not a valid Question instance")
            self._questions.append(question)

        if self.config.shuffle_questions:
            random.Random(self.config.shuffle_seed).shuffle(self._questions)

        logger.debug(f"Quiz created with {len(self._questions)} questions")

    # ========================================
    # State
    # ========================================

    @property
    def questions(self) -> tuple[Question, ...]:
        return tuple(self._questions)

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def score(self) -> int:
        """Correct answers at the last submission; 0 before submission."""
        return self._score

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def pass_threshold(self) -> float:
        return self.config.pass_threshold

    @property
    def start_time(self) -> datetime | None:
        return self._start_time

    @property
    def end_time(self) -> datetime | None:
        return self._end_time

    @property
    def state(self) -> QuizState:
        if self._completed:
            return QuizState.COMPLETED
        if self._start_time is not None:
            return QuizState.IN_PROGRESS
        return QuizState.NOT_STARTED

    @property
    def duration(self) -> int:
        """Whole seconds since the first answer (until submission, else now)."""
        if self._start_time is None:
            return 0
        end_time = self._end_time or self.clock()
        return max(0, int(_seconds_between(self._start_time, end_time)))

    @property
    def answered_count(self) -> int:
        return sum(1 for question in self._questions if question.is_answered)

    @property
    def persistence_enabled(self) -> bool:
        return self._store is not None and self.config.save_progress

    def get_question(self, question_id: int) -> Question | None:
        return next((q for q in self._questions if q.id == question_id), None)

    def get_question_by_index(self, index: int) -> Question | None:
        if 0 <= index < len(self._questions):
            return self._questions[index]
        return None

    def are_all_questions_answered(self) -> bool:
        return all(question.is_answered for question in self._questions)

    def get_progress_percentage(self) -> int:
        return percentage(self.answered_count, len(self._questions))

    # ========================================
    # Answers
    # ========================================

    def answer(self, question_id: int, value: str) -> None:
        """
        Record an answer, raising on any domain error.

        Raises:
            QuizAlreadyCompleted: the quiz was already submitted
            QuestionNotFound: no question has this id
            InvalidAnswer: value is not one of the question's options
        """
        if self._completed:
            raise QuizAlreadyCompleted("Cannot change answers on a submitted quiz")

        question = self.get_question(question_id)
        if question is None:
            raise QuestionNotFound(question_id)

        question.set_answer(value)

        if self._start_time is None:
            self._start_time = self.clock()
            logger.info(f"Quiz started at {self._start_time.isoformat()}")

        self._save_progress()

    def set_answer(self, question_id: int, value: str) -> bool:
        """Record an answer. Returns False (and logs) instead of raising."""
        try:
            self.answer(question_id, value)
        except QuizError as e:
            logger.warning(f"Error setting answer: {e}")
            return False
        return True

    def set_answer_from_bool(self, question_id: int, value: bool) -> bool:
        """Answer a true/false question with a boolean."""
        question = self.get_question(question_id)
        if question is not None and question.kind is not QuestionKind.TRUE_FALSE:
            logger.warning(f"Question {question_id} is not a true/false question")
            return False
        return self.set_answer(question_id, TRUE if value else FALSE)

    def reset_all_answers(self) -> None:
        """Clear every answer, the score and timing, and erase saved progress."""
        for question in self._questions:
            question.reset_answer()
        self._completed = False
        self._score = 0
        self._start_time = None
        self._end_time = None
        self._clear_progress()
        logger.info("Quiz reset")

    # ========================================
    # Scoring
    # ========================================

    def calculate_score(self) -> int:
        """Recount correct answers and store the result as the score."""
        self._score = sum(1 for question in self._questions if question.is_correct())
        return self._score

    def is_passed(self) -> bool:
        return meets_threshold(self._score, len(self._questions), self.config.pass_threshold)

    def submit_quiz(self) -> QuizResult:
        """
        Lock in answers and score the attempt.

        Raises:
            IncompleteQuiz: some questions are unanswered
            AlreadySubmitted: the quiz was already submitted
        """
        if not self.are_all_questions_answered():
            raise IncompleteQuiz("Cannot submit quiz: not all questions have been answered")
        if self._completed:
            raise AlreadySubmitted("Quiz has already been submitted")

        previous_score = self._score
        self.calculate_score()
        self._completed = True
        self._end_time = self.clock()
        self._attempts += 1
        try:
            result = build_result(self)
        except Exception:
            # Leave the quiz unsubmitted
            self._score = previous_score
            self._completed = False
            self._end_time = None
            self._attempts -= 1
            raise
        self._clear_progress()

        logger.info(
            f"Quiz submitted: {result.score}/{result.total} ({result.percentage}%), "
            f"{'passed' if result.passed else 'failed'}, attempt {result.attempts}"
        )
        return result

    def can_retake(self) -> bool:
        return self.config.max_attempts is None or self._attempts < self.config.max_attempts

    # ========================================
    # Timing
    # ========================================

    def _elapsed_seconds(self) -> float:
        return _seconds_between(self._start_time, self.clock())

    def is_time_up(self) -> bool:
        if self.config.time_limit_minutes is None or self._start_time is None:
            return False
        return self._elapsed_seconds() >= self.config.time_limit_minutes * 60

    def get_remaining_time(self) -> float | None:
        """Seconds left under the time limit; None without a limit or before the start."""
        if self.config.time_limit_minutes is None or self._start_time is None:
            return None
        return max(0.0, self.config.time_limit_minutes * 60 - self._elapsed_seconds())

    # ========================================
    # Structure
    # ========================================

    def add_question(self, question: Question) -> None:
        if self._completed:
            raise QuizAlreadyCompleted("Cannot add questions to a completed quiz")
        if not isinstance(question, Question):
            raise TypeError("Invalid question instance")
        self._questions.append(question)

    def remove_question(self, question_id: int) -> bool:
        """Remove the first question with this id. Returns False if there is none."""
        if self._completed:
            raise QuizAlreadyCompleted("Cannot remove questions from a completed quiz")
        for index, question in enumerate(self._questions):
            if question.id == question_id:
                del self._questions[index]
                return True
        return False

    # ========================================
    # Persistence
    # ========================================

    def to_persisted_state(self) -> PersistedState:
        return PersistedState(
            answers=[
                SavedAnswer(id=question.id, selected_answer=question.selected_answer)
                for question in self._questions
            ],
            start_time=self._start_time,
            completed=self._completed,
            attempts=self._attempts,
        )

    def _save_progress(self) -> None:
        if not self.persistence_enabled or self._completed:
            return
        self._store.save(self.config.storage_key, self.to_persisted_state())

    def _clear_progress(self) -> None:
        if self._store is not None:
            self._store.clear(self.config.storage_key)

    def load_progress(self) -> bool:
        """
        Restore answers, start time and attempts from the store.

        Only ids present in both the record and the quiz are restored; a
        saved answer that is no longer a valid option is skipped.

        Returns:
            True if a saved record was applied
        """
        if not self.persistence_enabled or self._completed:
            return False

        state = self._store.load(self.config.storage_key)
        if state is None:
            return False

        restored = 0
        for saved in state.answers:
            question = self.get_question(saved.id)
            if question is None or saved.selected_answer is None:
                continue
            try:
                question.set_answer(saved.selected_answer)
            except InvalidAnswer as e:
                logger.warning(f"Skipping saved answer: {e}")
                continue
            restored += 1

        if state.start_time is not None:
            self._start_time = state.start_time
        self._attempts = state.attempts

        logger.info(f"Restored {restored} saved answer(s) from '{self.config.storage_key}'")
        return True

    # ========================================
    # Projections
    # ========================================

    def get_statistics(self) -> QuizStatistics:
        return build_statistics(self)

    def export_data(self) -> str:
        """JSON export snapshot, correct answers included."""
        return json.dumps(build_export(self), indent=2)

    @classmethod
    def from_exported_data(
        cls,
        json_data: str,
        store: QuizStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> Quiz:
        """Rebuild a quiz (questions, selections and config) from ``export_data`` output."""
        data = json.loads(json_data)
        questions = [Question.from_dict(item) for item in data["questions"]]
        # Exported order is already the presentation order
        config = QuizConfig.from_dict(data.get("config", {})).replace(shuffle_questions=False)
        return cls(questions, config=config, store=store, clock=clock)
