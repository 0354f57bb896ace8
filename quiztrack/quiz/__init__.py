"""
Quiz core: questions, the quiz state machine, persistence and results.

This module provides:
- Question / QuestionKind: tagged question variants (multiple choice, true/false)
- Quiz / QuizConfig: answer tracking, scoring and session timing
- QuizStore: save/resume of in-progress answers
- QuizResult / QuizStatistics: read-only projections
- QuestionCatalog: validated question specifications and a factory
"""

from .catalog import QuestionCatalog, QuestionSpec, create_question, load_catalog
from .questions import (
    Question,
    QuestionKind,
    from_boolean,
    multiple_choice_question,
    true_false_question,
)
from .quiz import Quiz, QuizConfig, QuizState
from .results import QuestionResult, QuizResult, QuizStatistics, TypeStats
from .session_store import (
    FileBackend,
    MemoryBackend,
    PersistedState,
    QuizStore,
    SavedAnswer,
)

__all__ = [
    "FileBackend",
    "MemoryBackend",
    "PersistedState",
    "Question",
    "QuestionCatalog",
    "QuestionKind",
    "QuestionResult",
    "QuestionSpec",
    "Quiz",
    "QuizConfig",
    "QuizResult",
    "QuizState",
    "QuizStatistics",
    "QuizStore",
    "SavedAnswer",
    "TypeStats",
    "create_question",
    "from_boolean",
    "load_catalog",
    "multiple_choice_question",
    "true_false_question",
]
