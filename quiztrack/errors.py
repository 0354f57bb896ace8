"""
Error taxonomy for quiztrack.

Construction problems are fatal and surface to whoever built the bad
object. Everything else is recoverable: the offending mutation is
rejected and prior state is left untouched.
"""

from __future__ import annotations


class QuizError(Exception):
    """Base class for all quiz domain errors."""


class InvalidConfiguration(QuizError, ValueError):
    """A question or quiz was built from malformed input."""


class CatalogError(InvalidConfiguration):
    """A question catalog document or entry could not be turned into questions."""


class InvalidAnswer(QuizError, ValueError):
    """An answer value is not one of the question's options."""

    def __init__(self, question_id: int, value: object):
        super().__init__(f"Answer {value!r} is not an option of question {question_id}")
        self.question_id = question_id
        self.value = value


class QuestionNotFound(QuizError, LookupError):
    """No question with the given id exists in the quiz."""

    def __init__(self, question_id: object):
        super().__init__(f"Question with ID {question_id} not found")
        self.question_id = question_id


class IncompleteQuiz(QuizError):
    """Submission attempted while some questions are unanswered."""


class AlreadySubmitted(QuizError):
    """Submission attempted on a quiz that is already completed."""


class QuizAlreadyCompleted(QuizError):
    """A mutation was attempted after the quiz was submitted."""
