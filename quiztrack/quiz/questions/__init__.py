"""
Question variants for quiztrack.

A question is a single tagged value (``Question``) whose ``kind`` selects
the rules that apply to it. Each kind has its own module with:
- validate(): construction-time checks specific to the kind
- difficulty(): rough difficulty label
- describe(): kind-specific statistics merged into the question snapshot
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import QuestionRules


class QuestionKind(str, Enum):
    """Supported question shapes. Values are the catalog/wire names."""
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"


# Rules registry - populated by @register decorator
RULES: dict[QuestionKind, "QuestionRules"] = {}


def register(kind: QuestionKind):
    """Decorator to register the rules for a question kind."""
    def decorator(cls):
        RULES[kind] = cls()
        return cls
    return decorator


def get_rules(kind: str | QuestionKind) -> "QuestionRules | None":
    """Get the rules for a question kind."""
    if isinstance(kind, str) and not isinstance(kind, QuestionKind):
        try:
            kind = QuestionKind(kind.lower())
        except ValueError:
            return None
    return RULES.get(kind)


from .base import Question, QuestionRules  # noqa: E402

# Import variants to trigger registration
from . import multiple_choice  # noqa: E402
from . import true_false  # noqa: E402
from .multiple_choice import multiple_choice_question  # noqa: E402
from .true_false import from_boolean, true_false_question  # noqa: E402

__all__ = [
    "QuestionKind",
    "Question",
    "QuestionRules",
    "RULES",
    "from_boolean",
    "get_rules",
    "multiple_choice_question",
    "true_false_question",
    "register",
]
