"""
Question catalog: validated question specifications and a factory.

A catalog document is JSON of the form::

    {"questions": [
        {"id": 1, "type": "multiple-choice", "text": "...",
         "options": ["a", "b", "c"], "correctAnswer": "b", "category": "Geography"},
        {"id": 2, "type": "true-false", "text": "...", "correctAnswer": "False"}
    ]}

A bare list of entries is accepted too. Every entry is validated with
pydantic and then turned into a ``Question``; any malformed entry fails
fast with ``CatalogError``.
"""

from __future__ import annotations

import json
import random
from collections import Counter
from datetime import datetime
from fractions import Fraction
from pathlib import Path
from typing import Any, Iterable, Iterator

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, model_validator

from quiztrack.errors import CatalogError, InvalidConfiguration

from .questions import Question, QuestionKind, multiple_choice_question, true_false_question
from .results import round_half_up

DEFAULT_CATEGORY = "Custom"


class QuestionSpec(BaseModel):
    """One catalog entry, as supplied by a question source."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: PositiveInt
    type: QuestionKind
    text: str = Field(min_length=1)
    options: list[str] | None = None
    correct_answer: str = Field(alias="correctAnswer", min_length=1)
    category: str = DEFAULT_CATEGORY

    @model_validator(mode="after")
    def _require_options(self) -> QuestionSpec:
        if self.type is QuestionKind.MULTIPLE_CHOICE and not self.options:
            raise ValueError("Multiple choice questions must have options")
        return self

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def _parse_spec(entry: QuestionSpec | dict[str, Any]) -> QuestionSpec:
    if isinstance(entry, QuestionSpec):
        return entry
    try:
        return QuestionSpec.model_validate(entry)
    except ValidationError as e:
        ident = entry.get("id", "?") if isinstance(entry, dict) else "?"
        raise CatalogError(f"Invalid question entry {ident}: {e}") from e


def create_question(entry: QuestionSpec | dict[str, Any]) -> Question:
    """Turn a catalog entry into a validated Question."""
    spec = _parse_spec(entry)
    try:
        if spec.type is QuestionKind.TRUE_FALSE:
            return true_false_question(spec.id, spec.text, spec.correct_answer, category=spec.category)
        return multiple_choice_question(
            spec.id, spec.text, spec.options, spec.correct_answer, category=spec.category
        )
    except InvalidConfiguration as e:
        raise CatalogError(f"Question {spec.id}: {e}") from e


class QuestionCatalog:
    """
    Ordered pool of question specifications.

    Handles:
    - Adding/removing entries (ids are unique within the catalog)
    - Filtering by category or type, random subsets
    - Pool statistics
    - JSON import/export and conversion to Question instances
    """

    def __init__(self, entries: Iterable[QuestionSpec | dict[str, Any]] = ()):
        self._specs: list[QuestionSpec] = []
        for entry in entries:
            self.add_question(entry)

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[QuestionSpec]:
        return iter(list(self._specs))

    @property
    def specs(self) -> list[QuestionSpec]:
        return list(self._specs)

    def get(self, question_id: int) -> QuestionSpec | None:
        return next((s for s in self._specs if s.id == question_id), None)

    def add_question(self, entry: QuestionSpec | dict[str, Any]) -> QuestionSpec:
        spec = _parse_spec(entry)
        if self.get(spec.id) is not None:
            raise CatalogError(f"Question with ID {spec.id} already exists")
        self._specs.append(spec)
        return spec

    def remove_question(self, question_id: int) -> bool:
        for index, spec in enumerate(self._specs):
            if spec.id == question_id:
                del self._specs[index]
                return True
        return False

    def by_category(self, category: str) -> list[QuestionSpec]:
        return [s for s in self._specs if s.category == category]

    def by_type(self, kind: str | QuestionKind) -> list[QuestionSpec]:
        kind = QuestionKind(kind)
        return [s for s in self._specs if s.type is kind]

    def random_questions(self, count: int, rng: random.Random | None = None) -> list[QuestionSpec]:
        """Up to ``count`` distinct entries in random order."""
        count = max(0, min(count, len(self._specs)))
        return (rng or random).sample(self._specs, count)

    def statistics(self) -> dict[str, Any]:
        categories = Counter(s.category for s in self._specs)
        types = Counter(s.type.value for s in self._specs)
        return {
            "total": len(self._specs),
            "categories": dict(categories),
            "types": dict(types),
            "averageOptionsPerMC": self._average_option_count(),
        }

    def _average_option_count(self) -> float:
        mc_specs = self.by_type(QuestionKind.MULTIPLE_CHOICE)
        if not mc_specs:
            return 0
        total_options = sum(len(s.options or ()) for s in mc_specs)
        # One decimal place
        return round_half_up(Fraction(total_options * 10, len(mc_specs))) / 10

    def create_question_instances(self) -> list[Question]:
        return [create_question(spec) for spec in self._specs]

    # ========================================
    # JSON
    # ========================================

    def to_json(self) -> str:
        return json.dumps(
            {
                "questions": [s.to_dict() for s in self._specs],
                "metadata": {
                    "exportedAt": datetime.now().isoformat(),
                    "totalQuestions": len(self._specs),
                    "statistics": self.statistics(),
                },
            },
            indent=2,
        )

    def import_json(self, text: str, append: bool = False) -> int:
        """
        Load entries from a catalog document.

        The whole document is validated before the catalog changes.

        Returns:
            Number of entries imported
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Failed to import questions: {e}") from e

        entries = data.get("questions") if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise CatalogError("Invalid JSON format: missing questions array")

        staged = QuestionCatalog(self._specs if append else ())
        for entry in entries:
            staged.add_question(entry)

        self._specs = staged._specs
        logger.debug(f"Imported {len(entries)} catalog entries (append={append})")
        return len(entries)

    @classmethod
    def from_json(cls, text: str) -> QuestionCatalog:
        catalog = cls()
        catalog.import_json(text)
        return catalog


def load_catalog(path: Path) -> QuestionCatalog:
    """Read a catalog document from disk."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e
    catalog = QuestionCatalog.from_json(text)
    logger.info(f"Loaded {len(catalog)} questions from {path}")
    return catalog
