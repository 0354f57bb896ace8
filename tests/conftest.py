"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from loguru import logger

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quiztrack.quiz import (  # noqa: E402
    MemoryBackend,
    QuizStore,
    multiple_choice_question,
    true_false_question,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeClock:
    """Deterministic clock; call it for the current time, advance() to move it."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 15, 9, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# Mixed quiz used throughout the tests: (kind, text, options, correct)
SAMPLE_QUESTIONS = [
    ("mc", "What is the capital of France?", ["London", "Berlin", "Paris", "Madrid"], "Paris"),
    ("tf", "JavaScript is a compiled language.", None, "False"),
    ("mc", "Which method adds an element to the end of an array?", ["push()", "pop()", "shift()", "unshift()"], "push()"),
    ("tf", "CSS stands for Cascading Style Sheets.", None, "True"),
    ("mc", "What does HTML stand for?", ["Hypertext Markup Language", "High Tech Modern Language", "Home Tool Markup Language"], "Hypertext Markup Language"),
    ("tf", "React is a JavaScript library for building user interfaces.", None, "True"),
    ("mc", "Which of the following is NOT a JavaScript data type?", ["String", "Boolean", "Float", "Number"], "Float"),
    ("mc", "Which HTTP status code indicates a successful response?", ["404", "500", "200", "301"], "200"),
    ("tf", "The '===' operator checks for both value and type equality.", None, "True"),
    ("mc", "Which keyword declares a block-scoped variable?", ["var", "let"], "let"),
    ("tf", "JSON stands for JavaScript Object Notation.", None, "True"),
    ("mc", "Which method parses a JSON string?", ["JSON.stringify()", "JSON.parse()", "JSON.convert()", "JSON.object()"], "JSON.parse()"),
]


def build_questions(count: int = len(SAMPLE_QUESTIONS)):
    """Fresh Question instances for the first ``count`` sample entries (ids start at 1)."""
    questions = []
    for index, (kind, text, options, correct) in enumerate(SAMPLE_QUESTIONS[:count], start=1):
        if kind == "tf":
            questions.append(true_false_question(index, text, correct, category="Web"))
        else:
            questions.append(multiple_choice_question(index, text, options, correct, category="Web"))
    return questions


def wrong_answer(question) -> str:
    return next(option for option in question.options if option != question.correct_answer)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def questions():
    return build_questions()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return QuizStore(backend)


@pytest.fixture
def loguru_messages():
    """Capture loguru records emitted during the test as 'LEVEL: message' strings."""
    messages: list[str] = []
    handler_id = logger.add(lambda msg: messages.append(f"{msg.record['level'].name}: {msg.record['message']}"), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def catalog_path(tmp_path):
    """Write the sample quiz as a catalog document and return its path."""
    entries = []
    for index, (kind, text, options, correct) in enumerate(SAMPLE_QUESTIONS[:4], start=1):
        entry = {
            "id": index,
            "type": "true-false" if kind == "tf" else "multiple-choice",
            "text": text,
            "correctAnswer": correct,
            "category": "Web",
        }
        if options is not None:
            entry["options"] = options
        entries.append(entry)
    path = tmp_path / "questions.json"
    path.write_text(json.dumps({"questions": entries}), encoding="utf-8")
    return path


@pytest.fixture
def make_questions():
    return build_questions


@pytest.fixture(name="wrong_answer")
def wrong_answer_fixture():
    return wrong_answer
