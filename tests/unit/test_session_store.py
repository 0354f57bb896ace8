"""
Unit tests for save/resume.

Tests cover the QuizStore record handling (stale, corrupted, unknown
versions, failing backends) and the Quiz save/load round trip.
"""

import json

import pytest

from quiztrack.quiz import (
    FileBackend,
    MemoryBackend,
    PersistedState,
    Quiz,
    QuizConfig,
    QuizStore,
    SavedAnswer,
)


class BrokenBackend:
    """Backend whose every operation fails."""

    def get(self, key):
        raise OSError("disk unavailable")

    def set(self, key, value):
        raise OSError("disk full")

    def delete(self, key):
        raise OSError("read-only")


def saved_record(**overrides):
    record = {
        "answers": [{"id": 1, "selectedAnswer": "Paris"}, {"id": 2, "selectedAnswer": None}],
        "startTime": "2024-01-15T09:00:00",
        "completed": False,
        "attempts": 0,
        "version": "1.0",
    }
    record.update(overrides)
    return json.dumps(record)


# =============================================================================
# Record model
# =============================================================================


class TestPersistedState:
    """PersistedState wire format."""

    def test_json_uses_camel_case(self):
        state = PersistedState(answers=[SavedAnswer(id=1, selected_answer="Paris")], attempts=2)

        data = json.loads(state.to_json())

        assert data["answers"] == [{"id": 1, "selectedAnswer": "Paris"}]
        assert data["startTime"] is None
        assert data["completed"] is False
        assert data["attempts"] == 2
        assert data["version"] == "1.0"

    def test_legacy_is_completed_field(self):
        state = PersistedState.model_validate({"answers": [], "isCompleted": True, "version": "1.0"})

        assert state.completed is True

    def test_answered_count(self):
        state = PersistedState.model_validate_json(saved_record())

        assert state.answered_count == 1


# =============================================================================
# Store
# =============================================================================


class TestQuizStore:
    """Load/save/clear handling of records."""

    def test_missing_record(self, store):
        assert store.load("quizState") is None

    def test_save_and_load(self, store):
        state = PersistedState(answers=[SavedAnswer(id=3, selected_answer="True")])

        assert store.save("quizState", state) is True
        loaded = store.load("quizState")

        assert loaded.model_dump() == state.model_dump()

    def test_default_backend_is_memory(self):
        assert isinstance(QuizStore().backend, MemoryBackend)

    def test_corrupted_record_is_cleared(self, store, backend, loguru_messages):
        backend.data["quizState"] = "{not json"

        assert store.load("quizState") is None
        assert "quizState" not in backend.data
        assert any("corrupted" in m for m in loguru_messages)

    def test_non_object_record_is_cleared(self, store, backend):
        backend.data["quizState"] = "[1, 2, 3]"

        assert store.load("quizState") is None
        assert "quizState" not in backend.data

    def test_invalid_record_is_cleared(self, store, backend):
        backend.data["quizState"] = saved_record(attempts=-1)

        assert store.load("quizState") is None
        assert "quizState" not in backend.data

    @pytest.mark.parametrize("version", ["2.0", None])
    def test_unknown_version_is_ignored_not_cleared(self, store, backend, version):
        backend.data["quizState"] = saved_record(version=version)

        assert store.load("quizState") is None
        assert "quizState" in backend.data

    @pytest.mark.parametrize("flag", ["completed", "isCompleted"])
    def test_completed_record_is_stale(self, store, backend, flag):
        record = json.loads(saved_record())
        del record["completed"]
        record[flag] = True
        backend.data["quizState"] = json.dumps(record)

        assert store.load("quizState") is None
        assert "quizState" not in backend.data

    def test_failing_backend_is_swallowed(self, loguru_messages):
        store = QuizStore(BrokenBackend())

        assert store.save("quizState", PersistedState()) is False
        assert store.load("quizState") is None
        store.clear("quizState")

        warnings = [m for m in loguru_messages if m.startswith("WARNING")]
        assert len(warnings) == 3


class TestFileBackend:
    """One JSON file per key."""

    def test_round_trip(self, tmp_path):
        store = QuizStore.in_directory(tmp_path / "progress")
        state = PersistedState(answers=[SavedAnswer(id=1, selected_answer="Paris")], attempts=1)

        store.save("quizState", state)

        assert (tmp_path / "progress" / "quizState.json").exists()
        assert store.load("quizState").model_dump() == state.model_dump()

    def test_unsafe_key_is_sanitized(self, tmp_path):
        backend = FileBackend(tmp_path)

        path = backend.path_for("../quiz state")

        assert path.parent == tmp_path
        assert path.name == ".._quiz_state.json"

    def test_delete_missing_is_noop(self, tmp_path):
        backend = FileBackend(tmp_path)

        backend.delete("nothing")
        assert backend.get("nothing") is None


# =============================================================================
# Quiz integration
# =============================================================================


class TestQuizPersistence:
    """Quiz writes through the store and resumes from it."""

    def test_every_answer_is_saved(self, questions, store, backend, clock):
        quiz = Quiz(questions, store=store, clock=clock)

        quiz.answer(1, "Paris")

        record = json.loads(backend.data["quizState"])
        assert record["answers"][0] == {"id": 1, "selectedAnswer": "Paris"}
        assert record["startTime"] == "2024-01-15T09:00:00"
        assert len(record["answers"]) == 12

    def test_resume_in_fresh_quiz(self, make_questions, store, clock):
        quiz = Quiz(make_questions(), store=store, clock=clock)
        quiz.answer(1, "Paris")
        quiz.answer(2, "True")
        clock.advance(120)

        resumed = Quiz(make_questions(), store=store, clock=clock)

        assert resumed.load_progress() is True
        assert resumed.get_question(1).selected_answer == "Paris"
        assert resumed.get_question(2).selected_answer == "True"
        assert resumed.answered_count == 2
        assert resumed.start_time == quiz.start_time
        assert resumed.duration == 120

    def test_nothing_to_resume(self, questions, store):
        assert Quiz(questions, store=store).load_progress() is False

    def test_submit_clears_record(self, make_questions, store, backend, wrong_answer):
        quiz = Quiz(make_questions(2), store=store)
        quiz.answer(1, "Paris")
        quiz.answer(2, wrong_answer(quiz.get_question(2)))
        assert "quizState" in backend.data

        quiz.submit_quiz()

        assert "quizState" not in backend.data
        assert Quiz(make_questions(2), store=store).load_progress() is False

    def test_reset_clears_record(self, questions, store, backend):
        quiz = Quiz(questions, store=store)
        quiz.answer(1, "Paris")

        quiz.reset_all_answers()

        assert "quizState" not in backend.data

    def test_attempts_survive_resume(self, make_questions, store, wrong_answer):
        quiz = Quiz(make_questions(2), store=store)
        quiz.answer(1, "Paris")
        quiz.answer(2, "False")
        quiz.submit_quiz()
        quiz.reset_all_answers()
        quiz.answer(1, "London")

        resumed = Quiz(make_questions(2), store=store)
        resumed.load_progress()

        assert resumed.attempts == 1

    def test_stale_answers_skipped(self, make_questions, backend, store, loguru_messages):
        backend.data["quizState"] = json.dumps({
            "answers": [
                {"id": 1, "selectedAnswer": "Lyon"},
                {"id": 2, "selectedAnswer": "True"},
                {"id": 77, "selectedAnswer": "x"},
            ],
            "startTime": None,
            "completed": False,
            "attempts": 0,
            "version": "1.0",
        })
        quiz = Quiz(make_questions(3), store=store)

        assert quiz.load_progress() is True
        assert quiz.get_question(1).selected_answer is None
        assert quiz.get_question(2).selected_answer == "True"
        assert any("Skipping saved answer" in m for m in loguru_messages)

    def test_save_disabled(self, questions, store, backend):
        quiz = Quiz(questions, QuizConfig(save_progress=False), store=store)

        quiz.answer(1, "Paris")

        assert backend.data == {}
        assert quiz.load_progress() is False

    def test_custom_storage_key(self, questions, store, backend):
        quiz = Quiz(questions, QuizConfig(storage_key="midterm"), store=store)

        quiz.answer(1, "Paris")

        assert list(backend.data) == ["midterm"]

    def test_broken_store_does_not_block_answers(self, questions):
        quiz = Quiz(questions, store=QuizStore(BrokenBackend()))

        assert quiz.set_answer(1, "Paris") is True
        assert quiz.answered_count == 1

    def test_completed_record_does_not_restore(self, make_questions, backend, store):
        backend.data["quizState"] = saved_record(completed=True)
        quiz = Quiz(make_questions(2), store=store)

        assert quiz.load_progress() is False
        assert quiz.answered_count == 0
        assert quiz.start_time is None
        assert "quizState" not in backend.data

    def test_utc_start_time_record(self, make_questions, backend, store, clock):
        backend.data["quizState"] = saved_record(startTime="2024-01-15T09:00:00.000Z")
        clock.advance(86400)
        quiz = Quiz(make_questions(2), store=store, clock=clock)

        assert quiz.load_progress() is True
        quiz.answer(2, "False")
        stats = quiz.get_statistics()
        result = quiz.submit_quiz()

        assert stats.duration > 0
        assert result.duration > 0
        assert result.score == 2
        assert quiz.completed is True
        assert quiz.attempts == 1

    def test_utc_start_time_with_default_clock(self, make_questions, backend, store):
        backend.data["quizState"] = saved_record(startTime="2024-01-15T09:00:00.000Z")
        quiz = Quiz(make_questions(2), store=store)

        quiz.load_progress()

        assert quiz.duration > 0
        assert quiz.is_time_up() is False


class TestUnwritableStore:
    """A store directory that cannot be created."""

    @pytest.fixture
    def blocked_dir(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory", encoding="utf-8")
        return blocker / "progress"

    def test_store_opens(self, blocked_dir, loguru_messages):
        store = QuizStore.in_directory(blocked_dir)

        assert store.load("quizState") is None
        assert store.save("quizState", PersistedState()) is False
        store.clear("quizState")
        assert any("Failed to save" in m for m in loguru_messages)

    def test_quiz_still_accepts_answers(self, make_questions, blocked_dir):
        quiz = Quiz(make_questions(2), store=QuizStore.in_directory(blocked_dir))

        assert quiz.set_answer(1, "Paris") is True
        assert quiz.set_answer(2, "False") is True
        assert quiz.submit_quiz().score == 2
