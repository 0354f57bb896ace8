"""
In-progress state persistence for quiz sessions.

Enables save/resume so a learner can interrupt a quiz and continue later.
The quiz talks to a ``QuizStore``; the store writes JSON records into a
key-value backend (in memory, or one JSON file per key on disk).

Storage failures never reach the quiz: they are logged and the record is
treated as missing.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Protocol

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

# Record format version written by this module
PERSISTENCE_VERSION = "1.0"
SUPPORTED_VERSIONS = frozenset({PERSISTENCE_VERSION})


# =============================================================================
# Record
# =============================================================================


class SavedAnswer(BaseModel):
    """One question's selection inside a persisted record."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    selected_answer: str | None = Field(default=None, alias="selectedAnswer")


class PersistedState(BaseModel):
    """Serializable in-progress quiz state."""

    model_config = ConfigDict(populate_by_name=True)

    answers: list[SavedAnswer] = Field(default_factory=list)
    start_time: datetime | None = Field(default=None, alias="startTime")
    # Older records used "isCompleted"
    completed: bool = Field(
        default=False,
        validation_alias=AliasChoices("completed", "isCompleted"),
        serialization_alias="completed",
    )
    attempts: int = Field(default=0, ge=0)
    version: str = PERSISTENCE_VERSION

    def to_json(self) -> str:
        """Convert to the camelCase JSON wire format."""
        return self.model_dump_json(by_alias=True, indent=2)

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self.answers if answer.selected_answer is not None)


# =============================================================================
# Backends
# =============================================================================


class KeyValueBackend(Protocol):
    """Minimal string key-value storage."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryBackend:
    """Dictionary-backed storage, used in tests and for throwaway sessions."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data: dict[str, str] = data if data is not None else {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileBackend:
    """
    Stores each key as a JSON file.

    Files are named {key}.json inside ``directory``; characters outside
    [A-Za-z0-9_.-] in the key are replaced with underscores.
    The directory is created on the first write.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        filepath = self.path_for(key)
        if not filepath.exists():
            return None
        return filepath.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        filepath = self.path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        # Write then rename so a crash never leaves a half-written record
        tmp_path = filepath.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(filepath)

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


# =============================================================================
# Store
# =============================================================================


class QuizStore:
    """
    Persistence adapter used by ``Quiz``.

    - save(): write a record, logging and skipping on failure
    - load(): read a record, or None if missing/unreadable/stale
    - clear(): erase a record, logging on failure
    """

    def __init__(self, backend: KeyValueBackend | None = None):
        self.backend = backend if backend is not None else MemoryBackend()

    @classmethod
    def in_directory(cls, directory: Path) -> QuizStore:
        """Store writing one JSON file per key into ``directory``."""
        return cls(FileBackend(directory))

    def save(self, key: str, state: PersistedState) -> bool:
        """Write ``state`` under ``key``. Returns False if the write was skipped."""
        try:
            self.backend.set(key, state.to_json())
        except Exception as e:
            logger.warning(f"Failed to save quiz state '{key}': {e}")
            return False
        logger.debug(f"Saved quiz state '{key}' ({state.answered_count} answered)")
        return True

    def load(self, key: str) -> PersistedState | None:
        """Load the in-progress record for ``key``, if there is a usable one."""
        try:
            raw = self.backend.get(key)
        except Exception as e:
            logger.warning(f"Failed to read quiz state '{key}': {e}")
            return None
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding corrupted quiz state '{key}': {e}")
            self.clear(key)
            return None
        if not isinstance(data, dict):
            logger.warning(f"Discarding quiz state '{key}': record is not an object")
            self.clear(key)
            return None

        version = data.get("version")
        if version not in SUPPORTED_VERSIONS:
            # Possibly written by a newer release; leave it alone
            logger.warning(f"Ignoring quiz state '{key}' with unrecognized version {version!r}")
            return None

        try:
            state = PersistedState.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Discarding invalid quiz state '{key}': {e.error_count()} error(s)")
            self.clear(key)
            return None

        if state.completed:
            logger.info(f"Discarding stale state '{key}' from a completed quiz")
            self.clear(key)
            return None

        return state

    def clear(self, key: str) -> None:
        """Erase the record for ``key``."""
        try:
            self.backend.delete(key)
        except Exception as e:
            logger.warning(f"Failed to clear quiz state '{key}': {e}")
