"""High score persistence: in-memory, JSON file and Redis key-value stores."""

import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime

import redis
from pydantic import BaseModel, Field, ValidationError

from config import HighScoreConfig, RedisConfig, config
from core.highscores import DEFAULT_MAX_ENTRIES, HighScoreEntry, ScoreTable

logger = logging.getLogger(__name__)


class HighScoreEntryModel(BaseModel):
    """Stored form of a high score entry."""

    score: int
    date: datetime


class ScoreTableModel(BaseModel):
    """Stored form of the high score table."""

    entries: list[HighScoreEntryModel] = Field(default_factory=list)
    max_entries: int = DEFAULT_MAX_ENTRIES


def encode_table(table: ScoreTable) -> str:
    """Serialize a score table to JSON."""
    model = ScoreTableModel(
        entries=[HighScoreEntryModel(score=e.score, date=e.date) for e in table.entries],
        max_entries=table.max_entries,
    )
    return model.model_dump_json()


def decode_table(payload: str | bytes, max_entries: int = DEFAULT_MAX_ENTRIES) -> ScoreTable:
    """
    Parse a score table from JSON.

    The stored capacity is ignored; the table is rebuilt with max_entries,
    keeping the best scores.

    Raises:
        ValidationError: If the payload is not a valid table
    """
    model = ScoreTableModel.model_validate_json(payload)
    table = ScoreTable(
        entries=[HighScoreEntry(score=e.score, date=e.date) for e in model.entries],
        max_entries=max_entries,
    )
    table.entries.sort(key=lambda e: e.score, reverse=True)
    del table.entries[table.max_entries:]
    return table


class HighScoreStore(ABC):
    """
    Key-value persistence for the score table.

    load() and save() never raise: a failed load yields an empty table and
    a failed save is logged and dropped.
    """

    # Backend-specific errors treated as "storage unavailable"
    errors: tuple[type[Exception], ...] = ()

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("High score table needs at least 1 entry")
        self.max_entries = max_entries

    @abstractmethod
    def _read(self) -> str | bytes | None:
        """Return the stored payload, or None if nothing was saved."""
        ...

    @abstractmethod
    def _write(self, payload: str) -> None:
        """Store the payload."""
        ...

    def load(self) -> ScoreTable:
        """Load the saved table, or an empty one."""
        try:
            payload = self._read()
            if payload is None:
                return ScoreTable(max_entries=self.max_entries)
            return decode_table(payload, self.max_entries)
        except ValidationError:
            logger.warning("Stored high scores are corrupt, starting fresh")
        except self.errors as exc:
            logger.warning("Could not load high scores: %s", exc)
        return ScoreTable(max_entries=self.max_entries)

    def save(self, table: ScoreTable) -> None:
        """Persist the table, best effort."""
        try:
            self._write(encode_table(table))
        except self.errors as exc:
            logger.warning("Could not save high scores: %s", exc)


class InMemoryHighScoreStore(HighScoreStore):
    """Process-local store for tests and local development."""

    def __init__(self, payload: str | None = None, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        super().__init__(max_entries)
        self.payload = payload

    def _read(self) -> str | None:
        return self.payload

    def _write(self, payload: str) -> None:
        self.payload = payload


class JsonFileHighScoreStore(HighScoreStore):
    """Store the table as a JSON file."""

    errors = (OSError, UnicodeDecodeError)

    def __init__(self, path: str, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        super().__init__(max_entries)
        self.path = path

    def _read(self) -> str | None:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def _write(self, payload: str) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(payload)


class RedisHighScoreStore(HighScoreStore):
    """Store the table under a single Redis key."""

    errors = (redis.RedisError,)

    def __init__(
        self,
        client: redis.Redis,
        key: str = "pick21:high_scores",
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        super().__init__(max_entries)
        self._redis = client
        self._key = key

    def _read(self) -> bytes | None:
        return self._redis.get(self._key)

    def _write(self, payload: str) -> None:
        self._redis.set(self._key, payload)


def create_high_score_store(
    settings: HighScoreConfig | None = None,
    redis_settings: RedisConfig | None = None,
) -> HighScoreStore:
    """
    Build the configured store.

    A Redis backend that cannot be reached falls back to in-memory storage.
    """
    settings = settings or config.high_scores
    redis_settings = redis_settings or config.redis

    if settings.backend == "redis":
        try:
            client = redis.Redis.from_url(redis_settings.url)
            client.ping()
            return RedisHighScoreStore(
                client, key=settings.redis_key, max_entries=settings.max_entries
            )
        except redis.RedisError as exc:
            logger.warning("Redis unavailable (%s), keeping high scores in memory", exc)
            return InMemoryHighScoreStore(max_entries=settings.max_entries)

    if settings.backend == "file":
        return JsonFileHighScoreStore(settings.path, max_entries=settings.max_entries)

    return InMemoryHighScoreStore(max_entries=settings.max_entries)
