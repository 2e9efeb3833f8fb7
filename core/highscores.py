"""Ranked, fixed-capacity high score table."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

DEFAULT_MAX_ENTRIES = 10


@dataclass(frozen=True)
class HighScoreEntry:
    """A single completed game's total score."""

    score: int
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: UUID = field(default_factory=uuid4, compare=False)


@dataclass
class ScoreTable:
    """
    High scores sorted by descending score, truncated to max_entries.

    Ties are broken newest-first: a new entry equal to an existing score
    ranks above it.
    """

    entries: list[HighScoreEntry] = field(default_factory=list)
    max_entries: int = DEFAULT_MAX_ENTRIES

    def insert(self, score: int, date: datetime | None = None) -> bool:
        """
        Insert a score and re-rank the table.

        Args:
            score: Total score for a completed game
            date: When the game finished (defaults to now)

        Returns:
            True if the new entry is now the top score
        """
        entry = HighScoreEntry(score=score, date=date or datetime.now(timezone.utc))
        self.entries.insert(0, entry)
        # sort() is stable with reverse=True, keeping newer entries first on ties
        self.entries.sort(key=lambda e: e.score, reverse=True)
        del self.entries[self.max_entries:]
        return bool(self.entries) and self.entries[0].id == entry.id

    def clear(self) -> None:
        """Remove every entry."""
        self.entries.clear()

    @property
    def best(self) -> HighScoreEntry | None:
        """Return the top entry, if any."""
        return self.entries[0] if self.entries else None

    @property
    def scores(self) -> list[int]:
        """Return the ranked scores."""
        return [e.score for e in self.entries]

    def __len__(self) -> int:
        return len(self.entries)
