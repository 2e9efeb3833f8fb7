"""Signed session tokens and the in-process game registry."""

import logging
import time
from random import Random
from typing import Callable
from uuid import uuid4

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from config import config
from core.game import AsyncioTicker, Pick21Game, Ticker
from core.highscores import ScoreTable
from core.persistence import HighScoreStore, create_high_score_store

logger = logging.getLogger(__name__)


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the signer with a secret key."""
        self._secret_key = secret_key or config.security.secret_key
        self._serializer = URLSafeTimedSerializer(self._secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify and extract session_id from a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The session ID if valid, None otherwise
        """
        max_age = max_age or config.session_ttl
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired):
            return None


class GameRegistry:
    """
    Games keyed by session ID, sharing one high score table.

    The table is loaded from the store once, when the registry is created.
    Sessions idle for longer than the session TTL are evicted whenever a
    game is created or looked up.
    """

    def __init__(
        self,
        store: HighScoreStore | None = None,
        ticker_factory: Callable[[], Ticker] = AsyncioTicker,
        signer: SessionSigner | None = None,
        rng_factory: Callable[[], Random] = Random,
    ) -> None:
        self.store = store or create_high_score_store()
        self.high_scores: ScoreTable = self.store.load()
        self.ticker_factory = ticker_factory
        self.rng_factory = rng_factory
        self.signer = signer or SessionSigner()
        self._games: dict[str, Pick21Game] = {}
        self._last_activity: dict[str, float] = {}

    def create(self, deck_count: int | None = None) -> tuple[str, Pick21Game]:
        """Create a game and return its signed session token."""
        self.cleanup_expired()
        session_id = str(uuid4())
        game = Pick21Game(
            deck_count=deck_count,
            high_scores=self.high_scores,
            store=self.store,
            ticker=self.ticker_factory(),
            rng=self.rng_factory(),
        )
        self._games[session_id] = game
        self._last_activity[session_id] = time.monotonic()
        logger.info("Created game session %s", session_id)
        return self.signer.sign(session_id), game

    def get(self, token: str) -> Pick21Game | None:
        """Look up the game for a signed token."""
        self.cleanup_expired()
        session_id = self.signer.unsign(token)
        if session_id is None:
            return None
        game = self._games.get(session_id)
        if game is not None:
            self._last_activity[session_id] = time.monotonic()
        return game

    def remove(self, token: str) -> None:
        """Stop and forget a session's game."""
        session_id = self.signer.unsign(token)
        if session_id is None:
            return
        game = self._games.pop(session_id, None)
        self._last_activity.pop(session_id, None)
        if game is not None:
            game.ticker.stop()

    def clear_high_scores(self) -> None:
        """Empty the shared table and persist it."""
        self.high_scores.clear()
        self.store.save(self.high_scores)
        for game in self._games.values():
            game.is_new_high_score = False

    def cleanup_expired(self, ttl: int | None = None) -> int:
        """Drop games idle for longer than ttl seconds."""
        ttl = ttl or config.session_ttl
        cutoff = time.monotonic() - ttl
        expired = [sid for sid, seen in self._last_activity.items() if seen < cutoff]
        for sid in expired:
            game = self._games.pop(sid)
            self._last_activity.pop(sid)
            game.ticker.stop()
        if expired:
            logger.info("Evicted %d idle game session(s)", len(expired))
        return len(expired)

    def close(self) -> None:
        """Stop every game clock and forget all sessions."""
        for game in self._games.values():
            game.ticker.stop()
        self._games.clear()
        self._last_activity.clear()

    def __len__(self) -> int:
        return len(self._games)


# Global registry instance
_registry: GameRegistry | None = None


def get_registry() -> GameRegistry:
    """Get or create the game registry."""
    global _registry
    if _registry is None:
        _registry = GameRegistry()
    return _registry


def set_registry(registry: GameRegistry | None) -> None:
    """Replace the global registry (used by tests)."""
    global _registry
    _registry = registry
