"""Tests for session signing and the game registry."""

import time
from unittest.mock import patch

import pytest

from api.session import GameRegistry, SessionSigner
from core.game import GamePhase, ManualTicker
from core.persistence import InMemoryHighScoreStore


class TestSessionSigner:
    """Tests for SessionSigner class."""

    def test_sign_and_unsign(self):
        """A signed token gives back the original ID."""
        signer = SessionSigner(secret_key="test-secret")
        token = signer.sign("session-456")
        assert token != "session-456"
        assert signer.unsign(token, max_age=3600) == "session-456"

    def test_invalid_token_returns_none(self):
        """Garbage tokens are rejected."""
        signer = SessionSigner(secret_key="test-secret")
        assert signer.unsign("invalid-token-data", max_age=3600) is None

    def test_wrong_secret_returns_none(self):
        """Tokens from another key are rejected."""
        token = SessionSigner(secret_key="secret-one").sign("session")
        assert SessionSigner(secret_key="secret-two").unsign(token, max_age=3600) is None

    def test_expired_token_returns_none(self):
        """Tokens older than max_age are rejected."""
        signer = SessionSigner(secret_key="test-secret")
        token = signer.sign("session")
        real_time = time.time

        with patch("time.time", lambda: real_time() + 7200):
            assert signer.unsign(token, max_age=3600) is None


@pytest.fixture
def registry():
    """A registry with manual tickers and in-memory scores."""
    return GameRegistry(
        store=InMemoryHighScoreStore(),
        ticker_factory=ManualTicker,
        signer=SessionSigner(secret_key="test-secret"),
    )


class TestGameRegistry:
    """Tests for GameRegistry class."""

    def test_create_and_get(self, registry):
        """A created game is found by its token."""
        token, game = registry.create()
        assert registry.get(token) is game
        assert game.phase == GamePhase.PRE_GAME
        assert len(registry) == 1

    def test_create_with_deck_count(self, registry):
        """Deck count passes through to the game."""
        _, game = registry.create(deck_count=6)
        assert game.deck_count == 6

    def test_create_with_bad_deck_count(self, registry):
        """Invalid deck counts are refused by the game."""
        with pytest.raises(ValueError):
            registry.create(deck_count=0)

    def test_unknown_token(self, registry):
        """Forged or foreign tokens find nothing."""
        assert registry.get("not-a-token") is None
        other = SessionSigner(secret_key="test-secret").sign("missing-id")
        assert registry.get(other) is None

    def test_games_share_high_scores(self, registry):
        """Every session writes to the same table."""
        _, first = registry.create()
        _, second = registry.create()
        assert first.high_scores is second.high_scores is registry.high_scores
        assert first.store is registry.store

    def test_remove_stops_ticker(self, registry):
        """Removing a session stops its clock."""
        token, game = registry.create()
        game.start_new_game()
        assert game.ticker.running
        registry.remove(token)
        assert registry.get(token) is None
        assert not game.ticker.running

    def test_clear_high_scores(self, registry):
        """Clearing empties the shared table and resets the flags."""
        _, game = registry.create()
        registry.high_scores.insert(50)
        game.is_new_high_score = True
        registry.clear_high_scores()
        assert len(registry.high_scores) == 0
        assert not game.is_new_high_score
        assert len(registry.store.load()) == 0

    def test_loads_existing_scores(self):
        """The registry starts from the stored table."""
        store = InMemoryHighScoreStore()
        seeded = GameRegistry(store=store, ticker_factory=ManualTicker)
        seeded.high_scores.insert(300)
        store.save(seeded.high_scores)

        assert GameRegistry(store=store, ticker_factory=ManualTicker).high_scores.scores == [300]

    def test_cleanup_expired(self, registry):
        """Idle sessions are dropped."""
        token, _ = registry.create()
        real_monotonic = time.monotonic
        with patch("api.session.time.monotonic", lambda: real_monotonic() + 7200):
            assert registry.cleanup_expired(ttl=3600) == 1
        assert registry.get(token) is None
        assert len(registry) == 0

    def test_idle_session_evicted_on_create(self, registry):
        """Creating a game drops sessions idle past the TTL."""
        token, stale = registry.create()
        stale.start_new_game()
        real_monotonic = time.monotonic
        with patch("api.session.time.monotonic", lambda: real_monotonic() + 7200):
            _, fresh = registry.create()

        assert len(registry) == 1
        assert not stale.ticker.running
        assert registry.get(token) is None

    def test_idle_session_evicted_on_lookup(self, registry):
        """Looking up any session also sweeps idle ones."""
        old_token, _ = registry.create()
        real_monotonic = time.monotonic
        with patch("api.session.time.monotonic", lambda: real_monotonic() + 7200):
            assert registry.get("not-a-token") is None
            assert len(registry) == 0

    def test_active_session_survives(self, registry):
        """Lookups refresh a session's activity time."""
        token, game = registry.create()
        real_monotonic = time.monotonic
        with patch("api.session.time.monotonic", lambda: real_monotonic() + 3000):
            assert registry.get(token) is game
        with patch("api.session.time.monotonic", lambda: real_monotonic() + 6000):
            assert registry.get(token) is game

    def test_close(self, registry):
        """Closing stops every clock and forgets every session."""
        _, first = registry.create()
        _, second = registry.create()
        first.start_new_game()
        second.start_new_game()
        registry.close()
        assert len(registry) == 0
        assert not first.ticker.running
        assert not second.ticker.running
