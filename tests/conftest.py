"""Pytest fixtures for Pick 21 tests."""

import pytest
from random import Random

from hypothesis import strategies as st

from config import GameConfig
from core.cards import Card, Rank, Suit
from core.column import Column
from core.game import ManualTicker, Pick21Game
from core.highscores import ScoreTable
from core.persistence import InMemoryHighScoreStore


def make_card(label: str) -> Card:
    """Build a card from a rank label; suit is irrelevant to totals."""
    return Card(Rank(label), Suit.SPADES)


def make_column(*labels: str) -> Column:
    """Build a column by adding cards in order."""
    column = Column()
    for label in labels:
        column.add_card(make_card(label))
    return column


def stack_shoe(game: Pick21Game, labels: list[str], filler: str = "2") -> None:
    """
    Make the current card and the next draws come out in the given order.

    The shoe is padded underneath with filler cards.
    """
    assert game.shoe is not None
    cards = [make_card(label) for label in labels]
    game.current_card = cards[0]
    # Shoe draws from the end of its list
    game.shoe._cards = [make_card(filler) for _ in range(30)] + list(reversed(cards[1:]))


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def ticker():
    """A countdown ticker driven by the test."""
    return ManualTicker()


@pytest.fixture
def store():
    """An empty in-memory high score store."""
    return InMemoryHighScoreStore()


@pytest.fixture
def settings():
    """Default game settings with a single deck."""
    return GameConfig(deck_count=1, tick_interval=0.5)


@pytest.fixture
def game(rng, ticker, store, settings):
    """A new game instance in the pre-game phase."""
    return Pick21Game(
        high_scores=ScoreTable(),
        store=store,
        ticker=ticker,
        rng=rng,
        settings=settings,
    )


@pytest.fixture
def started_game(game):
    """A game in round one."""
    game.start_new_game()
    return game


@pytest.fixture
def empty_column():
    """An empty column."""
    return Column()


@pytest.fixture
def soft_21_column():
    """A soft 21 column (A-K)."""
    return make_column("A", "K")


@pytest.fixture
def hard_21_column():
    """A hard 21 column (K-5-6)."""
    return make_column("K", "5", "6")


@pytest.fixture
def bust_column():
    """A busted column (K-Q-5)."""
    return make_column("K", "Q", "5")


# Hypothesis strategies for property-based testing
rank_strategy = st.sampled_from(list(Rank))


@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(rank_strategy)
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)
