"""Core Pick 21 engine - 100% UI-agnostic."""

from core.cards import Card, Shoe, Rank, Suit, build_shoe, shuffle_cards
from core.column import Column
from core.highscores import HighScoreEntry, ScoreTable
from core.scoring import board_totals, multiplier_for, round_score

__all__ = [
    "Card",
    "Shoe",
    "Rank",
    "Suit",
    "build_shoe",
    "shuffle_cards",
    "Column",
    "HighScoreEntry",
    "ScoreTable",
    "board_totals",
    "multiplier_for",
    "round_score",
]
