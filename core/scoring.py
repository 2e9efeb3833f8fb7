"""Board-total bonus table and round score calculation."""

from typing import Iterable, NamedTuple

from core.column import Column

PERFECT_BOARD = 105

# Board total -> score multiplier. Totals not listed earn nothing.
MULTIPLIERS: dict[int, int] = {
    105: 1000,
    104: 500,
    103: 400,
    102: 300,
    101: 250,
    100: 200,
    99: 150,
    98: 100,
    97: 50,
}


class BoardTotals(NamedTuple):
    """Sum of effective column totals and whether any column busted."""

    total: int
    any_busted: bool


class RoundScore(NamedTuple):
    """Score awarded for a round along with the board total it was based on."""

    score: int
    board_total: int


def board_totals(columns: Iterable[Column]) -> BoardTotals:
    """Sum effective totals; a bust is detected from the raw total, not the capped one."""
    total = 0
    any_busted = False
    for column in columns:
        if column.is_busted:
            any_busted = True
        total += column.effective_total
    return BoardTotals(total, any_busted)


def multiplier_for(board_total: int) -> int | None:
    """Return the bonus multiplier for an exact board total, or None."""
    return MULTIPLIERS.get(board_total)


def round_score(columns: Iterable[Column], timer_value: int) -> RoundScore:
    """
    Calculate the score for a finished round.

    Args:
        columns: The board's columns
        timer_value: Remaining countdown units

    Returns:
        Remaining time times the board multiplier; zero on any bust or
        when the board total carries no bonus.
    """
    totals = board_totals(columns)
    if totals.any_busted:
        return RoundScore(0, totals.total)

    multiplier = multiplier_for(totals.total)
    if multiplier is None:
        return RoundScore(0, totals.total)

    return RoundScore(max(0, timer_value) * multiplier, totals.total)
