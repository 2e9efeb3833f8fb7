"""Column hand evaluation: totals, soft/hard, bust and lock rules."""

import logging
from dataclasses import dataclass, field
from typing import Iterator

from core.cards import Card

logger = logging.getLogger(__name__)

MAX_TOTAL = 21
CHARLIE_CARDS = 5


@dataclass
class Column:
    """One of the five hand-building slots on the board."""

    cards: list[Card] = field(default_factory=list)
    is_locked: bool = False
    is_five_card_charlie: bool = False

    def add_card(self, card: Card) -> bool:
        """
        Add a card to the column and re-evaluate its lock state.

        Returns:
            False if the column is locked and the card was ignored
        """
        if self.is_locked:
            return False
        self.cards.append(card)
        self._update_lock()
        return True

    def _update_lock(self) -> None:
        """Apply the five-card charlie and hard-21 lock rules."""
        total = self.total

        if len(self.cards) >= CHARLIE_CARDS and total <= MAX_TOTAL:
            self.is_five_card_charlie = True
            self.is_locked = True
            return

        if total == MAX_TOTAL and not self.is_soft:
            self.is_locked = True
        elif self.is_locked and total != MAX_TOTAL and not self.is_five_card_charlie:
            # Unreachable while locked columns refuse cards; repairs state only.
            logger.warning("Unlocking inconsistent column with total %d", total)
            self.is_locked = False

    def reset(self) -> None:
        """Remove all cards and clear lock flags."""
        self.cards.clear()
        self.is_locked = False
        self.is_five_card_charlie = False

    @property
    def base_total(self) -> int:
        """Sum of card values with every ace counted as 1."""
        return sum(card.value for card in self.cards)

    @property
    def total(self) -> int:
        """
        Calculate the best column total.

        Aces are upgraded from 1 to 11 one at a time while the upgrade
        does not push the total past 21.
        """
        total = self.base_total
        aces = sum(1 for card in self.cards if card.is_ace)

        while aces > 0 and total + 10 <= MAX_TOTAL:
            total += 10
            aces -= 1

        return total

    @property
    def is_soft(self) -> bool:
        """
        Check if the column is soft (has an ace counted as 11).

        A lone ace is never soft.
        """
        if len(self.cards) < 2:
            return False
        if not any(card.is_ace for card in self.cards):
            return False
        return self.base_total + 10 <= MAX_TOTAL

    @property
    def is_hard(self) -> bool:
        """Check if the column is hard (not soft)."""
        return not self.is_soft

    @property
    def is_busted(self) -> bool:
        """Check if the column has busted (total > 21)."""
        return self.total > MAX_TOTAL

    @property
    def effective_total(self) -> int:
        """Total used for the board sum: charlie counts as 21, otherwise capped at 21."""
        if self.is_five_card_charlie:
            return MAX_TOTAL
        return min(self.total, MAX_TOTAL)

    @property
    def num_cards(self) -> int:
        """Return the number of cards in the column."""
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.total})"
        if self.is_soft:
            value_str = f"(soft {self.total})"
        if self.is_five_card_charlie:
            value_str = "(CHARLIE)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}".strip()

    def __repr__(self) -> str:
        return f"Column({self.cards!r}, total={self.total}, locked={self.is_locked})"
