"""Pick 21 game engine with round/game state machine."""

import logging
from dataclasses import dataclass
from random import Random
from typing import Callable

from transitions import Machine

from config import GameConfig, config
from core.cards import Card, Shoe
from core.column import Column
from core.highscores import ScoreTable
from core.persistence import HighScoreStore, create_high_score_store
from core.scoring import PERFECT_BOARD, BoardTotals, RoundScore, board_totals, round_score
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.state import GamePhase, RoundEndReason
from core.game.timer import AsyncioTicker, Ticker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundResult:
    """Outcome of a completed round."""

    round_index: int
    score: int
    end_reason: RoundEndReason
    board_total: int


class Pick21Game:
    """
    Timed five-column card game over three rounds.

    This is the core game logic, completely UI-agnostic. Actions that are
    not valid in the current phase are ignored and return False; there is
    no error channel. Communication happens through events and return
    values only.
    """

    # State machine states
    STATES = [p.name.lower() for p in GamePhase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "begin_round", "source": "*", "dest": "in_round"},
        {"trigger": "finish_round", "source": "in_round", "dest": "between_rounds"},
        {"trigger": "finish_game", "source": "in_round", "dest": "game_over"},
        {"trigger": "enter_menu", "source": "*", "dest": "pre_game"},
    ]

    def __init__(
        self,
        deck_count: int | None = None,
        high_scores: ScoreTable | None = None,
        store: HighScoreStore | None = None,
        ticker: Ticker | None = None,
        rng: Random | None = None,
        settings: GameConfig | None = None,
    ) -> None:
        """
        Initialize a new game in the pre-game phase.

        Args:
            deck_count: Decks per shoe (defaults to the configured count)
            high_scores: Shared score table (loaded from the store if not given)
            store: High score persistence
            ticker: Countdown scheduler (defaults to the asyncio ticker)
            rng: Random number generator for reproducible games
            settings: Game rules and timer configuration
        """
        self.settings = settings or config.game
        self._rng = rng or Random()
        self.ticker = ticker or AsyncioTicker()
        self.store = store or create_high_score_store()
        self.high_scores = high_scores if high_scores is not None else self.store.load()
        self.events = EventEmitter()

        self.deck_count = self._validate_deck_count(
            self.settings.deck_count if deck_count is None else deck_count
        )
        self.haptics_enabled = True

        self.columns: list[Column] = [Column() for _ in range(self.settings.columns)]
        self.current_card: Card | None = None
        self.shoe: Shoe | None = None
        self.round = 1
        self.total_score = 0
        self.round_scores: list[int] = [0] * self.settings.rounds
        self.round_results: list[RoundResult] = []
        self.round_end_reason = RoundEndReason.NONE
        self.timer_value = self.settings.timer_max
        self.pass_available = True
        self.is_new_high_score = False

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="pre_game",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def phase(self) -> GamePhase:
        """Get current game phase as enum."""
        return GamePhase[self._machine_state.upper()]  # type: ignore

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def unsubscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Unsubscribe from game events."""
        self.events.unsubscribe(handler, event_type)

    # Game lifecycle

    def start_new_game(self) -> bool:
        """
        Reset scores and start round one. Valid from any phase.

        Raises:
            RuntimeError: If the ticker cannot start; the game is left untouched
        """
        self._start_round(1, new_game=True)
        return True

    def _start_round(self, round_number: int, new_game: bool = False) -> None:
        """Clear the board, build a fresh shoe, deal the first card and start the clock."""
        # Replaces any running schedule; fails before the game is touched
        self.ticker.start(self.settings.tick_interval, self._on_tick)

        if new_game:
            self.total_score = 0
            self.round_scores = [0] * self.settings.rounds
            self.round_results = []
            self.is_new_high_score = False
            self.shoe = None
            self.events.emit_new(EventType.GAME_STARTED, deck_count=self.deck_count)

        self.round = round_number
        self.columns = [Column() for _ in range(self.settings.columns)]
        self.round_end_reason = RoundEndReason.NONE
        self.pass_available = True
        self.timer_value = self.settings.timer_max
        self.begin_round()

        self.shoe = Shoe(num_decks=self.deck_count, rng=self._rng)
        self.shoe.shuffle()
        self.events.emit_new(EventType.SHOE_SHUFFLED, cards=self.shoe.cards_remaining)

        self._draw_next_card()

        self.events.emit_new(
            EventType.ROUND_STARTED,
            round=self.round,
            timer_value=self.timer_value,
        )

    def end_round(self, reason: RoundEndReason) -> bool:
        """
        Stop the clock, score the board and advance the phase.

        Only the first call per round has any effect, so a timer tick and a
        player action racing to end the round are harmless.
        """
        if self.phase != GamePhase.IN_ROUND:
            return False

        self.round_end_reason = reason
        self.ticker.stop()

        score, board_total = self.calculate_round_score()
        self.round_scores[self.round - 1] = score
        self.total_score += score
        result = RoundResult(
            round_index=self.round,
            score=score,
            end_reason=reason,
            board_total=board_total,
        )
        self.round_results.append(result)
        logger.info(
            "Round %d ended (%s): board %d, score %d",
            self.round, reason.value, board_total, score,
        )

        game_over = self.round >= self.settings.rounds
        if game_over:
            self.is_new_high_score = self.high_scores.insert(self.total_score)
            self.store.save(self.high_scores)
            self.finish_game()
        else:
            self.finish_round()

        self.events.emit_new(
            EventType.ROUND_ENDED,
            round=self.round,
            reason=reason.value,
            score=score,
            board_total=board_total,
            total_score=self.total_score,
        )
        if reason == RoundEndReason.PERFECT_BOARD:
            self._feedback("perfect_board")

        if game_over:
            self.events.emit_new(
                EventType.GAME_ENDED,
                total_score=self.total_score,
                round_scores=list(self.round_scores),
                is_new_high_score=self.is_new_high_score,
            )
            if self.is_new_high_score:
                self.events.emit_new(EventType.NEW_HIGH_SCORE, score=self.total_score)
                self._feedback("new_high_score")
            else:
                self._feedback("game_over")

        return True

    def next_round(self) -> bool:
        """Advance from the between-rounds pause to the next round."""
        if self.phase != GamePhase.BETWEEN_ROUNDS:
            return False
        self._start_round(self.round + 1)
        return True

    def return_to_pre_game(self) -> bool:
        """Stop the clock and go back to the menu."""
        self.ticker.stop()
        self.enter_menu()
        self.events.emit_new(EventType.RETURNED_TO_MENU)
        return True

    # Actions

    def place_current_card(self, column_index: int) -> bool:
        """
        Place the current card into a column.

        Args:
            column_index: Target column (0-4)

        Returns:
            True if the card was placed
        """
        if not self.can_place(column_index):
            return False

        column = self.columns[column_index]
        card = self.current_card
        column.add_card(card)
        self.current_card = None

        self.events.emit_new(
            EventType.CARD_PLACED,
            column=column_index,
            card=str(card),
            total=column.total,
            is_soft=column.is_soft,
        )
        if column.is_five_card_charlie:
            self.events.emit_new(EventType.FIVE_CARD_CHARLIE, column=column_index)
        elif column.is_locked:
            self.events.emit_new(EventType.COLUMN_LOCKED, column=column_index)

        if column.is_busted:
            self.events.emit_new(EventType.COLUMN_BUSTED, column=column_index, total=column.total)
            self.end_round(RoundEndReason.BUST)
            return True

        # Exact 105 ends the round even while some columns are soft and unlocked
        if self.board_totals().total == PERFECT_BOARD:
            self.end_round(RoundEndReason.PERFECT_BOARD)
            return True

        if all(c.is_locked and c.effective_total == 21 for c in self.columns):
            self.end_round(RoundEndReason.PERFECT_BOARD)
            return True

        self._draw_next_card()
        return True

    def use_pass(self) -> bool:
        """Discard the current card and draw a replacement, once per round."""
        if self.phase != GamePhase.IN_ROUND or not self.pass_available:
            return False

        self.pass_available = False
        discarded = self.current_card
        self.current_card = None
        self.events.emit_new(
            EventType.CARD_PASSED,
            card=str(discarded) if discarded is not None else None,
        )
        self._draw_next_card()
        return True

    def take_score(self) -> bool:
        """End the round voluntarily with the board as it stands."""
        if self.phase != GamePhase.IN_ROUND:
            return False
        return self.end_round(RoundEndReason.TOOK_SCORE)

    # Settings and high scores

    def set_deck_count(self, deck_count: int) -> None:
        """Change the shoe size. Takes effect when the next round starts."""
        self.deck_count = self._validate_deck_count(deck_count)
        self.events.emit_new(EventType.SETTINGS_CHANGED, deck_count=self.deck_count)

    def set_haptics_enabled(self, enabled: bool) -> None:
        """Toggle cosmetic feedback events."""
        self.haptics_enabled = enabled
        self.events.emit_new(EventType.SETTINGS_CHANGED, haptics_enabled=enabled)

    def clear_high_scores(self) -> None:
        """Empty the high score table and persist it."""
        self.high_scores.clear()
        self.store.save(self.high_scores)
        self.is_new_high_score = False
        self.events.emit_new(EventType.HIGH_SCORES_CLEARED)

    # Scoring

    def board_totals(self) -> BoardTotals:
        """Sum of effective column totals and whether any column busted."""
        return board_totals(self.columns)

    def calculate_round_score(self) -> RoundScore:
        """Score the current board against the remaining time."""
        return round_score(self.columns, self.timer_value)

    # Internals

    def _validate_deck_count(self, deck_count: int) -> int:
        if not 1 <= deck_count <= self.settings.max_deck_count:
            raise ValueError(
                f"Deck count must be between 1 and {self.settings.max_deck_count}"
            )
        return deck_count

    def _draw_next_card(self) -> Card:
        """Draw into the current card slot, rebuilding an exhausted shoe."""
        if self.shoe is None or self.shoe.is_empty:
            logger.warning("Shoe exhausted, rebuilding with %d deck(s)", self.deck_count)
            self.shoe = Shoe(num_decks=self.deck_count, rng=self._rng)
            self.shoe.shuffle()
            self.events.emit_new(EventType.SHOE_REBUILT, cards=self.shoe.cards_remaining)

        card = self.shoe.draw()
        self.current_card = card
        self.events.emit_new(
            EventType.CARD_DRAWN,
            card=str(card),
            cards_remaining=self.shoe.cards_remaining,
        )
        return card

    def _on_tick(self) -> None:
        """Countdown step; stale ticks outside a round are ignored."""
        if self.phase != GamePhase.IN_ROUND:
            return

        self.timer_value = max(0, self.timer_value - self.settings.tick_amount)
        self.events.emit_new(EventType.TIMER_TICK, timer_value=self.timer_value)

        if self.timer_value == 0:
            self.end_round(RoundEndReason.TIMER_EXPIRED)

    def _feedback(self, pattern: str) -> None:
        if self.haptics_enabled:
            self.events.emit_new(EventType.FEEDBACK, pattern=pattern)

    # Observation

    @property
    def timer_max(self) -> int:
        """Return the per-round countdown maximum."""
        return self.settings.timer_max

    @property
    def timer_fraction(self) -> float:
        """Remaining fraction of the countdown (1.0 at round start)."""
        return self.timer_value / self.timer_max if self.timer_max else 0.0

    @property
    def is_final_round(self) -> bool:
        """Check if the current round is the last of the game."""
        return self.round >= self.settings.rounds

    def can_place(self, column_index: int) -> bool:
        """Check if the current card can go into a column."""
        if self.phase != GamePhase.IN_ROUND or self.current_card is None:
            return False
        if not 0 <= column_index < len(self.columns):
            return False
        return not self.columns[column_index].is_locked

    @property
    def can_pass(self) -> bool:
        """Check if the pass is still available."""
        return self.phase == GamePhase.IN_ROUND and self.pass_available

    @property
    def can_take_score(self) -> bool:
        """Check if the round can be ended voluntarily."""
        return self.phase == GamePhase.IN_ROUND

    @property
    def can_next_round(self) -> bool:
        """Check if the next round can be started."""
        return self.phase == GamePhase.BETWEEN_ROUNDS
