"""Game phase and round-end enumerations."""

from enum import Enum, auto


class GamePhase(Enum):
    """
    Game state machine states.

    Flow: PRE_GAME → IN_ROUND → BETWEEN_ROUNDS → IN_ROUND ... → GAME_OVER → PRE_GAME
    """

    # Menu, before the first deal
    PRE_GAME = auto()

    # Cards being dealt and placed against the clock
    IN_ROUND = auto()

    # Round scored, waiting for the player to continue
    BETWEEN_ROUNDS = auto()

    # Third round scored, high score offered
    GAME_OVER = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class RoundEndReason(Enum):
    """Why a round terminated."""

    NONE = "none"
    BUST = "bust"
    TOOK_SCORE = "took_score"
    PERFECT_BOARD = "perfect_board"
    TIMER_EXPIRED = "timer_expired"

    def __str__(self) -> str:
        return self.value.replace("_", " ")


# Valid state transitions (starting a new game is allowed from anywhere)
VALID_TRANSITIONS: dict[GamePhase, list[GamePhase]] = {
    GamePhase.PRE_GAME: [GamePhase.IN_ROUND, GamePhase.PRE_GAME],
    GamePhase.IN_ROUND: [
        GamePhase.IN_ROUND,
        GamePhase.BETWEEN_ROUNDS,
        GamePhase.GAME_OVER,
        GamePhase.PRE_GAME,
    ],
    GamePhase.BETWEEN_ROUNDS: [GamePhase.IN_ROUND, GamePhase.PRE_GAME],
    GamePhase.GAME_OVER: [GamePhase.IN_ROUND, GamePhase.PRE_GAME],
}


def is_valid_transition(from_state: GamePhase, to_state: GamePhase) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current phase
        to_state: Desired phase

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])
