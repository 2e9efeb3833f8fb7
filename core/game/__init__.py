"""Game engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GamePhase, RoundEndReason
from core.game.timer import AsyncioTicker, ManualTicker, Ticker
from core.game.engine import Pick21Game, RoundResult

__all__ = [
    "GameEvent",
    "EventType",
    "GamePhase",
    "RoundEndReason",
    "AsyncioTicker",
    "ManualTicker",
    "Ticker",
    "Pick21Game",
    "RoundResult",
]
