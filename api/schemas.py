"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from config import config


# Game schemas
class NewGameRequest(BaseModel):
    """Request to open a game session."""

    deck_count: int | None = Field(
        None, ge=1, le=config.game.max_deck_count, description="Decks per shoe"
    )


class PlaceRequest(BaseModel):
    """Request to place the current card."""

    column: int = Field(..., ge=0, lt=config.game.columns, description="Target column")


class SettingsRequest(BaseModel):
    """Request to change game settings."""

    deck_count: int | None = Field(None, ge=1, le=config.game.max_deck_count)
    haptics_enabled: bool | None = None


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    value: int


class ColumnResponse(BaseModel):
    """Column representation."""

    cards: list[CardResponse]
    total: int
    effective_total: int
    is_soft: bool
    is_busted: bool
    is_locked: bool
    is_five_card_charlie: bool


class RoundResultResponse(BaseModel):
    """Completed round."""

    round_index: int
    score: int
    end_reason: str
    board_total: int


class GameStateResponse(BaseModel):
    """Current game state."""

    phase: str
    round: int
    columns: list[ColumnResponse]
    current_card: CardResponse | None
    board_total: int
    timer_value: int
    timer_max: int
    pass_available: bool
    round_scores: list[int]
    round_results: list[RoundResultResponse]
    round_end_reason: str
    total_score: int
    is_new_high_score: bool
    deck_count: int
    haptics_enabled: bool
    can_pass: bool
    can_take_score: bool
    can_next_round: bool


class NewGameResponse(BaseModel):
    """Created session with its initial state."""

    session_id: str
    state: GameStateResponse


# High score schemas
class HighScoreEntryResponse(BaseModel):
    """One ranked high score."""

    rank: int
    score: int
    date: datetime


class HighScoreTableResponse(BaseModel):
    """The high score table."""

    entries: list[HighScoreEntryResponse]
    max_entries: int
