"""Game API endpoints."""

from typing import Annotated, Callable

from fastapi import APIRouter, HTTPException, Header

from api.schemas import (
    CardResponse,
    ColumnResponse,
    GameStateResponse,
    NewGameRequest,
    NewGameResponse,
    PlaceRequest,
    RoundResultResponse,
    SettingsRequest,
)
from api.session import get_registry
from core.cards import Card
from core.column import Column
from core.game import Pick21Game

router = APIRouter()


def _card_to_response(card: Card) -> CardResponse:
    """Convert a Card to CardResponse."""
    return CardResponse(rank=str(card.rank), suit=str(card.suit), value=card.value)


def _column_to_response(column: Column) -> ColumnResponse:
    """Convert a Column to ColumnResponse."""
    return ColumnResponse(
        cards=[_card_to_response(c) for c in column.cards],
        total=column.total,
        effective_total=column.effective_total,
        is_soft=column.is_soft,
        is_busted=column.is_busted,
        is_locked=column.is_locked,
        is_five_card_charlie=column.is_five_card_charlie,
    )


def game_state_response(game: Pick21Game) -> GameStateResponse:
    """Convert game state to response."""
    return GameStateResponse(
        phase=game.phase.name,
        round=game.round,
        columns=[_column_to_response(c) for c in game.columns],
        current_card=_card_to_response(game.current_card) if game.current_card else None,
        board_total=game.board_totals().total,
        timer_value=game.timer_value,
        timer_max=game.timer_max,
        pass_available=game.pass_available,
        round_scores=list(game.round_scores),
        round_results=[
            RoundResultResponse(
                round_index=r.round_index,
                score=r.score,
                end_reason=r.end_reason.value,
                board_total=r.board_total,
            )
            for r in game.round_results
        ],
        round_end_reason=game.round_end_reason.value,
        total_score=game.total_score,
        is_new_high_score=game.is_new_high_score,
        deck_count=game.deck_count,
        haptics_enabled=game.haptics_enabled,
        can_pass=game.can_pass,
        can_take_score=game.can_take_score,
        can_next_round=game.can_next_round,
    )


def _get_game(session_id: str) -> Pick21Game:
    """Get the game for a session or fail with 404."""
    game = get_registry().get(session_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Unknown or expired session")
    return game


def _apply(session_id: str, action: Callable[[Pick21Game], bool], name: str) -> GameStateResponse:
    """Run an action, reporting 409 if the game ignored it."""
    game = _get_game(session_id)
    if not action(game):
        raise HTTPException(status_code=409, detail=f"Cannot {name} now")
    return game_state_response(game)


@router.post("/new")
async def new_game(request: NewGameRequest | None = None) -> NewGameResponse:
    """Create a new game session in the pre-game phase."""
    deck_count = request.deck_count if request else None
    session_id, game = get_registry().create(deck_count=deck_count)
    return NewGameResponse(session_id=session_id, state=game_state_response(game))


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Get current game state."""
    return game_state_response(_get_game(session_id))


@router.post("/start")
async def start_game(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Start a new three-round game."""
    return _apply(session_id, lambda g: g.start_new_game(), "start")


@router.post("/place")
async def place_card(
    request: PlaceRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Place the current card into a column."""
    return _apply(session_id, lambda g: g.place_current_card(request.column), "place card")


@router.post("/pass")
async def use_pass(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Discard the current card using this round's pass."""
    return _apply(session_id, lambda g: g.use_pass(), "pass")


@router.post("/take-score")
async def take_score(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """End the round and bank the current board."""
    return _apply(session_id, lambda g: g.take_score(), "take score")


@router.post("/next-round")
async def next_round(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Start the next round."""
    return _apply(session_id, lambda g: g.next_round(), "start next round")


@router.post("/menu")
async def return_to_menu(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Stop the clock and return to the pre-game menu."""
    return _apply(session_id, lambda g: g.return_to_pre_game(), "return to menu")


@router.put("/settings")
async def update_settings(
    request: SettingsRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Change deck count (applies next round) and haptics."""
    game = _get_game(session_id)
    if request.deck_count is not None:
        game.set_deck_count(request.deck_count)
    if request.haptics_enabled is not None:
        game.set_haptics_enabled(request.haptics_enabled)
    return game_state_response(game)


@router.delete("/session", status_code=204)
async def end_session(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> None:
    """Stop the game's clock and discard the session."""
    _get_game(session_id)
    get_registry().remove(session_id)
