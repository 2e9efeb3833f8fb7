"""High score API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Header, HTTPException

from api.schemas import HighScoreEntryResponse, HighScoreTableResponse
from api.session import get_registry
from core.highscores import ScoreTable

router = APIRouter()


def _table_response(table: ScoreTable) -> HighScoreTableResponse:
    """Convert the score table to a response."""
    return HighScoreTableResponse(
        entries=[
            HighScoreEntryResponse(rank=i + 1, score=e.score, date=e.date)
            for i, e in enumerate(table.entries)
        ],
        max_entries=table.max_entries,
    )


@router.get("")
async def get_high_scores() -> HighScoreTableResponse:
    """List the ranked high scores."""
    return _table_response(get_registry().high_scores)


@router.delete("")
async def clear_high_scores(
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> HighScoreTableResponse:
    """Clear every high score."""
    registry = get_registry()
    if session_id is None:
        registry.clear_high_scores()
    else:
        game = registry.get(session_id)
        if game is None:
            raise HTTPException(status_code=404, detail="Unknown or expired session")
        game.clear_high_scores()
    return _table_response(registry.high_scores)
