"""WebSocket channel pushing game events, timer ticks included."""

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from api.routes.game import game_state_response
from api.session import get_registry
from core.game import Pick21Game
from core.game.events import GameEvent

logger = logging.getLogger(__name__)

router = APIRouter()


def _event_to_message(event: GameEvent, game: Pick21Game) -> dict[str, Any]:
    """Convert a game event to a WebSocket message."""
    return {
        "type": "event",
        "event_type": event.event_type.name,
        "data": event.data,
        "state": game_state_response(game).model_dump(mode="json"),
    }


def _state_message(game: Pick21Game) -> dict[str, Any]:
    return {"type": "state_update", "state": game_state_response(game).model_dump(mode="json")}


def _dispatch(game: Pick21Game, message: dict[str, Any]) -> bool | None:
    """Run a client command; None means the command is unknown."""
    msg_type = message.get("type")
    if msg_type == "place":
        column = message.get("column")
        # JSON true/false decode to bool, a subclass of int
        if isinstance(column, bool) or not isinstance(column, int):
            return False
        return game.place_current_card(column)

    actions = {
        "start": game.start_new_game,
        "pass": game.use_pass,
        "take_score": game.take_score,
        "next_round": game.next_round,
        "menu": game.return_to_pre_game,
    }
    action_fn = actions.get(msg_type)  # type: ignore[arg-type]
    if action_fn is None:
        return None
    return action_fn()


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for real-time game updates.

    Messages from client:
    - {"type": "start" | "pass" | "take_score" | "next_round" | "menu" | "get_state"}
    - {"type": "place", "column": 0-4}

    Messages to client:
    - {"type": "state_update", "state": {...}}
    - {"type": "event", "event_type": "...", "data": {...}, "state": {...}}
    - {"type": "error", "message": "..."}
    """
    game = get_registry().get(session_id)
    if game is None:
        await websocket.close(code=4404)
        return

    await websocket.accept()
    queue: asyncio.Queue[GameEvent] = asyncio.Queue(maxsize=256)

    def on_event(event: GameEvent) -> None:
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.debug("Dropping %s for slow client", event.event_type.name)

    game.subscribe(on_event)

    async def process_events() -> None:
        """Forward queued game events to the client."""
        while True:
            event = await queue.get()
            await websocket.send_json(_event_to_message(event, game))

    event_task = asyncio.create_task(process_events())
    await websocket.send_json(_state_message(game))

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue

            if message.get("type") == "get_state":
                await websocket.send_json(_state_message(game))
                continue

            applied = _dispatch(game, message)
            if applied is None:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type: {message.get('type')}",
                })
            elif not applied:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Cannot {message.get('type')} now",
                })

    except WebSocketDisconnect:
        pass
    finally:
        game.unsubscribe(on_event)
        event_task.cancel()
        try:
            await event_task
        except asyncio.CancelledError:
            pass
