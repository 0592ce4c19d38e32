"""HTTP polling API for the rummy engine"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from ..engine import RummyEngine
from ..errors import GameError
from .events import (
    CreateRoomRequest, DeclareRequest, DiscardRequest, DrawRequest, JoinResponse,
    JoinRoomRequest, ReorderRequest, ReorderResponse, StartGameRequest, http_status_for
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_engine(request: Request) -> RummyEngine:
    return request.app.state.engine


def register_error_handlers(app: FastAPI):
    @app.exception_handler(GameError)
    async def game_error_handler(request: Request, exc: GameError):
        status = http_status_for(exc.code)
        logger.info(f"{request.method} {request.url.path} rejected: [{exc.code}] {exc.message}")
        return JSONResponse(
            status_code=status,
            content={"error": exc.message, "code": exc.code}
        )


# Plain `def` endpoints run in FastAPI's worker threads; the engine's
# per-room locks keep each room's operations serialized.

@router.post("/room/create", response_model=JoinResponse)
def create_room(body: CreateRoomRequest, engine: RummyEngine = Depends(get_engine)):
    room_id, player_index = engine.create_room(body.player_name)
    return JoinResponse(roomId=room_id, playerIndex=player_index)


@router.post("/room/join", response_model=JoinResponse)
def join_room(body: JoinRoomRequest, engine: RummyEngine = Depends(get_engine)):
    player_index = engine.join_room(body.room_id, body.player_name)
    return JoinResponse(roomId=body.room_id, playerIndex=player_index)


@router.post("/game/start")
def start_game(body: StartGameRequest, engine: RummyEngine = Depends(get_engine)) -> Dict[str, Any]:
    return engine.start_game(body.room_id, body.add_bots)


@router.get("/game/{room_id}")
def get_state(
    room_id: str,
    viewer: Optional[int] = None,
    engine: RummyEngine = Depends(get_engine)
) -> Dict[str, Any]:
    return engine.get_state(room_id, viewer)


@router.post("/game/{room_id}/draw")
def draw(room_id: str, body: DrawRequest, engine: RummyEngine = Depends(get_engine)) -> Dict[str, Any]:
    return engine.draw(room_id, body.player_index, body.source.value)


@router.post("/game/{room_id}/discard")
def discard(room_id: str, body: DiscardRequest, engine: RummyEngine = Depends(get_engine)) -> Dict[str, Any]:
    card = body.card_ref()
    return engine.discard(room_id, body.player_index, card.id, card.suit, card.rank)


@router.post("/game/{room_id}/declare")
def declare(room_id: str, body: DeclareRequest, engine: RummyEngine = Depends(get_engine)) -> Dict[str, Any]:
    return engine.declare(room_id, body.player_index)


@router.post("/game/{room_id}/reorder", response_model=ReorderResponse)
def reorder(room_id: str, body: ReorderRequest, engine: RummyEngine = Depends(get_engine)):
    hand = engine.reorder(room_id, body.player_index, body.card_ids())
    return ReorderResponse(hand=hand)
