"""
HTTP request/response models and validation.
"""

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import SOURCE_ALIASES


class DrawSource(str, Enum):
    """Piles a player may draw from."""
    DRAW = "draw"
    DISCARD = "discard"


class ErrorCode(str, Enum):
    """Error codes reported to clients."""
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    ROOM_FULL = "ROOM_FULL"
    ROOM_ALREADY_EXISTS = "ROOM_ALREADY_EXISTS"
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    GAME_NOT_ACTIVE = "GAME_NOT_ACTIVE"
    WRONG_TURN = "WRONG_TURN"
    WRONG_PHASE = "WRONG_PHASE"
    INVALID_SOURCE = "INVALID_SOURCE"
    SOURCE_EMPTY = "SOURCE_EMPTY"
    NO_CARDS_AVAILABLE = "NO_CARDS_AVAILABLE"
    SHOE_EXHAUSTED = "SHOE_EXHAUSTED"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    INVALID_DECLARATION = "INVALID_DECLARATION"
    ATTEMPTED_CARD_INJECTION = "ATTEMPTED_CARD_INJECTION"


HTTP_STATUS = {
    ErrorCode.ROOM_NOT_FOUND: 404,
    ErrorCode.PLAYER_NOT_FOUND: 404,
    ErrorCode.WRONG_TURN: 403,
    ErrorCode.ROOM_FULL: 409,
    ErrorCode.ROOM_ALREADY_EXISTS: 409,
    ErrorCode.GAME_ALREADY_STARTED: 409,
}


def http_status_for(code: str) -> int:
    """HTTP status for an engine error code; 400 unless listed above."""
    try:
        return HTTP_STATUS.get(ErrorCode(code), 400)
    except ValueError:
        return 400


# Inbound request models
class BaseRequest(BaseModel):
    """Base request model; accepts the browser's camelCase field names."""
    model_config = ConfigDict(populate_by_name=True)


class CreateRoomRequest(BaseRequest):
    """Create room request."""
    player_name: str = Field("Player 1", alias="playerName", min_length=1, max_length=30)


class JoinRoomRequest(BaseRequest):
    """Join room request."""
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=50)
    player_name: str = Field(..., alias="playerName", min_length=1, max_length=30)


class StartGameRequest(BaseRequest):
    """Start game request."""
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=50)
    add_bots: Optional[int] = Field(None, alias="addBots", ge=0, le=7)


class PlayerRequest(BaseRequest):
    """Any in-game request made by a seated player."""
    player_index: int = Field(..., alias="playerIndex", ge=0)


class DrawRequest(PlayerRequest):
    """Draw a card request."""
    source: DrawSource

    @field_validator('source', mode='before')
    @classmethod
    def normalize_source(cls, v):
        """The browser calls the draw pile 'deck'."""
        if isinstance(v, str):
            return SOURCE_ALIASES.get(v, v)
        return v


class CardRef(BaseModel):
    """A card named by the client; id wins over suit + rank."""
    id: Optional[str] = None
    suit: Optional[str] = None
    rank: Optional[str] = Field(None, validation_alias="value")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('rank', mode='before')
    @classmethod
    def stringify_rank(cls, v):
        return str(v) if v is not None else v


class DiscardRequest(PlayerRequest):
    """Discard a card request."""
    card: Union[CardRef, str]

    def card_ref(self) -> CardRef:
        if isinstance(self.card, str):
            return CardRef(id=self.card)
        return self.card


class DeclareRequest(PlayerRequest):
    """Declare ("show") request."""


class ReorderRequest(PlayerRequest):
    """Reorder own hand request."""
    hand: List[Union[CardRef, str]] = Field(..., max_length=14)

    def card_ids(self) -> List[Optional[str]]:
        return [card if isinstance(card, str) else card.id for card in self.hand]


# Outbound models
class JoinResponse(BaseModel):
    """Seat assignment returned by create/join."""
    roomId: str
    playerIndex: int


class ReorderResponse(BaseModel):
    """Acknowledgement of a reorder."""
    ok: bool = True
    hand: List[Dict[str, str]]
