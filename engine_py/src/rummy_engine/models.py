"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import JOKER_SUIT, RANK_VALUES, STATUS_WAITING


@dataclass(frozen=True)
class Card:
    id: str
    suit: str  # S|H|D|C|JOKER
    rank: str  # A..K or JOKER

    @property
    def is_joker(self) -> bool:
        return self.suit == JOKER_SUIT

    @property
    def value(self) -> int:
        """Numeric rank, Ace low. Joker cards have no value (0)."""
        return RANK_VALUES.get(self.rank, 0)

    def to_dict(self) -> dict:
        return {"id": self.id, "suit": self.suit, "rank": self.rank}


@dataclass
class Player:
    index: int
    name: str
    hand: List[Card] = field(default_factory=list)
    is_bot: bool = False


@dataclass
class RoomState:
    id: str
    version: int = 0
    status: str = STATUS_WAITING  # WAITING|PLAYING|FINISHED
    phase: Optional[str] = None  # DRAW|DISCARD while PLAYING
    players: List[Player] = field(default_factory=list)
    current_player: int = 0
    turn_deadline: Optional[float] = None
    deck: List[Card] = field(default_factory=list)  # draw pile, top = last
    discard: List[Card] = field(default_factory=list)  # top = last
    wildcard_rank: Optional[str] = None
    wildcard_card: Optional[Card] = None  # the revealed indicator
    winner: Optional[str] = None
    created_at: float = 0.0
    last_activity: float = 0.0
    game_log: List[str] = field(default_factory=list)

    def current(self) -> Player:
        return self.players[self.current_player]

    def card_count(self) -> int:
        """Cards in play across the draw pile, the discard pile and every hand."""
        return len(self.deck) + len(self.discard) + sum(len(p.hand) for p in self.players)
