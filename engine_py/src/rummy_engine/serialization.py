"""
State serialization and sanitization utilities.
"""

from typing import Any, Dict, List, Optional

from .models import Card, Player, RoomState

LOG_TAIL = 10


def serialize_cards(cards: List[Card]) -> List[Dict[str, str]]:
    return [card.to_dict() for card in cards]


def sanitize_state(
    state: RoomState,
    viewer_index: Optional[int] = None,
    hide_opponent_hands: bool = False
) -> Dict[str, Any]:
    """
    Build the snapshot sent to clients.

    Args:
        state: Room state to serialize
        viewer_index: Seat of the player asking, if known
        hide_opponent_hands: Replace other players' hands with a count

    Returns:
        Snapshot dictionary safe for JSON transmission. The draw pile is
        only ever reported as a count.
    """
    return {
        "id": state.id,
        "version": state.version,
        "status": state.status,
        "phase": state.phase,
        "currentPlayerIndex": state.current_player,
        "turnDeadline": state.turn_deadline,
        "players": [
            serialize_player(player, show_hand=_can_see_hand(player, viewer_index, hide_opponent_hands))
            for player in state.players
        ],
        "wildcard": {
            "rank": state.wildcard_rank,
            "card": state.wildcard_card.to_dict() if state.wildcard_card else None,
        },
        "discardPile": serialize_cards(state.discard),
        "deckCount": len(state.deck),
        "winner": state.winner,
        "log": state.game_log[-LOG_TAIL:],
    }


def _can_see_hand(player: Player, viewer_index: Optional[int], hide_opponent_hands: bool) -> bool:
    if not hide_opponent_hands:
        return True
    return viewer_index is not None and player.index == viewer_index


def serialize_player(player: Player, show_hand: bool = True) -> Dict[str, Any]:
    """Serialize a seat, optionally without its cards."""
    data = {
        "index": player.index,
        "name": player.name,
        "isBot": player.is_bot,
        "handCount": len(player.hand),
    }
    if show_hand:
        data["hand"] = serialize_cards(player.hand)
    return data

