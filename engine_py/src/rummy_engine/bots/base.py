"""
Base bot interface and utilities.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..constants import PHASE_DISCARD, PHASE_DRAW, SOURCE_DISCARD, SOURCE_DRAW, STATUS_PLAYING
from ..models import Card, RoomState


class BotAction:
    """Represents a bot action."""

    def __init__(self, action_type: str, **kwargs):
        self.type = action_type
        self.data = kwargs

    @classmethod
    def draw(cls, source: str) -> 'BotAction':
        """Create a draw action."""
        return cls('draw', source=source)

    @classmethod
    def discard(cls, card_id: str) -> 'BotAction':
        """Create a discard action."""
        return cls('discard', card_id=card_id)

    def __repr__(self) -> str:
        return f"BotAction({self.type}, {self.data})"


class BaseBot(ABC):
    """Abstract base class for bot players."""

    @abstractmethod
    def choose_draw(self, state: RoomState) -> Optional[BotAction]:
        """
        Choose where to draw from.

        Args:
            state: Current room state, with the bot as current player

        Returns:
            BotAction to take, or None if there is nothing to draw
        """
        pass

    @abstractmethod
    def choose_discard(self, state: RoomState) -> BotAction:
        """Choose which card to throw away after drawing."""
        pass

    def choose_action(self, state: RoomState) -> Optional[BotAction]:
        """Pick the next action for the current phase."""
        if state.status != STATUS_PLAYING:
            return None
        if state.phase == PHASE_DRAW:
            return self.choose_draw(state)
        if state.phase == PHASE_DISCARD:
            return self.choose_discard(state)
        return None

    def get_player_hand(self, state: RoomState) -> List[Card]:
        """Get the current player's hand."""
        return state.current().hand

    def available_sources(self, state: RoomState) -> List[str]:
        """Piles that currently hold at least one card, draw pile first."""
        sources = []
        if state.deck:
            sources.append(SOURCE_DRAW)
        if state.discard:
            sources.append(SOURCE_DISCARD)
        return sources
