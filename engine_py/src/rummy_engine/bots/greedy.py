"""
Greedy bot: takes the first card it can get and throws away a random one.
"""

import random
from typing import Optional

from .base import BaseBot, BotAction
from ..models import RoomState


class GreedyBot(BaseBot):
    """
    Simplest automated player.

    Strategy:
    - Draw from the draw pile, or the discard pile when the draw pile is empty
    - Discard a uniformly random card from the resulting hand
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def choose_draw(self, state: RoomState) -> Optional[BotAction]:
        sources = self.available_sources(state)
        if not sources:
            return None
        return BotAction.draw(sources[0])

    def choose_discard(self, state: RoomState) -> BotAction:
        hand = self.get_player_hand(state)
        card = hand[self.rng.randrange(len(hand))]
        return BotAction.discard(card.id)
