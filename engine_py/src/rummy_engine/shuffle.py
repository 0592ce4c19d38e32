"""
Shoe building, shuffling, dealing and discard recycling.
"""

import logging
import random
from typing import List, Optional, Tuple

from .constants import FALLBACK_WILDCARD_RANK, HAND_SIZE, JOKER_RANK, JOKER_SUIT, RANKS, SUITS
from .errors import NO_CARDS_AVAILABLE, SHOE_EXHAUSTED, raise_error
from .models import Card, Player, RoomState

logger = logging.getLogger(__name__)


def build_shoe(number_of_decks: int = 1) -> List[Card]:
    """
    Build a shoe of standard decks, each with one joker card.

    Card ids are prefixed with the deck number so they stay unique
    across the whole shoe.
    """
    if number_of_decks < 1:
        raise ValueError(f"Shoe needs at least one deck, got {number_of_decks}")

    shoe = []
    for deck_no in range(number_of_decks):
        for suit in SUITS:
            for rank in RANKS:
                shoe.append(Card(id=f"{deck_no}-{rank}{suit}", suit=suit, rank=rank))
        shoe.append(Card(id=f"{deck_no}-{JOKER_RANK}", suit=JOKER_SUIT, rank=JOKER_RANK))

    return shoe


def shuffle(cards: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Shuffle cards in place and return them.

    Args:
        cards: Cards to shuffle
        rng: Random source; a seeded one makes the order reproducible

    Returns:
        The same list, uniformly permuted (Fisher-Yates)
    """
    (rng or random).shuffle(cards)
    return cards


def deal(shoe: List[Card], players: List[Player], hand_size: int = HAND_SIZE) -> None:
    """
    Deal hand_size cards to each player, in seat order, off the front of the shoe.

    Args:
        shoe: Shuffled shoe; dealt cards are removed from it
        players: Players to deal to; their hands are replaced
        hand_size: Cards per player
    """
    needed = hand_size * len(players)
    if needed > len(shoe):
        raise_error(SHOE_EXHAUSTED, f"Cannot deal {needed} cards from a shoe of {len(shoe)}")

    for player in players:
        player.hand = shoe[:hand_size]
        del shoe[:hand_size]


def reveal_wildcard(shoe: List[Card]) -> Tuple[Card, str, List[Card]]:
    """
    Turn up the wildcard indicator and seed the discard pile.

    The indicator goes back under the shoe so it stays in play.

    Returns:
        (indicator card, wildcard rank, new discard pile)
    """
    if len(shoe) < 2:
        raise_error(SHOE_EXHAUSTED, "Not enough cards left to reveal the wildcard")

    indicator = shoe.pop()
    wildcard_rank = FALLBACK_WILDCARD_RANK if indicator.is_joker else indicator.rank
    discard = [shoe.pop()]
    shoe.insert(0, indicator)

    return indicator, wildcard_rank, discard


def reshuffle_from_discard(
    discard: List[Card],
    rng: Optional[random.Random] = None
) -> Tuple[List[Card], List[Card]]:
    """
    Recycle the discard pile into a fresh draw pile.

    The top discard stays face up; everything beneath it is shuffled.

    Returns:
        (new draw pile, new discard pile)
    """
    if len(discard) <= 1:
        raise_error(NO_CARDS_AVAILABLE, "Draw pile is empty and there is nothing to reshuffle")

    top = discard[-1]
    new_deck = shuffle(list(discard[:-1]), rng)
    logger.info(f"Reshuffled {len(new_deck)} discarded cards into the draw pile")
    return new_deck, [top]


def validate_deck_integrity(state: RoomState, shoe_size: int) -> bool:
    """
    Validate that all cards are accounted for and no duplicates exist.

    Args:
        state: Room state to validate
        shoe_size: Number of cards the shoe was built with

    Returns:
        True if deck integrity is valid
    """
    all_ids = [card.id for card in state.deck]
    all_ids.extend(card.id for card in state.discard)
    for player in state.players:
        all_ids.extend(card.id for card in player.hand)

    return len(all_ids) == len(set(all_ids)) == shoe_size
