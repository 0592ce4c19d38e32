"""
Meld classification and declaration checks.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .constants import DECLARATION_COMPOSITIONS, HAND_SIZE, MIN_GROUP_SIZE
from .models import Card


class GroupKind(str, Enum):
    """How a group of cards classifies."""
    PURE_SEQUENCE = "pure_sequence"
    SEQUENCE = "sequence"
    SET = "set"
    WILD = "wild"  # every card is a wildcard
    INVALID = "invalid"


class DeclarationResult:
    """Result of a declaration check."""

    def __init__(
        self,
        valid: bool,
        error_message: Optional[str] = None,
        composition: Optional[Tuple[int, ...]] = None,
        groups: Optional[List[GroupKind]] = None
    ):
        self.valid = valid
        self.error_message = error_message
        self.composition = composition
        self.groups = groups or []

    @classmethod
    def success(cls, composition: Tuple[int, ...], groups: List[GroupKind]) -> 'DeclarationResult':
        """Create a successful declaration result."""
        return cls(valid=True, composition=composition, groups=groups)

    @classmethod
    def error(cls, error_message: str) -> 'DeclarationResult':
        """Create a failed declaration result."""
        return cls(valid=False, error_message=error_message)


def is_wild(card: Card, wildcard_rank: Optional[str]) -> bool:
    """Joker cards and natural cards of the wildcard rank substitute for anything."""
    if card.is_joker:
        return True
    return wildcard_rank is not None and card.rank == wildcard_rank


def split_wild(cards: Sequence[Card], wildcard_rank: Optional[str]) -> Tuple[List[Card], List[Card]]:
    """Split a group into (wild cards, natural cards)."""
    wild = [c for c in cards if is_wild(c, wildcard_rank)]
    natural = [c for c in cards if not is_wild(c, wildcard_rank)]
    return wild, natural


def is_pure_sequence(cards: Sequence[Card], wildcard_rank: Optional[str]) -> bool:
    """
    Check for a run of one suit with no wildcard substitutes.

    Ace counts low only, so Q-K-A does not wrap.
    """
    if len(cards) < MIN_GROUP_SIZE:
        return False
    if any(is_wild(c, wildcard_rank) for c in cards):
        return False

    suit = cards[0].suit
    if any(c.suit != suit for c in cards):
        return False

    values = sorted(c.value for c in cards)
    return all(b - a == 1 for a, b in zip(values, values[1:]))


def _is_set(natural: List[Card]) -> bool:
    # Suits may repeat
    rank = natural[0].rank
    return all(c.rank == rank for c in natural)


def _is_sequence(natural: List[Card], wild_count: int) -> bool:
    suit = natural[0].suit
    if any(c.suit != suit for c in natural):
        return False

    values = sorted(c.value for c in natural)
    gaps = 0
    for a, b in zip(values, values[1:]):
        if b == a:
            return False
        gaps += b - a - 1
    return gaps <= wild_count


def classify_group(cards: Sequence[Card], wildcard_rank: Optional[str]) -> GroupKind:
    """
    Classify a group of cards as a meld.

    Sets are tried before sequences, so a lone natural card padded with
    wildcards reports as SET even though it would also pass as a sequence;
    use is_sequence_group() for the sequence count.
    """
    if len(cards) < MIN_GROUP_SIZE:
        return GroupKind.INVALID
    if is_pure_sequence(cards, wildcard_rank):
        return GroupKind.PURE_SEQUENCE

    wild, natural = split_wild(cards, wildcard_rank)
    if not natural:
        return GroupKind.WILD
    if _is_set(natural):
        return GroupKind.SET
    if _is_sequence(natural, len(wild)):
        return GroupKind.SEQUENCE
    return GroupKind.INVALID


def is_valid_group(cards: Sequence[Card], wildcard_rank: Optional[str]) -> bool:
    """Check whether cards form any valid meld (set, sequence or all wild)."""
    return classify_group(cards, wildcard_rank) != GroupKind.INVALID


def is_sequence_group(cards: Sequence[Card], wildcard_rank: Optional[str]) -> bool:
    """Check whether a group counts towards the sequence requirement."""
    if len(cards) < MIN_GROUP_SIZE:
        return False
    if is_pure_sequence(cards, wildcard_rank):
        return True

    wild, natural = split_wild(cards, wildcard_rank)
    if not natural:
        return False
    return _is_sequence(natural, len(wild))


def split_hand(hand: Sequence[Card], composition: Sequence[int]) -> List[List[Card]]:
    """Slice a hand into contiguous chunks of the given sizes, in hand order."""
    chunks = []
    start = 0
    for size in composition:
        chunks.append(list(hand[start:start + size]))
        start += size
    return chunks


def check_composition(
    hand: Sequence[Card],
    composition: Tuple[int, ...],
    wildcard_rank: Optional[str]
) -> Optional[List[GroupKind]]:
    """
    Check one way of chunking the hand.

    Returns:
        Per-chunk classification if the composition wins, else None
    """
    kinds = []
    pure_count = 0
    sequence_count = 0

    for chunk in split_hand(hand, composition):
        kind = classify_group(chunk, wildcard_rank)
        if kind == GroupKind.INVALID:
            return None
        if kind == GroupKind.PURE_SEQUENCE:
            pure_count += 1
        if is_sequence_group(chunk, wildcard_rank):
            sequence_count += 1
            if kind != GroupKind.PURE_SEQUENCE:
                kind = GroupKind.SEQUENCE
        kinds.append(kind)

    if pure_count >= 1 and sequence_count >= 2:
        return kinds
    return None


def validate_declaration(hand: Sequence[Card], wildcard_rank: Optional[str]) -> DeclarationResult:
    """
    Validate a full hand for a win declaration.

    The hand is assumed to already be arranged in meld order: each
    composition in DECLARATION_COMPOSITIONS is tried by slicing the hand
    into contiguous chunks, and no other groupings are searched.

    Args:
        hand: The declaring player's hand in its current order
        wildcard_rank: The session's wildcard rank

    Returns:
        DeclarationResult with the winning composition, if any
    """
    if len(hand) != HAND_SIZE:
        return DeclarationResult.error(
            f"A declaration needs exactly {HAND_SIZE} cards, hand has {len(hand)}"
        )

    for composition in DECLARATION_COMPOSITIONS:
        kinds = check_composition(hand, composition, wildcard_rank)
        if kinds is not None:
            return DeclarationResult.success(composition, kinds)

    return DeclarationResult.error(
        "Hand must be arranged into valid melds with at least one pure sequence "
        "and two sequences in total"
    )
