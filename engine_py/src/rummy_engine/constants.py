"""Game constants and utilities"""

from typing import Dict, List, Tuple

SUITS = ['S', 'H', 'D', 'C']
JOKER_SUIT = 'JOKER'
JOKER_RANK = 'JOKER'

# Ace is low only
RANKS = ['A', '2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K']
RANK_VALUES: Dict[str, int] = {rank: i + 1 for i, rank in enumerate(RANKS)}
FALLBACK_WILDCARD_RANK = 'A'

CARDS_PER_DECK = len(SUITS) * len(RANKS) + 1

# Room status
STATUS_WAITING = 'WAITING'
STATUS_PLAYING = 'PLAYING'
STATUS_FINISHED = 'FINISHED'

# Turn phases
PHASE_DRAW = 'DRAW'
PHASE_DISCARD = 'DISCARD'

# Draw sources
SOURCE_DRAW = 'draw'
SOURCE_DISCARD = 'discard'
SOURCE_ALIASES = {'deck': SOURCE_DRAW}

HAND_SIZE = 13
MIN_GROUP_SIZE = 3
GAME_LOG_LIMIT = 50


def _rotations(parts: Tuple[int, ...]) -> List[Tuple[int, ...]]:
    return [parts[i:] + parts[:i] for i in range(len(parts))]


def _unique(items):
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


# Contiguous chunk sizes tried when a hand is declared
DECLARATION_COMPOSITIONS: List[Tuple[int, ...]] = _unique(
    _rotations((4, 3, 3, 3)) + _rotations((4, 4, 5))
)
