import itertools
from typing import Callable, List

import pytest

from rummy_engine.constants import JOKER_RANK, JOKER_SUIT
from rummy_engine.engine import RummyEngine
from rummy_engine.models import Card
from rummy_engine.rules import create_rules


class FakeClock:
    """Manually advanced stand-in for time.time."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


_card_ids = itertools.count()


def card(code: str) -> Card:
    """Build a card from a short code such as '10H', 'AS' or 'JOKER'."""
    n = next(_card_ids)
    if code == JOKER_RANK:
        return Card(id=f"t{n}-JOKER", suit=JOKER_SUIT, rank=JOKER_RANK)
    return Card(id=f"t{n}-{code}", suit=code[-1], rank=code[:-1])


def cards(codes: str) -> List[Card]:
    """Build several cards from a space separated list of codes."""
    return [card(code) for code in codes.split()]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_engine(clock) -> Callable[..., RummyEngine]:
    """Factory for seeded engines on the fake clock."""

    def _factory(seed: int = 7, **overrides) -> RummyEngine:
        rules = create_rules(**overrides)
        return RummyEngine(rules=rules, clock=clock, seed=seed)

    return _factory


@pytest.fixture
def engine(make_engine) -> RummyEngine:
    return make_engine()


@pytest.fixture
def started_room(engine):
    """Two human players, dealt and waiting on seat 0 to draw."""
    room_id, _ = engine.create_room("Alice")
    engine.join_room(room_id, "Bob")
    engine.start_game(room_id)
    return engine.store.get(room_id)
