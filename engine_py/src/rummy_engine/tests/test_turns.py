"""
Draw / discard / declare / reorder sequencing.
"""

import threading

import pytest

from rummy_engine.constants import (
    PHASE_DISCARD, PHASE_DRAW, STATUS_FINISHED, STATUS_PLAYING
)
from rummy_engine.errors import (
    ATTEMPTED_CARD_INJECTION, CARD_NOT_IN_HAND, GAME_NOT_ACTIVE, INVALID_DECLARATION,
    INVALID_SOURCE, NO_CARDS_AVAILABLE, PLAYER_NOT_FOUND, SOURCE_EMPTY, WRONG_PHASE,
    WRONG_TURN, GameError
)
from rummy_engine.shuffle import validate_deck_integrity

from conftest import cards

SHOE_SIZE = 53


def assert_error(code, fn, *args, **kwargs):
    with pytest.raises(GameError) as exc:
        fn(*args, **kwargs)
    assert exc.value.code == code


def test_draw_then_discard(engine, started_room):
    room = started_room
    alice = room.players[0]
    top_of_deck = room.deck[-1]

    snapshot = engine.draw(room.id, 0, "draw")
    assert snapshot["phase"] == PHASE_DISCARD
    assert len(alice.hand) == 14
    assert alice.hand[-1] is top_of_deck

    snapshot = engine.discard(room.id, 0, card_id=top_of_deck.id)
    assert len(alice.hand) == 13
    assert room.discard[-1] is top_of_deck
    assert snapshot["currentPlayerIndex"] == 1
    assert snapshot["phase"] == PHASE_DRAW
    assert validate_deck_integrity(room, SHOE_SIZE)


def test_draw_from_discard_pile(engine, started_room):
    room = started_room
    top = room.discard[-1]

    engine.draw(room.id, 0, "discard")

    assert room.players[0].hand[-1] is top
    assert room.discard == []


def test_deck_alias_for_draw_pile(engine, started_room):
    deck_size = len(started_room.deck)
    engine.draw(started_room.id, 0, "deck")
    assert len(started_room.deck) == deck_size - 1


def test_unknown_source(engine, started_room):
    assert_error(INVALID_SOURCE, engine.draw, started_room.id, 0, "table")
    assert started_room.phase == PHASE_DRAW


def test_second_draw_fails_and_leaves_14_cards(engine, started_room):
    room = started_room
    engine.draw(room.id, 0, "draw")

    assert_error(WRONG_PHASE, engine.draw, room.id, 0, "draw")
    assert len(room.players[0].hand) == 14


def test_concurrent_draws_are_serialized(engine, started_room):
    room = started_room
    barrier = threading.Barrier(8)
    results = []

    def attempt():
        barrier.wait()
        try:
            engine.draw(room.id, 0, "draw")
            results.append("ok")
        except GameError as e:
            results.append(e.code)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count(WRONG_PHASE) == 7
    assert len(room.players[0].hand) == 14
    assert validate_deck_integrity(room, SHOE_SIZE)


def test_discard_before_draw(engine, started_room):
    card_id = started_room.players[0].hand[0].id
    assert_error(WRONG_PHASE, engine.discard, started_room.id, 0, card_id=card_id)


def test_out_of_turn(engine, started_room):
    room = started_room
    assert_error(WRONG_TURN, engine.draw, room.id, 1, "draw")

    engine.draw(room.id, 0, "draw")
    assert_error(WRONG_TURN, engine.discard, room.id, 1, card_id=room.players[1].hand[0].id)
    assert len(room.players[1].hand) == 13


def test_unknown_player(engine, started_room):
    assert_error(PLAYER_NOT_FOUND, engine.draw, started_room.id, 5, "draw")
    assert_error(PLAYER_NOT_FOUND, engine.reorder, started_room.id, -1, [])


def test_discard_card_not_in_hand(engine, started_room):
    room = started_room
    engine.draw(room.id, 0, "draw")
    bobs_card = room.players[1].hand[0]

    assert_error(CARD_NOT_IN_HAND, engine.discard, room.id, 0, card_id=bobs_card.id)
    assert len(room.players[0].hand) == 14
    assert room.phase == PHASE_DISCARD


def test_discard_by_suit_and_rank(engine, started_room):
    room = started_room
    engine.draw(room.id, 0, "draw")
    target = room.players[0].hand[3]

    engine.discard(room.id, 0, suit=target.suit, rank=target.rank)

    assert room.discard[-1].suit == target.suit
    assert room.discard[-1].rank == target.rank


def test_empty_draw_pile_reshuffles_discards(engine, started_room):
    room = started_room
    room.discard = room.deck + room.discard
    room.deck = []
    top = room.discard[-1]
    recyclable = len(room.discard) - 1

    engine.draw(room.id, 0, "draw")

    assert room.discard == [top]
    assert len(room.deck) == recyclable - 1
    assert len(room.players[0].hand) == 14
    assert validate_deck_integrity(room, SHOE_SIZE)


def test_empty_draw_pile_with_nothing_to_recycle(engine, started_room):
    room = started_room
    room.deck = []
    version = room.version

    assert_error(NO_CARDS_AVAILABLE, engine.draw, room.id, 0, "draw")
    assert room.phase == PHASE_DRAW
    assert len(room.discard) == 1
    assert room.version == version


def test_empty_discard_pile(engine, started_room):
    room = started_room
    room.discard = []

    assert_error(SOURCE_EMPTY, engine.draw, room.id, 0, "discard")
    assert len(room.players[0].hand) == 13


def test_card_count_conserved_over_many_turns(engine, started_room):
    room = started_room
    for turn in range(60):
        seat = room.current_player
        source = "discard" if turn % 3 == 0 else "draw"
        engine.draw(room.id, seat, source)
        engine.discard(room.id, seat, card_id=room.players[seat].hand[turn % 14].id)
        assert room.card_count() == SHOE_SIZE
        assert all(len(p.hand) == 13 for p in room.players)

    assert validate_deck_integrity(room, SHOE_SIZE)


def test_reorder_permutation(engine, started_room):
    hand = started_room.players[1].hand
    new_order = [c.id for c in reversed(hand)]

    result = engine.reorder(started_room.id, 1, new_order)

    assert [c["id"] for c in result] == new_order
    assert [c.id for c in started_room.players[1].hand] == new_order
    # reordering is allowed out of turn and leaves the turn alone
    assert started_room.current_player == 0
    assert started_room.phase == PHASE_DRAW


@pytest.mark.parametrize("tamper", ["add", "remove", "substitute", "duplicate"])
def test_reorder_rejects_injection(engine, started_room, tamper):
    room = started_room
    original = list(room.players[0].hand)
    ids = [c.id for c in original]
    foreign = room.players[1].hand[0].id

    if tamper == "add":
        ids.append(foreign)
    elif tamper == "remove":
        ids.pop()
    elif tamper == "substitute":
        ids[0] = foreign
    else:
        ids[0] = ids[1]

    assert_error(ATTEMPTED_CARD_INJECTION, engine.reorder, room.id, 0, ids)
    assert room.players[0].hand == original


def _arrange_winning_hand(room, seat):
    room.wildcard_rank = "7"
    room.players[seat].hand = cards(
        "3H 4H 5H 6H "
        "9S 10S JS "
        "KD KC KH "
        "2C 2D 2S"
    )


def test_declare_winning_hand(engine, started_room):
    room = started_room
    _arrange_winning_hand(room, 0)

    snapshot = engine.declare(room.id, 0)

    assert snapshot["status"] == STATUS_FINISHED
    assert snapshot["winner"] == "Alice"
    assert snapshot["phase"] is None
    assert room.turn_deadline is None


def test_declare_out_of_turn(engine, started_room):
    _arrange_winning_hand(started_room, 1)
    assert_error(WRONG_TURN, engine.declare, started_room.id, 1)
    assert started_room.status == STATUS_PLAYING


def test_declare_invalid_hand_leaves_room_unchanged(engine, started_room):
    room = started_room
    room.wildcard_rank = "7"
    room.players[0].hand = cards(
        "3H 3S 3D 3C "
        "9S 9H 9D "
        "KD KC KH "
        "2C 2D 2S"
    )
    version = room.version

    assert_error(INVALID_DECLARATION, engine.declare, room.id, 0)
    assert room.status == STATUS_PLAYING
    assert room.winner is None
    assert room.version == version


def test_declare_with_14_cards_fails(engine, started_room):
    room = started_room
    _arrange_winning_hand(room, 0)
    engine.draw(room.id, 0, "draw")

    assert_error(INVALID_DECLARATION, engine.declare, room.id, 0)


def test_no_moves_after_game_finished(engine, started_room):
    room = started_room
    _arrange_winning_hand(room, 0)
    engine.declare(room.id, 0)

    assert_error(GAME_NOT_ACTIVE, engine.draw, room.id, 0, "draw")
    assert_error(GAME_NOT_ACTIVE, engine.declare, room.id, 0)


def test_no_moves_before_start(engine):
    room_id, _ = engine.create_room("Alice")
    engine.join_room(room_id, "Bob")
    assert_error(GAME_NOT_ACTIVE, engine.draw, room_id, 0, "draw")
