"""Room state machine: lobby, dealing, turns, timeouts and bot play"""

import logging
import random
import time
from collections import Counter
from typing import Any, Callable, Dict, List, Optional, Tuple

from .bots.base import BaseBot
from .bots.greedy import GreedyBot
from .constants import (
    GAME_LOG_LIMIT, PHASE_DISCARD, PHASE_DRAW, SOURCE_ALIASES, SOURCE_DISCARD,
    SOURCE_DRAW, STATUS_FINISHED, STATUS_PLAYING, STATUS_WAITING
)
from .errors import (
    ATTEMPTED_CARD_INJECTION, CARD_NOT_IN_HAND, GAME_ALREADY_STARTED, GAME_NOT_ACTIVE,
    INVALID_DECLARATION, INVALID_SOURCE, NOT_ENOUGH_PLAYERS, PLAYER_NOT_FOUND, ROOM_FULL,
    SOURCE_EMPTY, WRONG_PHASE, WRONG_TURN, GameError, raise_error
)
from .models import Card, Player, RoomState
from .rules import RuleConfig, default_rules
from .serialization import sanitize_state, serialize_cards
from .shuffle import build_shoe, deal, reshuffle_from_discard, reveal_wildcard, shuffle
from .store import RoomStore
from .validate import validate_declaration

logger = logging.getLogger(__name__)


class RummyEngine:
    """
    Authoritative engine for every room in the process.

    Each public operation takes the room's lock, settles any turns whose
    deadline has passed, applies the request and returns a snapshot built
    while the lock is still held.
    """

    def __init__(
        self,
        rules: Optional[RuleConfig] = None,
        store: Optional[RoomStore] = None,
        bot: Optional[BaseBot] = None,
        clock: Callable[[], float] = time.time,
        seed: Optional[int] = None
    ):
        self.rules = rules or default_rules
        self.store = store or RoomStore()
        self.rng = random.Random(seed)
        self.bot = bot or GreedyBot(self.rng)
        self.clock = clock

    # ------------------------------------------------------------------ lobby

    def create_room(self, player_name: str, room_id: Optional[str] = None) -> Tuple[str, int]:
        """Open a room with its creator in seat 0."""
        now = self.clock()
        self.store.evict_idle(now, self.rules.room_timeout)
        room = self.store.create(room_id, now=now)
        logger.info(f"Room {room.id} created by {player_name}")
        return room.id, self.join_room(room.id, player_name)

    def join_room(self, room_id: str, player_name: str, is_bot: bool = False) -> int:
        with self.store.locked(room_id) as room:
            room.last_activity = self.clock()
            if room.status != STATUS_WAITING:
                raise_error(GAME_ALREADY_STARTED, "Game has already started")
            return self._seat_player(room, player_name, is_bot)

    def _seat_player(self, room: RoomState, name: str, is_bot: bool) -> int:
        if len(room.players) >= self.rules.max_players:
            raise_error(ROOM_FULL, "Room is full")
        index = len(room.players)
        room.players.append(Player(index=index, name=name, is_bot=is_bot))
        self._mutated(room)
        self._log(room, f"{name} joined" + (" (bot)" if is_bot else ""))
        return index

    def start_game(self, room_id: str, bots_to_add: Optional[int] = None) -> Dict[str, Any]:
        """
        Deal and begin play.

        Args:
            room_id: Room to start
            bots_to_add: If given, seat bots until the table has this many
                players (the browser sends humans + bots)
        """
        with self.store.locked(room_id) as room:
            now = self.clock()
            room.last_activity = now
            if room.status != STATUS_WAITING:
                raise_error(GAME_ALREADY_STARTED, "Game has already started")

            if bots_to_add and self.rules.enable_bots:
                target = min(bots_to_add, self.rules.max_players)
                bot_no = 1
                while len(room.players) < target:
                    self._seat_player(room, f"Bot {bot_no}", is_bot=True)
                    bot_no += 1

            if len(room.players) < self.rules.min_players:
                raise_error(
                    NOT_ENOUGH_PLAYERS,
                    f"Need at least {self.rules.min_players} players"
                )

            self._deal(room)
            room.status = STATUS_PLAYING
            room.phase = PHASE_DRAW
            room.current_player = 0
            room.turn_deadline = now + self.rules.turn_timeout
            room.winner = None
            self._mutated(room)
            self._log(room, f"Game started, wildcard rank is {room.wildcard_rank}")
            logger.info(
                f"Room {room.id} started with {len(room.players)} players, "
                f"{len(room.deck)} cards in the draw pile"
            )

            if room.current().is_bot:
                self._run_bot_turns(room, now)
            return self._snapshot(room)

    def _deal(self, room: RoomState):
        shoe = shuffle(build_shoe(self.rules.decks_for_players(len(room.players))), self.rng)
        deal(shoe, room.players, self.rules.hand_size)
        indicator, wildcard_rank, discard = reveal_wildcard(shoe)
        room.deck = shoe
        room.discard = discard
        room.wildcard_card = indicator
        room.wildcard_rank = wildcard_rank

    # --------------------------------------------------------------- reading

    def get_state(self, room_id: str, viewer_index: Optional[int] = None) -> Dict[str, Any]:
        """Snapshot of the room after settling any elapsed turns."""
        with self.store.locked(room_id) as room:
            self._resolve_elapsed_turns(room)
            return self._snapshot(room, viewer_index)

    def _snapshot(self, room: RoomState, viewer_index: Optional[int] = None) -> Dict[str, Any]:
        return sanitize_state(room, viewer_index, self.rules.hide_opponent_hands)

    # --------------------------------------------------------------- actions

    def draw(self, room_id: str, player_index: int, source: str) -> Dict[str, Any]:
        """Take one card from the draw pile or the discard pile."""
        with self.store.locked(room_id) as room:
            self._resolve_elapsed_turns(room)
            player = self._require_turn(room, player_index, PHASE_DRAW)

            source = SOURCE_ALIASES.get(source, source)
            if source not in (SOURCE_DRAW, SOURCE_DISCARD):
                raise_error(INVALID_SOURCE, f"Unknown draw source: {source}")

            card = self._take_card(room, player, source)
            self._mutated(room)
            self._log(room, f"{player.name} drew from the {source} pile")
            logger.debug(f"Room {room.id}: {player.name} drew {card.id} from {source}")
            return self._snapshot(room, player_index)

    def discard(
        self,
        room_id: str,
        player_index: int,
        card_id: Optional[str] = None,
        suit: Optional[str] = None,
        rank: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Throw one card onto the discard pile and pass the turn on.

        The card is named by id; when no id is given the first card in hand
        with the same suit and rank is used.
        """
        with self.store.locked(room_id) as room:
            self._resolve_elapsed_turns(room)
            player = self._require_turn(room, player_index, PHASE_DISCARD)

            card = self._find_card(player, card_id, suit, rank)
            if card is None:
                raise_error(CARD_NOT_IN_HAND, "Card not in hand")

            self._discard_card(room, player, card)
            self._advance_turn(room, self.clock())
            return self._snapshot(room, player_index)

    def declare(self, room_id: str, player_index: int) -> Dict[str, Any]:
        """Show a 13-card hand arranged into melds to win the game."""
        with self.store.locked(room_id) as room:
            self._resolve_elapsed_turns(room)
            player = self._require_turn(room, player_index)

            result = validate_declaration(player.hand, room.wildcard_rank)
            if not result.valid:
                logger.info(f"Room {room.id}: {player.name} made an invalid declaration")
                raise_error(INVALID_DECLARATION, result.error_message)

            room.status = STATUS_FINISHED
            room.phase = None
            room.turn_deadline = None
            room.winner = player.name
            self._mutated(room)
            self._log(room, f"{player.name} declared and wins")
            logger.info(
                f"Room {room.id}: {player.name} wins with composition {result.composition}"
            )
            return self._snapshot(room, player_index)

    def reorder(self, room_id: str, player_index: int, card_ids: List[str]) -> List[Dict[str, str]]:
        """Rearrange a player's own hand. Turn state is untouched."""
        with self.store.locked(room_id) as room:
            self._resolve_elapsed_turns(room)
            player = self._get_player(room, player_index)

            if Counter(card_ids) != Counter(card.id for card in player.hand):
                logger.warning(f"Room {room.id}: rejected reorder from {player.name}")
                raise_error(ATTEMPTED_CARD_INJECTION, "New hand does not match the cards held")

            by_id = {card.id: card for card in player.hand}
            player.hand = [by_id[card_id] for card_id in card_ids]
            self._mutated(room)
            return serialize_cards(player.hand)

    # ---------------------------------------------------------------- checks

    def _get_player(self, room: RoomState, player_index: int) -> Player:
        if not isinstance(player_index, int) or not 0 <= player_index < len(room.players):
            raise_error(PLAYER_NOT_FOUND, f"No player at seat {player_index}")
        return room.players[player_index]

    def _require_turn(self, room: RoomState, player_index: int, phase: Optional[str] = None) -> Player:
        player = self._get_player(room, player_index)
        if room.status != STATUS_PLAYING:
            raise_error(GAME_NOT_ACTIVE, f"Game is not in progress (status: {room.status})")
        if room.current_player != player_index:
            raise_error(WRONG_TURN, "Not your turn")
        if phase is not None and room.phase != phase:
            if phase == PHASE_DRAW:
                raise_error(WRONG_PHASE, "You must discard a card first")
            raise_error(WRONG_PHASE, "You need to draw a card first")
        return player

    @staticmethod
    def _find_card(player: Player, card_id: Optional[str], suit: Optional[str], rank: Optional[str]) -> Optional[Card]:
        for card in player.hand:
            if card_id is not None:
                if card.id == card_id:
                    return card
            elif card.suit == suit and card.rank == rank:
                return card
        return None

    # ------------------------------------------------------------ primitives

    def _take_card(self, room: RoomState, player: Player, source: str) -> Card:
        if source == SOURCE_DRAW:
            if not room.deck:
                room.deck, room.discard = reshuffle_from_discard(room.discard, self.rng)
                self._log(room, "Discard pile reshuffled into the draw pile")
            card = room.deck.pop()
        else:
            if not room.discard:
                raise_error(SOURCE_EMPTY, "Discard pile is empty")
            card = room.discard.pop()

        player.hand.append(card)
        room.phase = PHASE_DISCARD
        return card

    def _discard_card(self, room: RoomState, player: Player, card: Card):
        player.hand.remove(card)
        room.discard.append(card)
        self._log(room, f"{player.name} discarded {card.rank}{'' if card.is_joker else card.suit}")

    def _advance_turn(self, room: RoomState, started_at: float):
        """Hand the turn to the next seat, letting any bots that follow play."""
        room.current_player = (room.current_player + 1) % len(room.players)
        room.phase = PHASE_DRAW
        room.turn_deadline = started_at + self.rules.turn_timeout
        self._mutated(room)
        self._run_bot_turns(room, started_at)

    def _run_bot_turns(self, room: RoomState, started_at: float):
        turns = 0
        while room.current().is_bot and turns < self.rules.max_chained_turns:
            if not self._play_bot_turn(room):
                logger.warning(f"Room {room.id}: bot has nothing to draw, stopping bot chain")
                break
            turns += 1
            room.current_player = (room.current_player + 1) % len(room.players)
            room.phase = PHASE_DRAW
        if turns:
            self._mutated(room)
        room.turn_deadline = started_at + self.rules.turn_timeout

    def _play_bot_turn(self, room: RoomState) -> bool:
        """One draw and one discard for the current (automated) player."""
        bot_player = room.current()
        action = self.bot.choose_action(room)
        if action is None:
            return False
        self._take_card(room, bot_player, action.data["source"])

        action = self.bot.choose_action(room)
        card = self._find_card(bot_player, action.data["card_id"], None, None)
        if card is None:
            raise GameError(CARD_NOT_IN_HAND, f"Bot chose a card it does not hold: {action}")
        self._discard_card(room, bot_player, card)
        logger.debug(f"Room {room.id}: {bot_player.name} played {action}")
        return True

    def _resolve_elapsed_turns(self, room: RoomState):
        """
        Settle turns whose deadline passed before this request arrived.

        A missed draw skips the turn; a missed discard throws away the last
        card in hand. Each follow-up deadline is measured from the missed
        one, so a late poll ends in the same state as a timely one.
        """
        now = self.clock()
        room.last_activity = now
        if room.status != STATUS_PLAYING:
            return

        forced = 0
        while room.turn_deadline is not None and now > room.turn_deadline:
            if forced >= self.rules.max_chained_turns:
                room.turn_deadline = now + self.rules.turn_timeout
                break
            player = room.current()
            missed_at = room.turn_deadline
            if room.phase == PHASE_DISCARD and player.hand:
                self._discard_card(room, player, player.hand[-1])
                logger.info(f"Room {room.id}: {player.name} timed out, auto-discarded")
            else:
                self._log(room, f"{player.name} ran out of time")
                logger.info(f"Room {room.id}: {player.name} timed out, turn skipped")
            self._advance_turn(room, missed_at)
            forced += 1

    # ----------------------------------------------------------- bookkeeping

    @staticmethod
    def _mutated(room: RoomState):
        room.version += 1

    @staticmethod
    def _log(room: RoomState, message: str):
        room.game_log.append(message)
        if len(room.game_log) > GAME_LOG_LIMIT:
            del room.game_log[:-GAME_LOG_LIMIT]
