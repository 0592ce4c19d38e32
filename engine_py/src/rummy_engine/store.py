"""
In-memory room store with per-room locking and idle eviction.
"""

import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .errors import ROOM_ALREADY_EXISTS, ROOM_NOT_FOUND, raise_error
from .models import RoomState

logger = logging.getLogger(__name__)


class RoomStore:
    """
    Owns every live room and the lock that serializes access to it.

    Rooms are independent: holding one room's lock never blocks another room.
    """

    def __init__(self):
        self.rooms: Dict[str, RoomState] = {}
        self.room_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self.rooms

    def new_room_id(self) -> str:
        while True:
            room_id = str(uuid.uuid4())[:8].upper()
            if room_id not in self.rooms:
                return room_id

    def create(self, room_id: Optional[str] = None, now: float = 0.0) -> RoomState:
        with self._lock:
            room_id = room_id or self.new_room_id()
            if room_id in self.rooms:
                raise_error(ROOM_ALREADY_EXISTS, f"Room {room_id} already exists")
            room = RoomState(id=room_id, created_at=now, last_activity=now)
            self.rooms[room_id] = room
            self.room_locks[room_id] = threading.Lock()
            return room

    def get(self, room_id: str) -> RoomState:
        room = self.rooms.get(room_id)
        if room is None:
            raise_error(ROOM_NOT_FOUND, f"Room {room_id} not found")
        return room

    @contextmanager
    def locked(self, room_id: str) -> Iterator[RoomState]:
        """Hold the room's lock for the duration of the block."""
        lock = self.room_locks.get(room_id)
        if lock is None:
            raise_error(ROOM_NOT_FOUND, f"Room {room_id} not found")
        with lock:
            # The room may have been evicted while we waited
            yield self.get(room_id)

    def evict(self, room_id: str) -> bool:
        with self._lock:
            self.room_locks.pop(room_id, None)
            return self.rooms.pop(room_id, None) is not None

    def evict_idle(self, now: float, max_idle: float) -> List[str]:
        """Drop rooms nobody has touched for max_idle seconds."""
        with self._lock:
            stale = [
                room_id for room_id, room in self.rooms.items()
                if now - room.last_activity > max_idle
            ]
        for room_id in stale:
            self.evict(room_id)
        if stale:
            logger.info(f"Evicted {len(stale)} idle room(s): {', '.join(stale)}")
        return stale
