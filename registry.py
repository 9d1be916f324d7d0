import logging
from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator, List, Optional

from models import Room

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Rooms by session id.

    ``_lock`` guards the table only. Each room carries its own lock, taken via
    ``session()``; a room lock may be held while taking ``_lock`` but never the
    other way round.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = Lock()

    def __len__(self):
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id):
        with self._lock:
            return room_id in self._rooms

    def resolve(self, room_id: str) -> Room:
        with self._lock:
            if room_id not in self._rooms:
                self._rooms[room_id] = Room(room_id)
                logger.info(f"Created new room: {room_id}")
            return self._rooms[room_id]

    def get(self, room_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_id)

    def remove(self, room_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.pop(room_id, None)

    def reap(self, room: Room) -> bool:
        """Drop ``room`` if nobody is seated. Call with the room lock held."""
        if not room.is_empty():
            return False
        with self._lock:
            if self._rooms.get(room.room_id) is not room:
                return False
            del self._rooms[room.room_id]
        logger.info(f"Removed empty room: {room.room_id}")
        return True

    def _is_registered(self, room: Room) -> bool:
        with self._lock:
            return self._rooms.get(room.room_id) is room

    @contextmanager
    def session(self, room_id: str, create: bool = True) -> Iterator[Optional[Room]]:
        """Yield the room for ``room_id`` with its lock held.

        Yields None when ``create`` is False and the room does not exist.
        """
        while True:
            room = self.resolve(room_id) if create else self.get(room_id)
            if room is None:
                yield None
                return
            with room.lock:
                # reaped between lookup and lock; look it up again
                if not self._is_registered(room):
                    continue
                yield room
                return

    def rooms_with(self, sid: str) -> List[Room]:
        with self._lock:
            rooms = list(self._rooms.values())
        return [room for room in rooms if sid in room.players]

