import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from .entities import Player
from .room import Broadcast, Room

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Registry that lazily instantiates rooms on demand.

    The task runner (``start_background_task`` / ``sleep``) is injected so
    the registry works on top of Socket.IO's async mode in production and
    with plain synchronous fakes in tests.

    Idle eviction policy (``idle_timeout`` seconds after a room empties):
    - ``< 0`` keeps rooms forever
    - ``0`` removes an empty room immediately
    - ``> 0`` removes it after the delay unless someone joined meanwhile
    """

    def __init__(
        self,
        broadcast_factory: Callable[[str], Broadcast],
        start_background_task: Optional[Callable] = None,
        sleep: Optional[Callable[[float], None]] = None,
        room_settings: Optional[Dict[str, Any]] = None,
        idle_timeout: float = -1,
        start_loops: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self.broadcast_factory = broadcast_factory
        self.start_background_task = start_background_task
        self.sleep = sleep or time.sleep
        self.room_settings = dict(room_settings or {})
        self.idle_timeout = idle_timeout
        self.start_loops = start_loops and start_background_task is not None
        self.clock = clock
        self._rooms: Dict[str, Room] = {}
        self._evict_deadline: Dict[str, float] = {}
        self.lock = threading.RLock()

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def rooms(self) -> List[Room]:
        with self.lock:
            return list(self._rooms.values())

    def get_or_create(self, room_id: str) -> Room:
        with self.lock:
            return self._lookup(room_id)

    def join(self, room_id: str, player_id: str, username: str) -> Tuple[Room, Player]:
        """Resolve the room and add the player in one step.

        Holding the registry lock across both keeps an eviction from
        removing the room between lookup and insertion.
        """
        with self.lock:
            room = self._lookup(room_id)
            player = room.add_player(player_id, username)
        return room, player

    def _lookup(self, room_id: str) -> Room:
        self._evict_deadline.pop(room_id, None)
        room = self._rooms.get(room_id)
        if room:
            return room
        room = Room(room_id, self.broadcast_factory(room_id), **self.room_settings)
        self._rooms[room_id] = room
        logger.info(f"[room-create] room={room_id}")
        if self.start_loops:
            room.start(self.start_background_task, self.sleep)
        return room

    def remove(self, room_id: str) -> None:
        with self.lock:
            room = self._rooms.pop(room_id, None)
            self._evict_deadline.pop(room_id, None)
        if room:
            room.stop()
            logger.info(f"[room-remove] room={room_id}")

    def shutdown(self) -> None:
        for room_id in list(self._rooms):
            self.remove(room_id)

    # ---- Idle eviction ----

    def schedule_eviction(self, room_id: str) -> None:
        if self.idle_timeout < 0:
            return
        with self.lock:
            room = self._rooms.get(room_id)
            if not room or not room.is_empty:
                return
            if self.idle_timeout == 0:
                self.remove(room_id)
                return
            deadline = self.clock() + self.idle_timeout
            self._evict_deadline[room_id] = deadline

        if self.start_background_task is None:
            self._evict_runner(room_id, deadline)
        else:
            self.start_background_task(self._evict_runner, room_id, deadline)

    def _evict_runner(self, room_id: str, deadline: float) -> None:
        sleep_for = max(0.0, deadline - self.clock())
        if sleep_for:
            self.sleep(sleep_for)
        with self.lock:
            room = self._rooms.get(room_id)
            if self._evict_deadline.get(room_id) != deadline or not room or not room.is_empty:
                return
            logger.info(f"[room-evict] room={room_id} idle_timeout={self.idle_timeout}s")
            self.remove(room_id)
