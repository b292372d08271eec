import logging
import math
import threading
from typing import Dict, NamedTuple, Optional

from .entities import Player
from .registry import RoomRegistry
from .room import Room

logger = logging.getLogger(__name__)

DEFAULT_ROOM = 'arena1'
MAX_USERNAME_LENGTH = 20
DIRECTIONS = ('up', 'down', 'left', 'right')


class JoinResult(NamedTuple):
    previous_room_id: Optional[str]
    room: Room
    player: Player


class SessionGateway:
    """Binds connections (Socket.IO sids) to room memberships.

    Holds nothing but ``sid -> room_id``; simulation state lives in the
    rooms owned by the registry. Malformed intents are dropped silently.
    """

    def __init__(self, registry: RoomRegistry, default_room: str = DEFAULT_ROOM,
                 max_username_length: int = MAX_USERNAME_LENGTH):
        self.registry = registry
        self.default_room = default_room
        self.max_username_length = max_username_length
        self._sid_to_room: Dict[str, str] = {}
        self.lock = threading.Lock()

    def room_of(self, sid: str) -> Optional[str]:
        return self._sid_to_room.get(sid)

    def _current_room(self, sid: str) -> Optional[Room]:
        room_id = self._sid_to_room.get(sid)
        if room_id is None:
            return None
        return self.registry.get(room_id)

    def _clean_room_id(self, room_id) -> str:
        if isinstance(room_id, str) and room_id.strip():
            return room_id.strip()
        return self.default_room

    def _clean_username(self, sid: str, username) -> str:
        name = username.strip()[:self.max_username_length] if isinstance(username, str) else ''
        return name or f"Player {sid[:4]}"

    def on_join(self, sid: str, username, room_id) -> JoinResult:
        target_id = self._clean_room_id(room_id)
        name = self._clean_username(sid, username)

        with self.lock:
            previous_id = self._sid_to_room.pop(sid, None)
        if previous_id is not None:
            self._leave(sid, previous_id, evict=previous_id != target_id)

        room, player = self.registry.join(target_id, sid, name)
        with self.lock:
            self._sid_to_room[sid] = target_id
        logger.info(f"[join] sid={sid} name={name!r} room={target_id} previous={previous_id}")
        return JoinResult(previous_id, room, player)

    def on_move(self, sid: str, input_state) -> None:
        if not isinstance(input_state, dict):
            logger.debug(f"[ignored] playerMove sid={sid} payload={input_state!r}")
            return
        room = self._current_room(sid)
        if room is None:
            return
        room.handle_input(sid, {k: bool(input_state.get(k)) for k in DIRECTIONS})

    def on_shoot(self, sid: str, angle) -> None:
        if isinstance(angle, bool) or not isinstance(angle, (int, float)) or not math.isfinite(angle):
            logger.debug(f"[ignored] playerShoot sid={sid} payload={angle!r}")
            return
        room = self._current_room(sid)
        if room is None:
            return
        room.handle_shoot(sid, float(angle))

    def on_disconnect(self, sid: str) -> Optional[str]:
        with self.lock:
            room_id = self._sid_to_room.pop(sid, None)
        if room_id is not None:
            self._leave(sid, room_id)
        return room_id

    def _leave(self, sid: str, room_id: str, evict: bool = True) -> None:
        room = self.registry.get(room_id)
        if room is None:
            return
        room.remove_player(sid)
        logger.info(f"[leave] sid={sid} room={room_id} remaining={room.player_count}")
        if evict and room.is_empty:
            self.registry.schedule_eviction(room_id)
