import logging
import math
import random
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from .encoding import FullStateEncoder
from .entities import (
    BULLET_RADIUS,
    MAX_HEALTH,
    PLAYER_RADIUS,
    Bullet,
    Player,
    clamp,
    distance,
    normalize,
)
from .scheduler import EventQueue

logger = logging.getLogger(__name__)

MAP_WIDTH = 2000
MAP_HEIGHT = 2000
TICK_RATE = 60
RESPAWN_DELAY_SEC = 3.0
UNKNOWN_KILLER = 'Unknown'

Broadcast = Callable[[str, Dict[str, Any]], None]


class Room:
    """Authoritative simulation of one arena.

    The room knows nothing about the transport: everything it has to tell
    clients goes through ``broadcast(event, payload)``. All state access is
    serialized by ``self.lock``; events produced while the lock is held are
    buffered and handed to ``broadcast`` after it is released, in order.
    """

    def __init__(
        self,
        room_id: str,
        broadcast: Broadcast,
        map_width: int = MAP_WIDTH,
        map_height: int = MAP_HEIGHT,
        tick_rate: int = TICK_RATE,
        respawn_delay: float = RESPAWN_DELAY_SEC,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
        encoder=None,
    ):
        self.room_id = room_id
        self.broadcast = broadcast
        self.map_width = map_width
        self.map_height = map_height
        self.tick_interval = 1.0 / tick_rate
        self.respawn_delay = respawn_delay
        self.clock = clock
        self.random = rng or random.Random()
        self.encoder = encoder or FullStateEncoder()

        self.players: Dict[str, Player] = {}
        self.bullets: List[Bullet] = []
        self.events = EventQueue()
        self.lock = threading.RLock()
        self.tick = 0

        self._outbox: List[Tuple[str, Dict[str, Any]]] = []
        self._running = False

    # ---- Membership ----

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_empty(self) -> bool:
        return not self.players

    def add_player(self, player_id: str, username: str) -> Player:
        with self.lock:
            x, y = self._random_position()
            player = Player(
                id=player_id,
                username=username,
                x=x,
                y=y,
                color=f"hsl({self.random.randrange(360)}, 70%, 50%)",
            )
            self.players[player_id] = player
            return player

    def remove_player(self, player_id: str) -> None:
        with self.lock:
            if self.players.pop(player_id, None) is not None:
                self.events.cancel_target(player_id)

    def _random_position(self) -> Tuple[float, float]:
        r = PLAYER_RADIUS
        return (
            self.random.uniform(r, self.map_width - r),
            self.random.uniform(r, self.map_height - r),
        )

    # ---- Intents ----

    def handle_input(self, player_id: str, input_state) -> None:
        with self.lock:
            player = self.players.get(player_id)
            if not player or not player.is_alive:
                return

            dx = (1 if input_state.get('right') else 0) - (1 if input_state.get('left') else 0)
            dy = (1 if input_state.get('down') else 0) - (1 if input_state.get('up') else 0)
            if dx == 0 and dy == 0:
                return

            ux, uy = normalize(dx, dy)
            player.x = clamp(player.x + ux * player.speed, player.radius, self.map_width - player.radius)
            player.y = clamp(player.y + uy * player.speed, player.radius, self.map_height - player.radius)

    def handle_shoot(self, player_id: str, angle: float) -> Optional[Bullet]:
        with self.lock:
            player = self.players.get(player_id)
            if not player or not player.is_alive:
                return None

            offset = player.radius + BULLET_RADIUS
            bullet = Bullet(
                owner_id=player_id,
                x=player.x + math.cos(angle) * offset,
                y=player.y + math.sin(angle) * offset,
                angle=angle,
            )
            self.bullets.append(bullet)
            return bullet

    # ---- Tick ----

    def update(self) -> None:
        """Advance the simulation by one tick and broadcast the full state."""
        with self.lock:
            self.tick += 1
            self._fire_due_events()

            removed = set()
            for bullet in self.bullets:
                bullet.advance()
                if bullet.spent or self._out_of_bounds(bullet):
                    removed.add(bullet.id)
                    continue

                victim = self._find_target(bullet)
                if victim is not None:
                    self._apply_hit(victim.id, bullet.owner_id, bullet.damage)
                    removed.add(bullet.id)

            if removed:
                self.bullets = [b for b in self.bullets if b.id not in removed]

            self._outbox.append(('gameStateUpdate', self.encoder.encode(self.players, self.bullets)))
        self._flush()

    def _out_of_bounds(self, bullet: Bullet) -> bool:
        return not (0 <= bullet.x <= self.map_width and 0 <= bullet.y <= self.map_height)

    def _find_target(self, bullet: Bullet) -> Optional[Player]:
        # Nearest qualifying player wins; exact ties go to the lowest id
        best = None
        best_key = None
        for pid, player in self.players.items():
            if pid == bullet.owner_id or not player.is_alive:
                continue
            dist = distance(player, bullet)
            if dist >= player.radius + BULLET_RADIUS:
                continue
            key = (dist, pid)
            if best_key is None or key < best_key:
                best, best_key = player, key
        return best

    # ---- Combat ----

    def handle_hit(self, victim_id: str, attacker_id: str, damage: int) -> None:
        with self.lock:
            self._apply_hit(victim_id, attacker_id, damage)
        self._flush()

    def handle_kill(self, victim_id: str, attacker_id: str) -> None:
        with self.lock:
            self._resolve_kill(victim_id, attacker_id)
        self._flush()

    def _apply_hit(self, victim_id: str, attacker_id: str, damage: int) -> None:
        victim = self.players.get(victim_id)
        if not victim or not victim.is_alive or damage <= 0:
            return

        victim.health = clamp(victim.health - damage, 0, MAX_HEALTH)
        self._outbox.append(('playerHit', {'id': victim_id, 'damage': damage}))

        if victim.health == 0:
            self._resolve_kill(victim_id, attacker_id)

    def _resolve_kill(self, victim_id: str, attacker_id: str) -> None:
        victim = self.players.get(victim_id)
        if not victim:
            return
        attacker = self.players.get(attacker_id)
        if attacker:
            attacker.score += 1

        self._outbox.append(('playerKilled', {
            'victimName': victim.username,
            'killerName': attacker.username if attacker else UNKNOWN_KILLER,
        }))
        logger.info(
            f"[kill] room={self.room_id} victim={victim_id} attacker={attacker_id if attacker else None}"
        )
        self.events.schedule('respawn', victim_id, self.clock() + self.respawn_delay)

    def _fire_due_events(self) -> None:
        for event in self.events.pop_due(self.clock()):
            if event.kind == 'respawn':
                self._respawn(event.target)

    def _respawn(self, player_id: str) -> None:
        player = self.players.get(player_id)
        if not player:
            return
        player.health = MAX_HEALTH
        player.x, player.y = self._random_position()

    # ---- Output ----

    def snapshot(self) -> Dict[str, Any]:
        with self.lock:
            return self.encoder.encode(self.players, self.bullets)

    def _flush(self) -> None:
        with self.lock:
            outgoing, self._outbox = self._outbox, []
        for event, payload in outgoing:
            self.broadcast(event, payload)

    # ---- Lifecycle ----

    @property
    def running(self) -> bool:
        return self._running

    def start(self, start_background_task, sleep) -> None:
        """Start the recurring tick loop on the given task runner (idempotent)."""
        with self.lock:
            if self._running:
                return
            self._running = True
        start_background_task(self._run_loop, sleep)

    def stop(self) -> None:
        with self.lock:
            self._running = False
            self.events.clear()

    def _run_loop(self, sleep) -> None:
        next_tick = self.clock() + self.tick_interval
        while self._running:
            sleep(max(0.0, next_tick - self.clock()))
            if not self._running:
                break
            # Missed ticks are dropped, not replayed in a burst
            next_tick = max(next_tick + self.tick_interval, self.clock())
            try:
                self.update()
            except Exception:
                logger.exception(f"[tick-error] room={self.room_id} tick={self.tick}")
