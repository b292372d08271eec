import math
import uuid
from dataclasses import dataclass
from typing import Tuple

PLAYER_RADIUS = 20
PLAYER_SPEED = 5
MAX_HEALTH = 100

BULLET_SPEED = 15
BULLET_DAMAGE = 10
BULLET_MAX_DISTANCE = 1000
# Approximate bullet radius, used for the spawn offset and the hit test
BULLET_RADIUS = 5


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


def normalize(dx: float, dy: float) -> Tuple[float, float]:
    """Scale (dx, dy) to unit length. The zero vector is returned unchanged."""
    length = math.hypot(dx, dy)
    if not length:
        return 0.0, 0.0
    return dx / length, dy / length


def distance(a, b) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


@dataclass
class Player:
    id: str
    username: str
    x: float
    y: float
    color: str
    health: int = MAX_HEALTH
    score: int = 0
    radius: int = PLAYER_RADIUS
    speed: int = PLAYER_SPEED

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'x': self.x,
            'y': self.y,
            'health': self.health,
            'score': self.score,
            'color': self.color,
            'radius': self.radius,
            'speed': self.speed,
        }


@dataclass
class Bullet:
    owner_id: str
    x: float
    y: float
    angle: float
    id: str = ''
    speed: int = BULLET_SPEED
    damage: int = BULLET_DAMAGE
    distance_traveled: float = 0
    max_distance: int = BULLET_MAX_DISTANCE

    def __post_init__(self):
        if not self.id:
            self.id = uuid.uuid4().hex[:9]

    def advance(self) -> None:
        self.x += math.cos(self.angle) * self.speed
        self.y += math.sin(self.angle) * self.speed
        self.distance_traveled += self.speed

    @property
    def spent(self) -> bool:
        return self.distance_traveled > self.max_distance

    def to_dict(self):
        return {
            'id': self.id,
            'ownerId': self.owner_id,
            'x': self.x,
            'y': self.y,
            'angle': self.angle,
            'speed': self.speed,
            'damage': self.damage,
            'distanceTraveled': self.distance_traveled,
            'maxDistance': self.max_distance,
        }
