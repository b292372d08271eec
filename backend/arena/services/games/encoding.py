from typing import Any, Dict, Iterable, Mapping

from .entities import Bullet, Player


class FullStateEncoder:
    """Encode the complete room state for every gameStateUpdate.

    Rooms only depend on ``encode(players, bullets)``, so a delta encoder
    can be swapped in without touching the simulation.
    """

    def encode(self, players: Mapping[str, Player], bullets: Iterable[Bullet]) -> Dict[str, Any]:
        return {
            'players': {pid: p.to_dict() for pid, p in players.items()},
            'bullets': [b.to_dict() for b in bullets],
        }
