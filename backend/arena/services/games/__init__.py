"""Game domain services: room simulation, registry and sessions.

This package contains the pure game logic that socket handlers and HTTP
routes call into, keeping transport concerns separated from core game
mechanics.
"""

from .gateway import SessionGateway
from .registry import RoomRegistry
from .room import Room

__all__ = ['Room', 'RoomRegistry', 'SessionGateway']
