from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from arena import room_channel, socketio
from arena.services.games import SessionGateway


def _gateway() -> SessionGateway:
    return current_app.extensions['arena']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect():
    current_app.logger.debug(f"[connect] sid={_get_sid()}")


def handle_disconnect(*args):
    sid = _get_sid()
    room_id = _gateway().on_disconnect(sid)
    current_app.logger.info(f"[disconnect] sid={sid} room={room_id}")


def handle_join_room(data):
    data = data if isinstance(data, dict) else {}
    sid = _get_sid()
    result = _gateway().on_join(sid, data.get('username'), data.get('roomId'))

    # Leave the previous broadcast group before joining the new one
    if result.previous_room_id is not None:
        leave_room(room_channel(result.previous_room_id))
    join_room(room_channel(result.room.room_id))

    emit('init', {
        'id': result.player.id,
        'mapWidth': result.room.map_width,
        'mapHeight': result.room.map_height,
    })


def handle_player_move(data):
    _gateway().on_move(_get_sid(), data)


def handle_player_shoot(angle):
    _gateway().on_shoot(_get_sid(), angle)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('playerMove', handle_player_move, namespace=namespace)
    socketio.on_event('playerShoot', handle_player_shoot, namespace=namespace)
