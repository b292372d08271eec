from flask import Blueprint, current_app, jsonify

rooms = Blueprint('rooms', __name__)


def _registry():
    return current_app.extensions['arena'].registry


@rooms.route('', methods=['GET'])
def list_rooms():
    """Lists live rooms with their current occupancy."""
    return jsonify([
        {
            'room_id': room.room_id,
            'players': room.player_count,
            'bullets': len(room.bullets),
        }
        for room in _registry().rooms()
    ])


@rooms.route('/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    room = _registry().get(room_id)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    state = room.snapshot()
    state['room_id'] = room.room_id
    state['mapWidth'] = room.map_width
    state['mapHeight'] = room.map_height
    return jsonify(state)
