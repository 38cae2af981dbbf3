from flask import Blueprint, current_app, jsonify


rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    """
    Returns the current snapshot of a room, the same payload clients get as game_state.
    """
    registry = current_app.extensions['puzzle_rooms']
    with registry.lock:
        room = registry.get_room(room_id)
        if room is None:
            return jsonify({'error': 'Room not found'}), 404
        payload = room.to_dict()
        payload['status'] = room.status
    return jsonify(payload)
