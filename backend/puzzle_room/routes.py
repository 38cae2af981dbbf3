from flask import Blueprint, current_app, jsonify

from puzzle_room.models import isoformat, utcnow

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({
        'message': 'Puzzle Game Socket.IO server is running',
        'environment': current_app.config.get('ENVIRONMENT', 'development'),
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
    })

@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'timestamp': isoformat(utcnow())})
