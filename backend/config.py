import os


def _origins(raw):
    origins = [o.strip() for o in (raw or '').split(',') if o.strip()]
    if not origins or '*' in origins:
        return '*'
    return origins


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    ENVIRONMENT = os.environ.get('FLASK_ENV') or os.environ.get('NODE_ENV') or 'development'
    APP_VERSION = os.environ.get('APP_VERSION', '1.0.0')
    # Comma-separated list of allowed client origins; '*' allows any
    CORS_ORIGINS = _origins(os.environ.get('CLIENT_URL', '*'))
    # Socket.IO transport
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    SOCKETIO_PING_TIMEOUT = int(os.environ.get('SOCKETIO_PING_TIMEOUT', '30'))
    SOCKETIO_PING_INTERVAL = int(os.environ.get('SOCKETIO_PING_INTERVAL', '25'))
    # Grace period before an empty room is deleted (seconds)
    ROOM_CLEANUP_DELAY_SEC = float(os.environ.get('ROOM_CLEANUP_DELAY_SEC', '60'))
    # Difficulty used for rooms created by a join
    DEFAULT_DIFFICULTY = os.environ.get('DEFAULT_DIFFICULTY', 'medium')
    PORT = int(os.environ.get('PORT', '3001'))
