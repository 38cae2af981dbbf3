from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, supports_credentials=True, origins=origins)

    socketio.init_app(
        flask_app,
        cors_allowed_origins=origins,
        ping_timeout=flask_app.config.get('SOCKETIO_PING_TIMEOUT', 30),
        ping_interval=flask_app.config.get('SOCKETIO_PING_INTERVAL', 25),
    )

    # Room state lives for the lifetime of this app object only
    from puzzle_room.registry import RoomRegistry
    from puzzle_room.services.puzzle.cleanup import RoomCleanupScheduler
    registry = RoomRegistry()
    cleanup = RoomCleanupScheduler(
        registry,
        delay_sec=float(flask_app.config.get('ROOM_CLEANUP_DELAY_SEC', 60)),
        logger=flask_app.logger,
    )
    flask_app.extensions['puzzle_rooms'] = registry
    flask_app.extensions['puzzle_cleanup'] = cleanup

    from puzzle_room.routes import main
    flask_app.register_blueprint(main)

    from puzzle_room.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from puzzle_room.socketio_events import register_socketio_handlers
    register_socketio_handlers(
        registry,
        cleanup,
        namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'),
        default_difficulty=flask_app.config.get('DEFAULT_DIFFICULTY', 'medium'),
    )

    return flask_app
