import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

from arena.services.games import RoomRegistry, SessionGateway

socketio = SocketIO(cors_allowed_origins="*", async_mode=None)


def room_channel(room_id: str) -> str:
    """Socket.IO room that carries broadcasts for one arena."""
    return f"arena:{room_id}"


def _room_broadcaster(namespace: str):
    def factory(room_id: str):
        channel = room_channel(room_id)

        def broadcast(event, payload):
            socketio.emit(event, payload, to=channel, namespace=namespace)

        return broadcast

    return factory


def create_app(config_class=Config):
    flask_app = Flask(__name__, static_folder=config_class.STATIC_FOLDER, static_url_path='')
    flask_app.config.from_object(config_class)
    logging.getLogger(flask_app.name).setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    CORS(flask_app)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins="*")

    cfg = flask_app.config
    namespace = cfg.get('SOCKETIO_NAMESPACE', '/')
    registry = RoomRegistry(
        broadcast_factory=_room_broadcaster(namespace),
        start_background_task=socketio.start_background_task,
        sleep=socketio.sleep,
        room_settings={
            'map_width': cfg['MAP_WIDTH'],
            'map_height': cfg['MAP_HEIGHT'],
            'tick_rate': cfg['TICK_RATE'],
            'respawn_delay': cfg['RESPAWN_DELAY_SEC'],
        },
        idle_timeout=cfg['ROOM_IDLE_TIMEOUT_SEC'],
        start_loops=cfg.get('START_TICK_LOOP', True),
    )
    flask_app.extensions['arena'] = SessionGateway(
        registry,
        default_room=cfg['DEFAULT_ROOM'],
        max_username_length=cfg['MAX_USERNAME_LENGTH'],
    )

    from arena.main import main
    flask_app.register_blueprint(main)

    from arena.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers on the shared socketio instance
    from arena.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    flask_app.logger.info(
        f"[startup] tick_rate={cfg['TICK_RATE']} map={cfg['MAP_WIDTH']}x{cfg['MAP_HEIGHT']} "
        f"idle_timeout={cfg['ROOM_IDLE_TIMEOUT_SEC']}s"
    )
    return flask_app
