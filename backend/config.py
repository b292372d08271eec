import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '7860'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Browser client bundle (index.html + assets), supplied at deploy time.
    # The rendering client is not part of this repo; without it / answers
    # with a JSON welcome message.
    STATIC_FOLDER = os.environ.get('STATIC_FOLDER') or os.path.join(BASE_DIR, '..', 'client')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Simulation
    TICK_RATE = int(os.environ.get('TICK_RATE', '60'))
    MAP_WIDTH = int(os.environ.get('MAP_WIDTH', '2000'))
    MAP_HEIGHT = int(os.environ.get('MAP_HEIGHT', '2000'))
    RESPAWN_DELAY_SEC = float(os.environ.get('RESPAWN_DELAY_SEC', '3.0'))
    # Rooms
    DEFAULT_ROOM = os.environ.get('DEFAULT_ROOM', 'arena1')
    MAX_USERNAME_LENGTH = int(os.environ.get('MAX_USERNAME_LENGTH', '20'))
    # Remove a room this long after its last player leaves. -1 keeps rooms forever.
    ROOM_IDLE_TIMEOUT_SEC = float(os.environ.get('ROOM_IDLE_TIMEOUT_SEC', '30'))
    # Run each room's tick loop as a Socket.IO background task
    START_TICK_LOOP = os.environ.get('START_TICK_LOOP', '1').lower() not in ('0', 'false', 'no')
