from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One authoritative match per process
    from app.services.puck import Match
    from app.services.puck.broadcaster import SocketIOBroadcaster
    from app.services.puck.scheduler import SocketIOScheduler

    flask_app.extensions['match'] = Match(
        SocketIOBroadcaster(socketio),
        SocketIOScheduler(socketio),
        logger=flask_app.logger,
        win_score=flask_app.config.get('WIN_SCORE', 10),
        jolt_cooldown=flask_app.config.get('JOLT_COOLDOWN_SEC', 1.0),
        speed_penalty=flask_app.config.get('SPEED_PENALTY_SEC', 1.5),
    )

    from app.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from app.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    return flask_app
