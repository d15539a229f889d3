from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # The engine lives on the app, not in module globals
    from poker.services.sessions import (
        Broadcaster,
        ReconnectionSupervisor,
        SessionCoordinator,
        SessionRegistry,
    )
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    supervisor = ReconnectionSupervisor(
        grace_period=float(flask_app.config.get('DISCONNECT_GRACE_SEC', 30)),
        start_task=socketio.start_background_task,
        sleep=socketio.sleep,
        logger=flask_app.logger,
    )
    flask_app.extensions['poker'] = SessionCoordinator(
        registry=SessionRegistry(id_length=int(flask_app.config.get('SESSION_ID_LENGTH', 8))),
        broadcaster=Broadcaster(socketio, namespace=namespace),
        supervisor=supervisor,
        logger=flask_app.logger,
    )

    # Import and register blueprints here
    from poker.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from poker.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    return flask_app
