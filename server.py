import argparse
import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import config, get_env
from rehab_server.routes import ALL_BLUEPRINTS
from rehab_server.security.authentication import AuthSecurity
from rehab_server.websocket.hub import init_websocket_hub
from rehab_server.utils.helpers import respond_success


def configure_logging():
    """Configure root logging once from LOG_LEVEL / LOG_FORMAT."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format=config.LOG_FORMAT,
        datefmt=config.LOG_DATE_FORMAT,
    )


def configure_auth_from_config():
    """Configure AuthSecurity from config (JWT_SECRET, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES)."""
    secret = config.JWT_SECRET
    if not secret:
        raise RuntimeError('JWT_SECRET is required (set the env var or security.jwt.secret in YAML)')
    AuthSecurity.configure(
        secret_key=secret,
        algorithm=config.JWT_ALGORITHM,
        access_token_expire_minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def create_app(timer_factory=None):
    """Application factory used by server.py and tests.

    Registers all blueprints, CORS and the Socket.IO hub. The SocketIO
    instance is available as app.extensions['socketio'].
    """
    configure_logging()
    configure_auth_from_config()
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = (config.MAX_UPLOAD_SIZE_MB + 1) * 1024 * 1024
    CORS(app, origins=config.CORS_ORIGINS_LIST)
    for blueprint in ALL_BLUEPRINTS:
        app.register_blueprint(blueprint)

    @app.route('/health')
    def health():
        return respond_success({'status': 'ok', 'name': config.APP_NAME, 'version': config.APP_VERSION, 'env': get_env()})

    socketio = SocketIO(app, async_mode='threading', cors_allowed_origins=config.CORS_ORIGINS_LIST)
    if timer_factory is not None:
        init_websocket_hub(app, socketio, timer_factory=timer_factory)
    else:
        init_websocket_hub(app, socketio)
    return app


def parse_args():
    """Parse simple CLI arguments for running the server."""
    parser = argparse.ArgumentParser(description='Run the rehab rentals backend server')
    parser.add_argument('--port', type=int, default=config.PORT, help='TCP port to bind (default: PORT from config)')
    parser.add_argument('--skip-indexes', action='store_true', help='Do not ensure MongoDB indexes on startup')
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    config.validate_required()
    app = create_app()
    if not args.skip_indexes:
        from rehab_server.repository.mongo_helper import MongoRepositorySingleton, ensure_indexes
        ensure_indexes(MongoRepositorySingleton.get_db())
    logging.debug(f"Effective configuration: {config.to_dict()}")
    logging.info(f"Starting {config.APP_NAME} on port {args.port}")
    app.extensions['socketio'].run(app, host="0.0.0.0", port=args.port, debug=config.DEBUG,
                                   allow_unsafe_werkzeug=True)
