"""Flask application factory for the local chat persistence service."""

from __future__ import annotations

import atexit
import logging

from flask import Flask, Response, jsonify
from flask_cors import CORS

from .config import AppConfig
from .logging_setup import setup_logging


LOGGER = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None) -> Flask:
    from .api import credentials as credentials_api
    from .api import messages as messages_api
    from .api import settings as settings_api
    from .api import threads as threads_api
    from .api.utils import register_error_handlers
    from .credentials import SecretStore
    from .db import ChatStateDB
    from .middleware import request_id as request_id_middleware

    config = config or AppConfig.from_env()
    config.ensure_dirs()
    setup_logging(config.logs_dir)
    config.log_summary()

    app = Flask(__name__)

    CORS(
        app,
        resources={r"/api/*": {"origins": list(config.cors_origins)}},
    )

    @app.get("/health")
    def health() -> Response:
        return jsonify({"ok": True})

    # Chat database
    # --------------------------------------------------------------------------
    state_db = ChatStateDB(config.db_path)
    atexit.register(state_db.close)

    app.config.update(
        APP_CONFIG=config,
        CHAT_STATE_DB=state_db,
        SECRET_STORE=SecretStore(config.keyring_service),
    )

    app.before_request(request_id_middleware.before_request)
    app.after_request(request_id_middleware.after_request)
    register_error_handlers(app)

    app.register_blueprint(threads_api.bp)
    app.register_blueprint(messages_api.bp)
    app.register_blueprint(settings_api.bp)
    app.register_blueprint(credentials_api.bp)

    LOGGER.info("chatstore API ready", extra={"meta": {"db_path": str(config.db_path)}})
    return app


__all__ = ["create_app"]
