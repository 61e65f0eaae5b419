from __future__ import annotations

import logging
from flask import Flask, g, jsonify
from werkzeug.exceptions import HTTPException

from bakeryshop.app.config import Config
from bakeryshop.app.extensions import STORE_KEY, db, migrate, cors
from bakeryshop.app.common.errors import ApiError, error_payload
from bakeryshop.app.common.request_context import echo_request_id, init_request_id
from bakeryshop.app.common.tokens import init_token_codec
from bakeryshop.app.api.register import register_api_blueprints
from bakeryshop.app.cli import cli_bp
from bakeryshop.store.base import OrderStatus, Store

logger = logging.getLogger(__name__)


def init_store(app: Flask) -> Store:
    backend = app.config.get("STORE_BACKEND", "sql")
    if backend == "memory":
        from bakeryshop.store.memory import MemoryStore

        store: Store = MemoryStore()
    elif backend == "sql":
        from bakeryshop.store.sql import SqlStore

        store = SqlStore(db)
        if app.config.get("AUTO_CREATE_TABLES"):
            with app.app_context():
                db.create_all()
    else:
        raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")

    app.extensions[STORE_KEY] = store
    logger.info("Using %s store", backend)
    return store


def create_app(config_object: type[Config] = Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    # fail at startup rather than on the first order
    OrderStatus(app.config["ORDER_INITIAL_STATUS"])

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}},
        supports_credentials=True,
    )

    init_store(app)
    init_token_codec(app)

    @app.before_request
    def _before_request():
        init_request_id()

    app.after_request(echo_request_id)

    # Health endpoint
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    register_api_blueprints(app)

    # CLI (flask init-db / seed / set-role)
    app.register_blueprint(cli_bp)

    # Error handlers
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return jsonify(err.to_dict(getattr(g, "request_id", None))), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        # Normalize Werkzeug errors into our JSON shape
        payload = error_payload(
            "http_error",
            err.description or err.name,
            {"name": err.name},
            getattr(g, "request_id", None),
        )
        return jsonify(payload), err.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled exception")
        payload = error_payload("internal_error", "Internal server error", None, getattr(g, "request_id", None))
        return jsonify(payload), 500

    return app
