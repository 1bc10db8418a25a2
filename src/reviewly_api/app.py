"""
Factory for the Reviewly Flask API.

Uses JWT bearer tokens for authentication; no server-side sessions.
"""

from __future__ import annotations

import atexit

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from reviewly.config import AppConfig, load_config, validate_required_env_vars
from reviewly.db import Database, init_app
from reviewly.error_handlers import register_error_handlers
from reviewly.jwt_middleware import init_jwt_middleware
from reviewly.logging_config import configure_logging, get_logger
from reviewly.security_middleware import configure_security_headers

logger = get_logger(__name__)

DEV_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def create_app(config: AppConfig | None = None, database: Database | None = None) -> Flask:
    """
    Build the Flask application that serves the review API.

    Args:
        config: Settings to use; loaded from the environment when omitted
        database: Database handle to use; built from ``config`` when omitted
    """
    if config is None:
        load_dotenv()
        # Validate all required environment variables (fail-fast)
        validate_required_env_vars(skip_in_debug=True)
        config = load_config("reviewly-api")

    configure_logging(config.app_name, config.log_level)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["APP_NAME"] = config.app_name
    app.config["DEBUG_MODE"] = config.debug_mode
    app.config["JWT_ACCESS_TOKEN_EXPIRES_HOURS"] = config.jwt_access_token_expires_hours
    app.config["DUPLICATE_WINDOW_HOURS"] = config.duplicate_window_hours

    # Initialize the database before any request can reach it
    if database is None:
        database = Database(config.sqlalchemy_uri)
        atexit.register(database.dispose)
    database.create_all()
    init_app(app, database)

    init_jwt_middleware(app)
    configure_security_headers(app)
    register_error_handlers(app)

    # ProxyFix: Trust X-Forwarded-* headers from reverse proxy
    if config.num_proxies > 0:
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=config.num_proxies,
            x_proto=config.num_proxies,
            x_host=config.num_proxies,
            x_port=config.num_proxies,
        )

    # Configure CORS with secure defaults
    allowed_origins = config.cors_allowed_origins
    if config.debug_mode or not allowed_origins:
        allowed_origins = allowed_origins + DEV_CORS_ORIGINS
    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins}},
        supports_credentials=True,
    )

    from reviewly_api.cli import register_commands
    from reviewly_api.routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    register_commands(app)

    logger.info(f"{config.app_name} ready (debug={config.debug_mode})")
    return app
