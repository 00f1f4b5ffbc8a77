"""
Factory for the restaurant order-management web frontend.

The app keeps only the backend token and the user profile in the signed
session cookie; every piece of business data is read from and written to
the remote restaurant API.
"""

from __future__ import annotations

from typing import Any, Callable

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from comandas_shared.config import load_config, validate_required_env_vars
from comandas_shared.error_handlers import register_error_handlers
from comandas_shared.logging_config import configure_logging, get_logger
from comandas_shared.services.status_label_service import StatusCatalog
from comandas_web.utils.context import EXTENSION_KEY, default_api_client_factory

logger = get_logger(__name__)

DEBUG_CORS_ORIGINS = [
    "http://localhost:5000",
    "http://localhost:3000",
    "http://127.0.0.1:5000",
    "http://127.0.0.1:3000",
]


def create_app(
    config_overrides: dict[str, Any] | None = None,
    api_client_factory: Callable | None = None,
) -> Flask:
    """
    Build the Flask application.

    Args:
        config_overrides: Values applied on top of the environment config
        api_client_factory: Callable (base_url, token_provider, timeout) -> ApiClient
    """
    config_overrides = config_overrides or {}

    # Validate all required environment variables (fail-fast)
    if not config_overrides.get("TESTING"):
        validate_required_env_vars(skip_in_debug=True)

    config = load_config("comandas-web")
    configure_logging(config.app_name, config.log_level)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["APP_NAME"] = config.app_name
    app.config["API_BASE_URL"] = config.api_base_url
    app.config["API_TIMEOUT_SECONDS"] = config.http_timeout_seconds
    app.config["SUGGESTED_TIP_RATE"] = config.suggested_tip_rate
    app.config["DASHBOARD_WORKERS"] = config.dashboard_workers
    app.config["RESTAURANT_NAME"] = config.restaurant_name
    app.config["CURRENCY_LOCALE"] = config.currency_locale
    app.config["REFRESH_STATUS_CATALOG"] = True
    app.config["DEBUG_MODE"] = config.debug_mode
    app.config["DEBUG"] = config.flask_debug
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config.update(config_overrides)

    app.extensions[EXTENSION_KEY] = {
        "api_client_factory": api_client_factory or default_api_client_factory,
        "status_catalog": StatusCatalog(),
    }

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

    from comandas_web.routes.api import api_bp
    from comandas_web.routes.web import web_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(web_bp)

    allowed_origins = config.cors_allowed_origins
    if config.debug_mode or not allowed_origins:
        allowed_origins = DEBUG_CORS_ORIGINS
    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins, "supports_credentials": True}},
        supports_credentials=True,
    )

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "service": config.app_name}), 200

    logger.info(
        "Frontend ready for %s (backend %s)", config.restaurant_name, config.api_base_url
    )
    return app
