"""
Utilities to centralize configuration handling for the comandas frontend.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

DEFAULT_API_BASE_URL = "http://localhost:8080/api"

INSECURE_SECRET_KEYS = {
    "",
    "change-me-please",
    "super-secret-change-me",
    "your-secret-key-here",
}


@dataclass
class AppConfig:
    """Simple container for application level settings."""

    app_name: str
    # Remote restaurant backend
    api_base_url: str
    http_timeout_seconds: float
    # App settings
    secret_key: str
    log_level: str
    restaurant_name: str
    currency_locale: str
    suggested_tip_rate: float
    debug_mode: bool
    flask_debug: bool
    dashboard_workers: int
    num_proxies: int
    cors_allowed_origins: list[str] = field(default_factory=list)


def _read_env(name: str, default: str | None = None) -> str:
    """
    Internal helper to fetch environment variables with support for defaults.
    """
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing required environment variable '{name}'")
        value = default
    return value


def read_bool(name: str, default: str = "false") -> bool:
    value = _read_env(name, default)
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_origins(name: str) -> list[str]:
    raw = _read_env(name, "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def validate_required_env_vars(skip_in_debug: bool = False) -> None:
    """
    Validate that all required environment variables are set.

    Designed to fail fast during startup rather than on the first request
    that reaches the remote backend.

    Args:
        skip_in_debug: If True, skip validation when DEBUG_MODE=true

    Raises:
        RuntimeError: If any required variable is missing or has an invalid value
    """
    if skip_in_debug and read_bool("DEBUG_MODE", "false"):
        return

    errors = []

    secret_key = os.getenv("SECRET_KEY", "")
    if secret_key in INSECURE_SECRET_KEYS:
        errors.append(
            "SECRET_KEY must be configured with a secure random value. "
            'Generate with: python3 -c "import secrets; print(secrets.token_urlsafe(32))"'
        )

    api_base_url = os.getenv("API_BASE_URL", DEFAULT_API_BASE_URL)
    parsed = urlparse(api_base_url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        errors.append(f"API_BASE_URL must be an absolute http(s) URL, got: {api_base_url}")

    timeout = os.getenv("API_TIMEOUT_SECONDS", "")
    if timeout:
        try:
            if float(timeout) <= 0:
                errors.append("API_TIMEOUT_SECONDS must be greater than zero")
        except ValueError:
            errors.append(f"API_TIMEOUT_SECONDS must be a number, got: {timeout}")

    tip_rate = os.getenv("SUGGESTED_TIP_RATE", "")
    if tip_rate:
        try:
            if not 0 <= float(tip_rate) < 1:
                errors.append("SUGGESTED_TIP_RATE must be between 0 and 1")
        except ValueError:
            errors.append(f"SUGGESTED_TIP_RATE must be a number, got: {tip_rate}")

    if errors:
        error_msg = "\n❌ Configuration Errors - Missing or invalid environment variables:\n"
        for error in errors:
            error_msg += f"  - {error}\n"
        raise RuntimeError(error_msg)


def load_config(app_name: str) -> AppConfig:
    """
    Produce an AppConfig instance populated from environment variables.

    The `app_name` is used as the root logger name so log lines from the
    web frontend and from scripts using the shared services can be told apart.
    """
    return AppConfig(
        app_name=app_name,
        api_base_url=_read_env("API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        http_timeout_seconds=float(_read_env("API_TIMEOUT_SECONDS", "10")),
        secret_key=_read_env("SECRET_KEY", "super-secret-change-me"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
        restaurant_name=_read_env("RESTAURANT_NAME", "Buen Sazón"),
        currency_locale=_read_env("CURRENCY_LOCALE", "es-CO"),
        suggested_tip_rate=float(_read_env("SUGGESTED_TIP_RATE", "0.10")),
        debug_mode=read_bool("DEBUG_MODE", "false"),
        flask_debug=read_bool("FLASK_DEBUG", "false"),
        dashboard_workers=int(_read_env("DASHBOARD_WORKERS", "4")),
        num_proxies=int(_read_env("NUM_PROXIES", "0")),
        cors_allowed_origins=_read_origins("CORS_ALLOWED_ORIGINS"),
    )
