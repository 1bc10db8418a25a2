"""
Utilities to centralize configuration handling for the Reviewly API.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from cryptography.fernet import Fernet

_INSECURE_SECRETS = {
    "change-me-please",
    "super-secret-change-me",
    "your-secret-key-here",
}

_GENERATE_HINT = "Generate one with: python -c 'import secrets; print(secrets.token_hex(32))'"

# Integer settings and the smallest value each accepts
_INT_VARS = {
    "JWT_ACCESS_TOKEN_EXPIRES_HOURS": 1,
    "DUPLICATE_WINDOW_HOURS": 1,
    "NUM_PROXIES": 0,
}


@dataclass
class AppConfig:
    """Simple container for application level settings."""

    app_name: str
    # PostgreSQL database
    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str
    db_sslmode: str
    database_url: str
    # App settings
    secret_key: str
    log_level: str
    debug_mode: bool
    cors_allowed_origins: list[str]
    num_proxies: int
    # JWT settings
    jwt_access_token_expires_hours: int
    # Review submission window
    duplicate_window_hours: int

    @property
    def sqlalchemy_uri(self) -> str:
        """
        Build the SQLAlchemy URI.

        An explicit DATABASE_URL wins; otherwise a PostgreSQL URI using
        psycopg2 is assembled from the POSTGRES_* settings.
        """
        if self.database_url:
            return self.database_url
        ssl_arg = f"?sslmode={self.db_sslmode}" if self.db_sslmode else ""
        return (
            f"postgresql+psycopg2://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}{ssl_arg}"
        )


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


def _read_list(name: str) -> list[str]:
    raw = _read_env(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


def validate_required_env_vars(skip_in_debug: bool = False) -> None:
    """
    Validate that all required environment variables are set.

    Designed to fail fast during startup rather than encountering errors
    later, e.g. when the first password is hashed.

    Args:
        skip_in_debug: If True, skip validation when DEBUG_MODE=true

    Raises:
        RuntimeError: If any required variable is missing or has an invalid value
    """
    if skip_in_debug and read_bool("DEBUG_MODE", "false"):
        return

    errors = []

    secret_key = os.getenv("SECRET_KEY", "")
    if not secret_key or secret_key in _INSECURE_SECRETS:
        errors.append(f"SECRET_KEY must be a secure random value. {_GENERATE_HINT}")

    if not os.getenv("PASSWORD_HASH_SALT"):
        errors.append(f"PASSWORD_HASH_SALT must be a secure random value. {_GENERATE_HINT}")

    customer_key = os.getenv("CUSTOMER_DATA_KEY", "")
    if customer_key:
        try:
            Fernet(customer_key.encode("utf-8"))
        except ValueError:
            errors.append("CUSTOMER_DATA_KEY must be a Fernet key (Fernet.generate_key())")

    if not os.getenv("DATABASE_URL"):
        for name in ("POSTGRES_HOST", "POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB"):
            if not os.getenv(name):
                errors.append(f"{name} must be configured (or set DATABASE_URL)")

    for name, minimum in _INT_VARS.items():
        raw = os.getenv(name, "").strip()
        if raw and (not raw.isdigit() or int(raw) < minimum):
            errors.append(f"{name} must be an integer >= {minimum}, got: {raw}")

    if errors:
        details = "\n".join(f"  - {error}" for error in errors)
        raise RuntimeError(
            f"\nInvalid configuration for the Reviewly API:\n{details}\n"
            "Check your .env file or the process environment."
        )


def load_config(app_name: str) -> AppConfig:
    """
    Produce an AppConfig instance populated from environment variables.

    The `app_name` keeps logs easy to differentiate between the API process
    and one-off CLI invocations that reuse the same loader.
    """
    return AppConfig(
        app_name=app_name,
        db_host=_read_env("POSTGRES_HOST", "localhost"),
        db_port=int(_read_env("POSTGRES_PORT", "5432")),
        db_user=_read_env("POSTGRES_USER", "reviewly"),
        db_password=_read_env("POSTGRES_PASSWORD", "reviewly"),
        db_name=_read_env("POSTGRES_DB", "reviewly"),
        db_sslmode=_read_env("POSTGRES_SSLMODE", "disable"),
        database_url=_read_env("DATABASE_URL", ""),
        secret_key=_read_env("SECRET_KEY", "super-secret-change-me"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
        debug_mode=read_bool("DEBUG_MODE", "false"),
        cors_allowed_origins=_read_list("CORS_ALLOWED_ORIGINS"),
        num_proxies=int(_read_env("NUM_PROXIES", "0")),
        # Tokens live for a week unless overridden
        jwt_access_token_expires_hours=int(_read_env("JWT_ACCESS_TOKEN_EXPIRES_HOURS", "168")),
        duplicate_window_hours=int(_read_env("DUPLICATE_WINDOW_HOURS", "24")),
    )
