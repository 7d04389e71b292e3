"""
Utilities to centralize configuration handling for the bistro service.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from bistro_shared.constants import ReportPolicy

NOTIFIER_BACKENDS = {"redis", "none"}
INSECURE_SECRETS = {
    "change-me-please",
    "your-super-secret-jwt-key-change-this-in-production",
    "your-secret-key",
}


@dataclass
class AppConfig:
    """Simple container for application level settings."""

    app_name: str
    database_url: str
    jwt_secret: str
    app_env: str = "production"
    log_level: str = "INFO"
    jwt_expires_days: int = 7
    # Realtime
    notifier_backend: str = "none"
    redis_url: str = "redis://localhost:6379/0"
    redis_events_channel: str = "bistro:events"
    poll_interval_seconds: int = 5
    # Behaviour switches
    report_revenue_policy: str = ReportPolicy.PAID.value
    report_timezone: str = "UTC"
    strict_order_transitions: bool = False
    staff_endpoints_require_auth: bool = False
    # Uploads
    upload_folder: str = "uploads"
    max_upload_mb: int = 5

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    @property
    def push_enabled(self) -> bool:
        return self.notifier_backend == "redis"


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


def _read_int(name: str, default: str) -> int:
    raw = _read_env(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a valid integer, got: {raw}") from exc


def _jwt_secret_from_env() -> str:
    return os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY") or ""


def validate_required_env_vars() -> None:
    """
    Validate that all required environment variables are set.

    Fails fast during startup rather than on the first request.

    Raises:
        RuntimeError: If any required variable is missing or has an invalid value
    """
    errors = []

    if not os.getenv("DATABASE_URL", "").strip():
        errors.append("DATABASE_URL must be configured (database connection string)")

    secret = _jwt_secret_from_env()
    if not secret or secret in INSECURE_SECRETS:
        errors.append(
            "JWT_SECRET must be configured with a secure random value. "
            'Generate with: python3 -c "import secrets; print(secrets.token_urlsafe(32))"'
        )

    backend = os.getenv("NOTIFIER_BACKEND", "none").strip().lower()
    if backend not in NOTIFIER_BACKENDS:
        errors.append(
            f"NOTIFIER_BACKEND must be one of {', '.join(sorted(NOTIFIER_BACKENDS))}, got: {backend}"
        )

    policy = os.getenv("REPORT_REVENUE_POLICY", ReportPolicy.PAID.value).strip().lower()
    if policy not in {p.value for p in ReportPolicy}:
        errors.append(f"REPORT_REVENUE_POLICY must be 'paid' or 'all', got: {policy}")

    expires = os.getenv("JWT_EXPIRES_DAYS", "")
    if expires:
        try:
            if int(expires) < 1:
                errors.append("JWT_EXPIRES_DAYS must be at least 1")
        except ValueError:
            errors.append(f"JWT_EXPIRES_DAYS must be a valid integer, got: {expires}")

    if errors:
        error_msg = "\nConfiguration errors - missing or invalid environment variables:\n"
        for error in errors:
            error_msg += f"  - {error}\n"
        raise RuntimeError(error_msg)


def load_config(app_name: str) -> AppConfig:
    """
    Produce an AppConfig instance populated from environment variables.

    The `app_name` is used to tag log records.
    """
    return AppConfig(
        app_name=app_name,
        database_url=_read_env("DATABASE_URL"),
        jwt_secret=_jwt_secret_from_env(),
        app_env=_read_env("APP_ENV", "production"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
        jwt_expires_days=_read_int("JWT_EXPIRES_DAYS", "7"),
        notifier_backend=_read_env("NOTIFIER_BACKEND", "none").strip().lower(),
        redis_url=_read_env("REDIS_URL", "redis://localhost:6379/0"),
        redis_events_channel=_read_env("REDIS_EVENTS_CHANNEL", "bistro:events"),
        poll_interval_seconds=_read_int("POLL_INTERVAL_SECONDS", "5"),
        report_revenue_policy=_read_env("REPORT_REVENUE_POLICY", "paid").strip().lower(),
        report_timezone=_read_env("REPORT_TIMEZONE", "UTC"),
        strict_order_transitions=read_bool("STRICT_ORDER_TRANSITIONS", "false"),
        staff_endpoints_require_auth=read_bool("STAFF_ENDPOINTS_REQUIRE_AUTH", "false"),
        upload_folder=_read_env("UPLOAD_FOLDER", "uploads"),
        max_upload_mb=_read_int("MAX_UPLOAD_MB", "5"),
    )
