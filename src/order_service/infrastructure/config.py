"""Runtime configuration, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from order_service.domain.exceptions import DomainException

CHECK_MODES = ("per-item", "bulk")

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./orders.db"
DEFAULT_INVENTORY_URL = "http://localhost:8000/api/inventory"


class ConfigError(DomainException):
    """An environment variable holds a value we cannot use."""


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on", "enabled"):
        return True
    if value in ("0", "false", "no", "off", "disabled"):
        return False
    raise ConfigError(f"{name} must be enabled/disabled (or true/false), got {raw!r}")


def _parse_number(name: str, raw: str, kind):
    try:
        value = kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a {kind.__name__}, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    app_env: str = "development"
    database_url: str = DEFAULT_DATABASE_URL
    inventory_url: str = DEFAULT_INVENTORY_URL
    inventory_timeout_seconds: float = 5.0
    inventory_check_mode: str = "per-item"
    inventory_check_on_create: bool = True
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        app_env = env.get("APP_ENV", "development")
        check_mode = env.get("INVENTORY_CHECK_MODE", "per-item").strip().lower()
        if check_mode not in CHECK_MODES:
            raise ConfigError(
                f"INVENTORY_CHECK_MODE must be one of {', '.join(CHECK_MODES)}, "
                f"got {check_mode!r}"
            )

        return Settings(
            host=env.get("HOST", "0.0.0.0"),
            port=_parse_number("PORT", env.get("PORT", "3000"), int),
            app_env=app_env,
            database_url=env.get("DATABASE_URL", DEFAULT_DATABASE_URL),
            inventory_url=env.get("INVENTORY_SERVICE_URL", DEFAULT_INVENTORY_URL).rstrip("/"),
            inventory_timeout_seconds=_parse_number(
                "INVENTORY_TIMEOUT_SECONDS", env.get("INVENTORY_TIMEOUT_SECONDS", "5"), float
            ),
            inventory_check_mode=check_mode,
            inventory_check_on_create=_parse_bool(
                "INVENTORY_CHECK_ON_CREATE", env.get("INVENTORY_CHECK_ON_CREATE", "enabled")
            ),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_json=_parse_bool(
                "LOG_JSON", env.get("LOG_JSON", "false" if app_env == "development" else "true")
            ),
        )
