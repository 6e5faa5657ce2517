"""
Configuration helpers for the User API.

Exposes a Settings object that reads environment variables (storage path,
bind address, log level, OTLP collector endpoint) so that routers/services do
not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_DATA_PATH = "./data/users.json"
DEFAULT_PORT = 8080


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_path: str
    host: str
    port: int
    log_level: str
    otel_endpoint: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_path=os.getenv("DATA_PATH") or DEFAULT_DATA_PATH,
        host=os.getenv("HOST") or "0.0.0.0",
        port=_int(os.getenv("PORT", str(DEFAULT_PORT)), DEFAULT_PORT),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        otel_endpoint=(os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or "").strip(),
    )
