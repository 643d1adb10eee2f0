"""
Configuration helpers for the to-do backend.

Routers, the CLI and the REPL read settings from here instead of fetching
os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    items_file: str
    queue_size: int
    host: str
    port: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    queue_size = _int(os.getenv("TODO_QUEUE_SIZE"), 128)
    return Settings(
        app_env=(os.getenv("TODO_ENV") or "dev").lower(),
        items_file=os.getenv("TODO_ITEMS_FILE") or "items.json",
        queue_size=queue_size if queue_size > 0 else 128,
        host=os.getenv("TODO_HOST", "127.0.0.1"),
        port=_int(os.getenv("TODO_PORT"), 8080),
        log_level=(os.getenv("TODO_LOG_LEVEL") or "INFO").upper(),
    )
