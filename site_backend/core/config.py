"""
Configuration helpers for the site backend.

Every environment variable the routers/services need is read here once, so
the rest of the code depends on a typed Settings object instead of os.environ.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

STORAGE_BACKENDS = ("memory", "file", "sql")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_path: Path
    storage_backend: str
    blog_backend: str
    database_url: str
    saved_file_path: Path
    upload_file_path: Path
    admin_username: str
    admin_password_hash: str
    session_ttl_seconds: int
    backup_interval_seconds: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _backend(value: str | None, default: str) -> str:
        candidate = (value or "").strip().lower()
        return candidate if candidate in STORAGE_BACKENDS else default

    data_path = Path(os.getenv("DATA_PATH", "data")).expanduser()
    storage_backend = _backend(os.getenv("STORAGE_BACKEND"), "file")

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_path=data_path,
        storage_backend=storage_backend,
        blog_backend=_backend(os.getenv("BLOG_BACKEND"), storage_backend),
        database_url=os.getenv("DATABASE_URL", ""),
        saved_file_path=Path(os.getenv("SAVED_FILE_PATH", str(data_path / "files"))).expanduser(),
        upload_file_path=Path(os.getenv("UPLOAD_FILE_PATH", str(data_path / "uploads"))).expanduser(),
        admin_username=os.getenv("ADMIN_USERNAME", "admin"),
        admin_password_hash=os.getenv("ADMIN_PASSWORD_HASH", ""),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400),
        backup_interval_seconds=_int(os.getenv("BACKUP_INTERVAL_SECONDS", "0"), 0),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
