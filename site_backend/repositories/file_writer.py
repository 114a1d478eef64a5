"""
Low-level file access for a single JSON-backed collection.

A writer knows one logical file (base name + extension) and the directory it
lives in is passed per call, so the same writer handles the live file and its
backups. Every write truncates the target and rewrites it in full.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

EMPTY_COLLECTION = "[]"


def backup_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with milliseconds, e.g. 2024-01-02T03:04:05.678Z."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FileServiceWriter:
    """Open/read/truncate+write helpers for `<path>/<base_name>.<extension>`."""

    def __init__(self, base_name: str, extension: str = "json") -> None:
        self.base_name = base_name
        self.extension = extension.lstrip(".")

    @property
    def file_name(self) -> str:
        return f"{self.base_name}.{self.extension}"

    def file_path(self, path: str | Path) -> Path:
        return Path(path) / self.file_name

    def backup_name(self, now: datetime | None = None) -> str:
        return f"{self.base_name}_backup_{backup_timestamp(now)}.{self.extension}"

    def _ensure_file(self, file_path: Path) -> Path:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        # "a" creates the file without touching existing content
        with file_path.open("a", encoding="utf-8"):
            pass
        return file_path

    def read_file(self, path: str | Path) -> str:
        file_path = self._ensure_file(self.file_path(path))
        with file_path.open("r", encoding="utf-8") as handle:
            return handle.read()

    def _truncate_and_write(self, file_path: Path, content: str) -> None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with file_path.open("w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()

    def write_to_file(self, path: str | Path, content: str) -> None:
        """Truncate the live file and write `content`. A failure may leave it truncated."""
        self._truncate_and_write(self.file_path(path), content)

    def write_backup(self, path: str | Path, content: str, name: str | None = None) -> Path:
        target = Path(path) / (name or self.backup_name())
        self._truncate_and_write(target, content)
        return target

    def clear_file(self, path: str | Path) -> None:
        self._truncate_and_write(self.file_path(path), EMPTY_COLLECTION)
