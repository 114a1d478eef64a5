"""Builds every service from Settings; the app keeps the result on `app.state`."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Tuple

from site_backend.core.config import Settings
from site_backend.services.auth_service import AuthService
from site_backend.services.blog_service import BlogService
from site_backend.services.file_data_service import FileDataService
from site_backend.services.file_ops_service import FileOpsService
from site_backend.services.notes_service import NotesService
from site_backend.services.vice_bank_service import ViceBankService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    auth: AuthService
    blog: BlogService
    notes: NotesService
    file_data: FileDataService
    file_ops: FileOpsService
    vice_bank: ViceBankService

    def backupables(self) -> List[Tuple[str, Callable[[], None]]]:
        return [
            ("blog", self.blog.backup),
            ("notes", self.notes.backup),
            ("files", self.file_data.backup),
            ("vice_bank", self.vice_bank.backup),
        ]

    def backup_all(self) -> List[str]:
        """Back up every module; returns the names that failed. Failures are logged, not raised."""
        failed = []
        for name, backup in self.backupables():
            try:
                backup()
            except Exception:
                logger.exception("Backup of %s failed", name)
                failed.append(name)
        return failed


def build_services(settings: Settings) -> Services:
    root = settings.data_path
    backend = settings.storage_backend
    file_data = FileDataService.open(backend, root / "file_data")
    return Services(
        auth=AuthService(settings),
        blog=BlogService.open(settings.blog_backend, root / "blog"),
        notes=NotesService.open(backend, root / "notes"),
        file_data=file_data,
        file_ops=FileOpsService(settings.saved_file_path, settings.upload_file_path, file_data),
        vice_bank=ViceBankService.open(backend, root / "vice_bank"),
    )
