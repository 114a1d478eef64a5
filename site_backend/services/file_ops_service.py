"""
Upload workflow: stage incoming bytes, move them into the saved-file
directory and register their metadata. A failure at any step rolls back the
filesystem writes made so far and re-raises.
"""

from __future__ import annotations

import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, List, Tuple

from site_backend.domain.files import DeleteDetails, FileDetails
from site_backend.domain.validation import utcnow
from site_backend.services.file_data_service import FileDataService

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """A file already written to the upload (staging) directory."""

    filepath: Path
    original_filename: str
    mimetype: str
    size: int
    is_private: bool = True


@dataclass
class NewFileDetails:
    filepath: Path
    file_details: FileDetails


class FileOpsService:
    def __init__(self, saved_file_path: str | Path, upload_file_path: str | Path, file_service: FileDataService) -> None:
        self.saved_file_path = Path(saved_file_path)
        self.upload_file_path = Path(upload_file_path)
        self.file_service = file_service

    def stage_upload(self, stream: BinaryIO, original_filename: str, mimetype: str, *, is_private: bool = True) -> UploadedFile:
        self.upload_file_path.mkdir(parents=True, exist_ok=True)
        target = self.upload_file_path / f"upload_{uuid.uuid4().hex}"
        try:
            with target.open("wb") as handle:
                shutil.copyfileobj(stream, handle)
        except Exception:
            target.unlink(missing_ok=True)
            raise
        return UploadedFile(
            filepath=target,
            original_filename=Path(original_filename or "upload").name,
            mimetype=mimetype or "application/octet-stream",
            size=target.stat().st_size,
            is_private=is_private,
        )

    def stage_uploads(self, incoming: Iterable[Tuple[BinaryIO, str, str]], *, is_private: bool = True) -> List[UploadedFile]:
        """Stage every `(stream, filename, mimetype)`; a failure removes what was already staged."""
        staged: List[UploadedFile] = []
        try:
            for stream, original_filename, mimetype in incoming:
                staged.append(self.stage_upload(stream, original_filename, mimetype, is_private=is_private))
        except Exception:
            self.roll_back_fs_writes([], staged)
            raise
        return staged

    def saved_path(self, filename: str) -> Path:
        return self.saved_file_path / filename

    def save_uploaded_files(self, uploads: List[UploadedFile], user_id: str) -> List[FileDetails]:
        """Main entry point for uploads."""
        new_files: List[NewFileDetails] = []
        try:
            new_files = self.make_new_file_details(uploads, user_id)
            self.save_files_to_file_system(new_files)
            return self.file_service.add_files(nf.file_details for nf in new_files)
        except Exception:
            self.roll_back_fs_writes(new_files, uploads)
            raise

    def make_new_file_details(self, uploads: Iterable[UploadedFile], user_id: str) -> List[NewFileDetails]:
        output = []
        for upload in uploads:
            file_id = str(uuid.uuid4())
            details = FileDetails(
                id=file_id,
                original_filename=upload.original_filename,
                filename=f"{file_id}{Path(upload.original_filename).suffix.lower()}",
                date_added=utcnow(),
                author_id=user_id,
                mimetype=upload.mimetype,
                size=upload.size,
                is_private=upload.is_private,
            )
            output.append(NewFileDetails(filepath=upload.filepath, file_details=details))
        return output

    def save_files_to_file_system(self, new_files: Iterable[NewFileDetails]) -> None:
        self.saved_file_path.mkdir(parents=True, exist_ok=True)
        for new_file in new_files:
            shutil.move(str(new_file.filepath), str(self.saved_path(new_file.file_details.filename)))

    def roll_back_fs_writes(self, new_files: Iterable[NewFileDetails], uploads: Iterable[UploadedFile]) -> None:
        targets = [self.saved_path(nf.file_details.filename) for nf in new_files]
        targets.extend(upload.filepath for upload in uploads)
        errors = []
        for target in targets:
            try:
                target.unlink(missing_ok=True)
            except OSError as exc:
                errors.append(f"Unable to delete {target}: {exc}")
        if errors:
            logger.error("Rollback of uploaded files incomplete: %s", errors)
            raise OSError(f"Unable to delete files: {errors}")

    def delete_files(self, names: Iterable[str]) -> Dict[str, DeleteDetails]:
        results = self.file_service.delete_files(names)
        for name, result in results.items():
            if result.file_details is None:
                continue
            try:
                self.saved_path(name).unlink()
            except FileNotFoundError:
                result.errors.append("File does not exist on disk")
            except OSError as exc:
                logger.error("Unable to delete %s: %s", name, exc)
                result.errors.append(f"Unable to delete file: {exc}")
        return results
