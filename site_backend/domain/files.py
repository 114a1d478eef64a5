"""
Uploaded file metadata.

`filename` is the name the file is stored under on disk (a generated uuid
plus the original extension) and is the key of the collection;
`original_filename` is what the uploader called it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from site_backend.domain.validation import (
    ensure_valid,
    format_date,
    is_bool,
    is_dict,
    is_iso_date,
    is_number,
    is_str,
    parse_date,
)
from site_backend.repositories.entity_store import EntityCodec

_FILE_FIELDS = {
    "id": is_str,
    "originalFilename": is_str,
    "filename": is_str,
    "dateAdded": is_iso_date,
    "authorId": is_str,
    "mimetype": is_str,
    "size": is_number,
    "isPrivate": is_bool,
}
_FILE_OPTIONAL = {"metadata": is_dict}


class FileSortOption(str, Enum):
    FILENAME = "filename"
    DATE_ADDED = "dateAdded"


@dataclass
class FileDetails:
    id: str
    original_filename: str
    filename: str
    date_added: datetime
    author_id: str
    mimetype: str
    size: int
    is_private: bool = True
    metadata: dict = field(default_factory=dict)

    @classmethod
    def from_json(cls, value: Any) -> "FileDetails":
        data = ensure_valid("FileDetails", value, _FILE_FIELDS, _FILE_OPTIONAL)
        return cls(
            id=data["id"],
            original_filename=data["originalFilename"],
            filename=data["filename"],
            date_added=parse_date(data["dateAdded"]),
            author_id=data["authorId"],
            mimetype=data["mimetype"],
            size=int(data["size"]),
            is_private=data["isPrivate"],
            metadata=dict(data.get("metadata") or {}),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "originalFilename": self.original_filename,
            "filename": self.filename,
            "dateAdded": format_date(self.date_added),
            "authorId": self.author_id,
            "mimetype": self.mimetype,
            "size": self.size,
            "isPrivate": self.is_private,
            "metadata": dict(self.metadata),
        }


@dataclass
class DeleteDetails:
    """Outcome of deleting one file: the removed record and/or what went wrong."""

    filename: str
    file_details: Optional[FileDetails] = None
    errors: list[str] = field(default_factory=list)

    def to_json(self) -> dict:
        return {
            "filename": self.filename,
            "fileDetails": self.file_details.to_json() if self.file_details else None,
            "errors": list(self.errors),
        }


FILE_DETAILS_CODEC = EntityCodec(
    name="FileDetails",
    from_json=FileDetails.from_json,
    to_json=FileDetails.to_json,
    key_of=lambda details: details.filename,
)
