"""Bookkeeping for uploaded files (metadata only; bytes are handled by FileOpsService)."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List

from site_backend.core.errors import NotFoundError
from site_backend.domain.files import FILE_DETAILS_CODEC, DeleteDetails, FileDetails, FileSortOption
from site_backend.repositories.entity_store import EntityStore
from site_backend.repositories.persistence import build_persistence, open_store
from site_backend.services.pagination import DEFAULT_PAGINATION, Page, paginate

BASE_NAME = "file_data"


class FileDataService:
    def __init__(self, store: EntityStore[FileDetails] | None = None) -> None:
        self.store = store if store is not None else EntityStore(FILE_DETAILS_CODEC)

    @classmethod
    def open(cls, backend: str, path: str | Path) -> "FileDataService":
        persistence = build_persistence(backend, path=path, base_name=BASE_NAME)
        return cls(open_store(FILE_DETAILS_CODEC, persistence))

    @property
    def files_list(self) -> List[FileDetails]:
        return self.store.entities_list

    def add_files(self, file_details: Iterable[FileDetails]) -> List[FileDetails]:
        return self.store.add_many(file_details)

    def get_file_list(
        self,
        page: int = 1,
        pagination: int = DEFAULT_PAGINATION,
        sort_by: FileSortOption = FileSortOption.DATE_ADDED,
    ) -> Page[FileDetails]:
        if sort_by == FileSortOption.FILENAME:
            files = sorted(self.files_list, key=lambda details: details.original_filename.lower())
        else:
            files = sorted(self.files_list, key=lambda details: details.date_added, reverse=True)
        return paginate(files, page, pagination)

    def get_total_files(self) -> int:
        return len(self.store)

    def get_file_by_name(self, name: str) -> FileDetails:
        try:
            return self.store.get(name)
        except NotFoundError:
            raise NotFoundError(f"File {name} not found") from None

    def delete_files(self, names: Iterable[str]) -> Dict[str, DeleteDetails]:
        removed = self.store.delete_many(names)
        output: Dict[str, DeleteDetails] = {}
        for name, details in removed.items():
            if details is None:
                output[name] = DeleteDetails(filename=name, errors=["File does not exist in records"])
            else:
                output[name] = DeleteDetails(filename=name, file_details=details)
        return output

    def backup(self) -> None:
        self.store.backup()
