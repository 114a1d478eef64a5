from __future__ import annotations

import uuid
from dataclasses import replace
from pathlib import Path

from site_backend.domain.notes import NOTE_CODEC, NewNote, Note
from site_backend.domain.validation import utcnow
from site_backend.repositories.entity_store import EntityStore
from site_backend.repositories.persistence import build_persistence, open_store
from site_backend.services.pagination import DEFAULT_PAGINATION, Page, paginate

BASE_NAME = "notes_data"


class NotesService:
    def __init__(self, store: EntityStore[Note] | None = None) -> None:
        self.store = store if store is not None else EntityStore(NOTE_CODEC)

    @classmethod
    def open(cls, backend: str, path: str | Path) -> "NotesService":
        persistence = build_persistence(backend, path=path, base_name=BASE_NAME)
        return cls(open_store(NOTE_CODEC, persistence))

    def get_notes(self, page: int = 1, pagination: int = DEFAULT_PAGINATION) -> Page[Note]:
        notes = sorted(self.store.entities_list, key=lambda note: note.date_added, reverse=True)
        return paginate(notes, page, pagination)

    def get_by_id(self, note_id: str) -> Note:
        return self.store.get(note_id)

    def add_note(self, new_note: NewNote) -> Note:
        return self.store.add(Note.from_new_note(str(uuid.uuid4()), new_note))

    def update_note(self, updated_note: Note) -> Note:
        with self.store.lock:
            current = self.store.get(updated_note.id)
            note = replace(updated_note, date_added=current.date_added, date_updated=utcnow())
            return self.store.update(note)

    def delete_note(self, note_id: str) -> Note:
        return self.store.delete(note_id)

    def backup(self) -> None:
        self.store.backup()
