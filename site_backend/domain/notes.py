from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from site_backend.domain.validation import ensure_valid, format_date, is_iso_date, is_str, parse_date, utcnow
from site_backend.repositories.entity_store import EntityCodec

_NEW_NOTE_FIELDS = {"title": is_str, "content": is_str, "author": is_str}
_NOTE_FIELDS = {"id": is_str, **_NEW_NOTE_FIELDS, "dateAdded": is_iso_date}
_NOTE_OPTIONAL = {"updateAuthor": is_str, "dateUpdated": is_iso_date}


@dataclass
class NewNote:
    title: str
    content: str
    author: str

    @classmethod
    def from_json(cls, value: Any) -> "NewNote":
        data = ensure_valid("NewNote", value, _NEW_NOTE_FIELDS)
        return cls(title=data["title"], content=data["content"], author=data["author"])


@dataclass
class Note:
    id: str
    title: str
    content: str
    author: str
    date_added: datetime
    update_author: Optional[str] = None
    date_updated: Optional[datetime] = None

    @classmethod
    def from_json(cls, value: Any) -> "Note":
        data = ensure_valid("Note", value, _NOTE_FIELDS, _NOTE_OPTIONAL)
        date_updated = data.get("dateUpdated")
        return cls(
            id=data["id"],
            title=data["title"],
            content=data["content"],
            author=data["author"],
            date_added=parse_date(data["dateAdded"]),
            update_author=data.get("updateAuthor"),
            date_updated=parse_date(date_updated) if date_updated else None,
        )

    @classmethod
    def from_new_note(cls, note_id: str, new_note: NewNote) -> "Note":
        return cls(
            id=note_id,
            title=new_note.title,
            content=new_note.content,
            author=new_note.author,
            date_added=utcnow(),
        )

    def to_json(self) -> dict:
        output = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "author": self.author,
            "dateAdded": format_date(self.date_added),
        }
        if self.update_author is not None:
            output["updateAuthor"] = self.update_author
        if self.date_updated is not None:
            output["dateUpdated"] = format_date(self.date_updated)
        return output


NOTE_CODEC = EntityCodec(name="Note", from_json=Note.from_json, to_json=Note.to_json, key_of=lambda note: note.id)
