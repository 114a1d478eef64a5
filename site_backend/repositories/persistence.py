"""
Persistence strategies for EntityStore.

FilePersistence keeps a collection as one JSON array file and owns the
startup recovery protocol: unreadable files are reset, corrupt files are
quarantined into `backup/` before being reset, and individual invalid records
are dropped. SQLPersistence keeps the same snapshot as rows of the
`documents` table.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from sqlalchemy import delete, select

from site_backend.db.create_tables import create_all
from site_backend.db.models import Document, DocumentBackup
from site_backend.db.session import get_session
from site_backend.repositories.entity_store import (
    EntityCodec,
    EntityStore,
    NullPersistence,
    serialize_snapshot,
)
from site_backend.repositories.file_writer import FileServiceWriter, backup_timestamp

logger = logging.getLogger(__name__)

BACKUP_DIRNAME = "backup"


def decode_entities(codec: EntityCodec, values: Iterable[Any]) -> List[Any]:
    """Run every raw value through the codec, skipping the ones that fail validation."""
    entities = []
    for value in values:
        try:
            entities.append(codec.from_json(value))
        except (ValueError, TypeError, KeyError) as exc:
            logger.error("Invalid %s record skipped: %r (%s)", codec.name, value, exc)
    return entities


class FilePersistence:
    """Mirror a collection into `<path>/<base_name>.<ext>` through a FileServiceWriter."""

    def __init__(self, path: str | Path, writer: FileServiceWriter) -> None:
        self.path = Path(path)
        self.writer = writer

    @property
    def backup_path(self) -> Path:
        return self.path / BACKUP_DIRNAME

    def load(self, codec: EntityCodec) -> List[Any]:
        try:
            raw = self.writer.read_file(self.path)
        except OSError as exc:
            logger.error("Unable to read %s data at %s: %s", codec.name, self.path, exc)
            self.writer.clear_file(self.path)
            return []

        if len(raw) == 0:
            return []

        try:
            parsed = json.loads(raw)
        except ValueError:
            parsed = None
        if not isinstance(parsed, list):
            logger.error("Invalid %s data file at %s, writing backup and resetting", codec.name, self.path)
            self.writer.write_backup(self.backup_path, raw)
            self.writer.clear_file(self.path)
            return []

        return decode_entities(codec, parsed)

    def persist(self, snapshot: Dict[str, dict]) -> None:
        self.writer.write_to_file(self.path, serialize_snapshot(snapshot))

    def backup(self, serialized: str) -> None:
        self.writer.write_backup(self.backup_path, serialized)


class SQLPersistence:
    """Keep the snapshot as `documents` rows under one collection name."""

    def __init__(self, collection: str) -> None:
        self.collection = collection

    def load(self, codec: EntityCodec) -> List[Any]:
        create_all()
        with get_session() as session:
            stmt = select(Document.data).where(Document.collection == self.collection)
            rows = session.execute(stmt).scalars().all()
        return decode_entities(codec, rows)

    def persist(self, snapshot: Dict[str, dict]) -> None:
        with get_session() as session:
            session.execute(delete(Document).where(Document.collection == self.collection))
            session.add_all(
                Document(collection=self.collection, key=key, data=data) for key, data in snapshot.items()
            )
            session.commit()

    def backup(self, serialized: str) -> None:
        name = f"{self.collection}_backup_{backup_timestamp()}"
        with get_session() as session:
            session.add(DocumentBackup(collection=self.collection, name=name, content=serialized))
            session.commit()


def build_persistence(backend: str, *, path: str | Path, base_name: str):
    if backend == "memory":
        return NullPersistence()
    if backend == "file":
        return FilePersistence(path, FileServiceWriter(base_name, "json"))
    if backend == "sql":
        return SQLPersistence(base_name)
    raise ValueError(f"Unknown storage backend: {backend}")


def open_store(codec: EntityCodec, persistence) -> EntityStore:
    """Load the persisted collection and wrap it in a store bound to `persistence`."""
    entities = persistence.load(codec)
    logger.info("Loaded %d %s records", len(entities), codec.name)
    return EntityStore(codec, persistence, entities)
