"""
Generic keyed collection shared by every domain service.

The in-memory mapping is the source of truth at runtime. Each mutation
updates the mapping first and then hands a snapshot of the WHOLE collection
to the persistence strategy. If persisting fails the error propagates and the
in-memory change stays applied: memory and storage may diverge until the next
successful write.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Protocol, TypeVar

from site_backend.core.errors import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class EntityCodec(Generic[T]):
    """How one entity type is validated, serialized and keyed."""

    name: str
    from_json: Callable[[Any], T]
    to_json: Callable[[T], dict]
    key_of: Callable[[T], str]


class Persistence(Protocol):
    def load(self, codec: EntityCodec) -> list: ...

    def persist(self, snapshot: Dict[str, dict]) -> None: ...

    def backup(self, serialized: str) -> None: ...


class NullPersistence:
    """Memory-only variant: nothing is loaded, persisted or backed up."""

    def load(self, codec: EntityCodec) -> list:
        return []

    def persist(self, snapshot: Dict[str, dict]) -> None:
        return None

    def backup(self, serialized: str) -> None:
        return None


def serialize_snapshot(snapshot: Dict[str, dict]) -> str:
    return json.dumps(list(snapshot.values()), ensure_ascii=False)


class EntityStore(Generic[T]):
    """Authoritative `key -> entity` mapping with write-through persistence."""

    def __init__(
        self,
        codec: EntityCodec[T],
        persistence: Optional[Persistence] = None,
        entities: Iterable[T] = (),
    ) -> None:
        self.codec = codec
        self.persistence = persistence or NullPersistence()
        self._entities: Dict[str, T] = {codec.key_of(entity): entity for entity in entities}
        # mutate + persist must not interleave across worker threads
        self.lock = threading.RLock()

    # ------------------------------ reads ------------------------------
    @property
    def entities(self) -> Dict[str, T]:
        return dict(self._entities)

    @property
    def entities_list(self) -> List[T]:
        return list(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)

    def contains(self, key: str) -> bool:
        return key in self._entities

    def get(self, key: str) -> T:
        entity = self._entities.get(key)
        if entity is None:
            raise NotFoundError(f"{self.codec.name} {key} does not exist")
        return entity

    def snapshot(self) -> Dict[str, dict]:
        return {key: self.codec.to_json(entity) for key, entity in self._entities.items()}

    def serialize(self) -> str:
        return serialize_snapshot(self.snapshot())

    # ---------------------------- mutations ----------------------------
    def add(self, entity: T) -> T:
        with self.lock:
            self._entities[self.codec.key_of(entity)] = entity
            self._persist()
        return entity

    def add_many(self, entities: Iterable[T]) -> List[T]:
        added = list(entities)
        with self.lock:
            for entity in added:
                self._entities[self.codec.key_of(entity)] = entity
            self._persist()
        return added

    def update(self, entity: T, old_key: Optional[str] = None) -> T:
        """Replace the entity stored under `old_key` (default: the entity's own key)."""
        new_key = self.codec.key_of(entity)
        lookup = old_key if old_key is not None else new_key
        with self.lock:
            if lookup not in self._entities:
                raise NotFoundError(f"{self.codec.name} {lookup} does not exist")
            if lookup != new_key:
                del self._entities[lookup]
            self._entities[new_key] = entity
            self._persist()
        return entity

    def delete(self, key: str) -> T:
        with self.lock:
            entity = self._entities.get(key)
            if entity is None:
                raise NotFoundError(f"{self.codec.name} {key} does not exist")
            del self._entities[key]
            self._persist()
        return entity

    def delete_many(self, keys: Iterable[str]) -> Dict[str, Optional[T]]:
        """Remove every existing key; missing keys map to None. One write for the batch.

        Repeated keys are handled once.
        """
        removed: Dict[str, Optional[T]] = {}
        with self.lock:
            for key in dict.fromkeys(keys):
                removed[key] = self._entities.pop(key, None)
            if any(entity is not None for entity in removed.values()):
                self._persist()
        return removed

    def _persist(self) -> None:
        self.persistence.persist(self.snapshot())

    def backup(self) -> None:
        with self.lock:
            serialized = self.serialize()
        self.persistence.backup(serialized)
        logger.info("Backed up %s collection (%d entries)", self.codec.name, len(self._entities))
