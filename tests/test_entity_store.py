from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# make the site_backend package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from site_backend.core.errors import NotFoundError  # noqa: E402
from site_backend.domain.notes import NOTE_CODEC, Note  # noqa: E402
from site_backend.domain.validation import parse_date  # noqa: E402
from site_backend.repositories.entity_store import EntityStore, NullPersistence  # noqa: E402


def _note(note_id: str, title: str = "title") -> Note:
    return Note(
        id=note_id,
        title=title,
        content="content",
        author="author",
        date_added=parse_date("2024-01-01T00:00:00.000Z"),
    )


class ListPersistence(NullPersistence):
    def __init__(self):
        self.snapshots = []

    def persist(self, snapshot):
        self.snapshots.append(snapshot)


def test_memory_store_crud():
    store = EntityStore(NOTE_CODEC)
    store.add(_note("a"))
    store.add(_note("b"))

    store.update(_note("a", title="new title"))
    removed = store.delete("b")

    assert removed.id == "b"
    assert store.get("a").title == "new title"
    assert [note.id for note in store.entities_list] == ["a"]


def test_entities_getter_returns_a_copy():
    store = EntityStore(NOTE_CODEC, entities=[_note("a")])

    copy = store.entities
    copy.pop("a")

    assert store.contains("a")


def test_update_and_delete_missing_key_raise_not_found():
    persistence = ListPersistence()
    store = EntityStore(NOTE_CODEC, persistence)

    with pytest.raises(NotFoundError):
        store.update(_note("missing"))
    with pytest.raises(NotFoundError):
        store.delete("missing")
    with pytest.raises(NotFoundError):
        store.get("missing")
    assert persistence.snapshots == []


def test_update_can_rekey_an_entity():
    store = EntityStore(NOTE_CODEC, entities=[_note("old")])

    store.update(_note("new"), old_key="old")

    assert not store.contains("old")
    assert store.contains("new")


def test_every_mutation_persists_the_full_snapshot():
    persistence = ListPersistence()
    store = EntityStore(NOTE_CODEC, persistence, [_note("a")])

    store.add(_note("b"))
    store.delete("a")

    assert [sorted(snapshot) for snapshot in persistence.snapshots] == [["a", "b"], ["b"]]


def test_delete_many_reports_missing_keys_and_writes_once():
    persistence = ListPersistence()
    store = EntityStore(NOTE_CODEC, persistence, [_note("a"), _note("b")])

    removed = store.delete_many(["a", "zzz"])

    assert removed["a"].id == "a"
    assert removed["zzz"] is None
    assert len(persistence.snapshots) == 1


def test_delete_many_with_repeated_key_keeps_removed_entity():
    store = EntityStore(NOTE_CODEC, entities=[_note("a")])

    removed = store.delete_many(["a", "a"])

    assert list(removed) == ["a"]
    assert removed["a"].id == "a"
    assert len(store) == 0


def test_serialize_is_a_json_array():
    store = EntityStore(NOTE_CODEC, entities=[_note("a")])

    assert json.loads(store.serialize()) == [_note("a").to_json()]
    assert json.loads(EntityStore(NOTE_CODEC).serialize()) == []
