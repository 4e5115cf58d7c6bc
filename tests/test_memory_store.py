"""Tests for the in-process store used by the local provider."""
import gc

import pytest

from shared.database import RecordConflictError, StoreError
from shared.models import Entity
from providers.local.database import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


def test_insert_then_get(store):
    store.insert(Entity(id="a1", name="widget"))

    fetched = store.get_by_id("a1")
    assert fetched.id == "a1"
    assert fetched.name == "widget"


def test_get_missing_returns_none(store):
    assert store.get_by_id("nope") is None


def test_duplicate_insert_conflicts(store):
    store.insert(Entity(id="a1"))
    with pytest.raises(RecordConflictError) as exc_info:
        store.insert(Entity(id="a1", name="second"))
    assert exc_info.value.entity_id == "a1"
    assert store.get_by_id("a1").name is None


def test_insert_without_id_fails(store):
    with pytest.raises(StoreError):
        store.insert(Entity(name="nameless"))


def test_subscription_receives_inserts_in_order(store):
    changes = store.subscribe_to_changes()
    store.insert(Entity(id="a1"))
    store.insert(Entity(id="b2"))

    assert [e.id for e in next(changes)] == ["a1"]
    assert [e.id for e in next(changes)] == ["b2"]


def test_subscription_starts_from_now(store):
    store.insert(Entity(id="before"))
    changes = store.subscribe_to_changes()
    store.insert(Entity(id="after"))

    assert [e.id for e in next(changes)] == ["after"]


def test_closed_subscription_is_removed(store):
    changes = store.subscribe_to_changes()
    store.insert(Entity(id="a1"))
    next(changes)
    changes.close()

    store.insert(Entity(id="b2"))
    assert store._subscribers == []


def test_dropped_subscription_is_unregistered(store):
    changes = store.subscribe_to_changes()
    del changes
    gc.collect()

    for entity_id in ("a1", "b2", "c3"):
        store.insert(Entity(id=entity_id))
    assert store._subscribers == []


def test_unstarted_subscription_close_unregisters(store):
    changes = store.subscribe_to_changes()
    changes.close()

    store.insert(Entity(id="a1"))
    assert store._subscribers == []
    assert list(changes) == []
