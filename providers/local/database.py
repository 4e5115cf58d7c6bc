"""
In-process document store (local provider).
Implements the StoreProvider interface from shared.database.

Used for local development and tests. Items are kept as serialized documents,
the way Cosmos DB stores them, and every insert is published as a one-item
change batch to each active subscription.
"""
from __future__ import annotations

import logging
import queue
import threading
from typing import Iterator

from shared.database import RecordConflictError, StoreError
from shared.models import Entity

logger = logging.getLogger(__name__)


class MemoryStore:
    """Thread-safe dict-backed store keyed by entity id."""

    def __init__(self):
        # Reentrant: a dropped subscription may unsubscribe from __del__ while held.
        self._lock = threading.RLock()
        self._items: dict[str, dict] = {}
        self._subscribers: list[queue.Queue] = []

    def init_db(self) -> None:
        logger.info("Memory store ready (%d items)", len(self._items))

    def insert(self, entity: Entity) -> Entity:
        if not entity.id:
            # Cosmos DB rejects items without an id; mirror that here.
            raise StoreError("Entity id is required by the store")
        document = entity.to_document()
        with self._lock:
            if entity.id in self._items:
                raise RecordConflictError(entity.id)
            self._items[entity.id] = document
            subscribers = list(self._subscribers)
        stored = Entity.model_validate(document)
        for subscriber in subscribers:
            subscriber.put([stored])
        return stored

    def get_by_id(self, entity_id: str) -> Entity | None:
        with self._lock:
            document = self._items.get(entity_id)
        if document is None:
            return None
        return Entity.model_validate(document)

    def subscribe_to_changes(self) -> Iterator[list[Entity]]:
        """Register a subscription now; batches are delivered in insert order."""
        changes: queue.Queue = queue.Queue()
        with self._lock:
            self._subscribers.append(changes)
        return _Subscription(self, changes)

    def _unsubscribe(self, changes: queue.Queue) -> None:
        with self._lock:
            if changes in self._subscribers:
                self._subscribers.remove(changes)


class _Subscription:
    """Blocking iterator over one subscriber queue.

    The queue stays registered until `close()` is called or the subscription
    is garbage collected, whether or not it was ever iterated.
    """

    def __init__(self, store: MemoryStore, changes: queue.Queue):
        self._store = store
        self._changes = changes
        self._closed = False

    def __iter__(self):
        return self

    def __next__(self) -> list[Entity]:
        if self._closed:
            raise StopIteration
        return self._changes.get()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._store._unsubscribe(self._changes)

    def __del__(self):
        self.close()
