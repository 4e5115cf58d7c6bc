"""
Document store interface (Protocol) for the Entities function app.

All providers must implement a store with these methods.
Methods are synchronous - FastAPI runs sync routes on its threadpool.
"""
from __future__ import annotations

from typing import Iterator, Protocol

from shared.models import Entity


class StoreError(Exception):
    """The document store failed (connectivity, throttling, unexpected response)."""


class RecordConflictError(StoreError):
    """An entity with the same id already exists."""

    def __init__(self, entity_id: str | None):
        super().__init__(f"Entity already exists: {entity_id}")
        self.entity_id = entity_id


class StoreProvider(Protocol):
    """Protocol defining the store interface for all providers."""

    def init_db(self) -> None:
        """Prepare the store for use (containers themselves are owned by infrastructure)."""
        ...

    def insert(self, entity: Entity) -> Entity:
        """Create a new entity. Raises RecordConflictError if the id is taken."""
        ...

    def get_by_id(self, entity_id: str) -> Entity | None:
        """Point read using the id as both item key and partition key."""
        ...

    def subscribe_to_changes(self) -> Iterator[list[Entity]]:
        """Start watching the container from now.

        Returns a lazy, possibly infinite iterator of change batches. It cannot
        be restarted; call again for a fresh subscription.
        """
        ...
