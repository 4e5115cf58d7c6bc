"""
Change feed listener.

The Functions host delivers batches through the Cosmos DB trigger; locally the
same handler is driven from a store subscription by `run_change_listener`.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from shared.database import StoreProvider
from shared.models import Entity

logger = logging.getLogger(__name__)


def handle_changes(entities: Sequence[Entity] | None) -> None:
    """Log a batch of modified entities. Errors propagate to the trigger runtime."""
    logger.info("Event from change feed...")
    if entities:
        logger.info("Documents modified %d", len(entities))
        logger.info("First document Id %s", entities[0].id)


def run_change_listener(store: StoreProvider, max_batches: int | None = None) -> int:
    """Subscribe to the store and handle its change batches. Returns the number handled."""
    if max_batches is not None and max_batches <= 0:
        return 0
    return consume_changes(store.subscribe_to_changes(), max_batches)


def consume_changes(changes: Iterable[list[Entity]], max_batches: int | None = None) -> int:
    """Feed an existing subscription into `handle_changes`."""
    handled = 0
    for batch in changes:
        handle_changes(batch)
        handled += 1
        if max_batches is not None and handled >= max_batches:
            break
    return handled
