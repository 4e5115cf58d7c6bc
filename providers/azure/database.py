"""
Document store using Azure Cosmos DB (Azure provider).
Implements the StoreProvider interface from shared.database.

Container layout:
    Database:      entities_db  (Settings.database_name)
    Container:     entities     (Settings.container_name)
    Partition key: /id

The database, container and the change feed lease container are created by
infrastructure, never by this code.
"""
from __future__ import annotations

import logging
import time
from typing import Iterator

from azure.core.exceptions import AzureError
from azure.cosmos import CosmosClient
from azure.cosmos.exceptions import (
    CosmosHttpResponseError,
    CosmosResourceExistsError,
    CosmosResourceNotFoundError,
)

from shared.database import RecordConflictError, StoreError
from shared.models import Entity

logger = logging.getLogger(__name__)


class CosmosStore:
    """Cosmos DB (NoSQL API) store for entities."""

    def __init__(
        self,
        connection_string: str | None = None,
        database_name: str = "entities_db",
        container_name: str = "entities",
        container=None,
        poll_interval: float = 1.0,
    ):
        self._connection_string = connection_string
        self._database_name = database_name
        self._container_name = container_name
        self._container = container
        self._poll_interval = poll_interval

    @classmethod
    def from_settings(cls, settings) -> "CosmosStore":
        from providers.azure.config import get_connection_string

        return cls(
            connection_string=get_connection_string(settings),
            database_name=settings.database_name,
            container_name=settings.container_name,
            poll_interval=settings.change_feed_poll_seconds,
        )

    @property
    def container(self):
        """Lazy-init the container client."""
        if self._container is None:
            if not self._connection_string:
                raise StoreError("Cosmos DB connection string not configured")
            client = CosmosClient.from_connection_string(self._connection_string)
            database = client.get_database_client(self._database_name)
            self._container = database.get_container_client(self._container_name)
            logger.info("Cosmos DB client initialized for %s/%s",
                        self._database_name, self._container_name)
        return self._container

    def init_db(self) -> None:
        """Initialize store - no-op for Cosmos DB (container created by infrastructure)."""
        logger.info("Cosmos DB init - container %s/%s ready",
                    self._database_name, self._container_name)

    def insert(self, entity: Entity) -> Entity:
        try:
            created = self.container.create_item(body=entity.to_document())
        except CosmosResourceExistsError as e:
            raise RecordConflictError(entity.id) from e
        except CosmosHttpResponseError as e:
            raise StoreError(f"Cosmos DB create_item failed with status {e.status_code}") from e
        except AzureError as e:
            raise StoreError(f"Cosmos DB create_item failed: {type(e).__name__}") from e
        return Entity.model_validate(created) if created else entity

    def get_by_id(self, entity_id: str) -> Entity | None:
        try:
            item = self.container.read_item(item=entity_id, partition_key=entity_id)
        except CosmosResourceNotFoundError:
            return None
        except CosmosHttpResponseError as e:
            raise StoreError(f"Cosmos DB read_item failed with status {e.status_code}") from e
        except AzureError as e:
            raise StoreError(f"Cosmos DB read_item failed: {type(e).__name__}") from e
        return Entity.model_validate(item)

    def subscribe_to_changes(self) -> Iterator[list[Entity]]:
        """Poll the container change feed, starting from now.

        Progress is only held in memory (the continuation etag), so a new
        subscription never replays what an earlier one delivered.
        """
        return self._poll_change_feed()

    def _poll_change_feed(self) -> Iterator[list[Entity]]:
        continuation = None
        while True:
            # The client's last_response_headers are shared with concurrent
            # item operations; take the etag from this query's own responses.
            feed_headers: dict = {}

            def capture_headers(headers, *_):
                feed_headers.update(headers or {})

            try:
                if continuation is None:
                    feed = self.container.query_items_change_feed(
                        is_start_from_beginning=False, response_hook=capture_headers)
                else:
                    feed = self.container.query_items_change_feed(
                        continuation=continuation, response_hook=capture_headers)
                docs = list(feed)
                continuation = feed_headers.get('etag', continuation)
            except CosmosHttpResponseError as e:
                raise StoreError(f"Cosmos DB change feed failed with status {e.status_code}") from e
            except AzureError as e:
                raise StoreError(f"Cosmos DB change feed failed: {type(e).__name__}") from e

            if docs:
                yield [Entity.model_validate(doc) for doc in docs]
            else:
                time.sleep(self._poll_interval)
