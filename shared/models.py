"""
Record model shared by the HTTP handlers, the change listener and every store provider.
"""
from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entity(BaseModel):
    """A single document in the entities container.

    `id` doubles as the partition key. Nothing beyond JSON structure is validated:
    numbers sent for `id` or `name` become strings, and a body without an `id`
    parses and is left for the store to reject.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    id: str | None = None
    name: str | None = None
    created_at: datetime | None = Field(default_factory=_utcnow, alias="createdAt")

    def to_document(self) -> dict:
        """Wire/store form: camelCase keys, ISO-8601 timestamp."""
        return self.model_dump(mode="json", by_alias=True)
