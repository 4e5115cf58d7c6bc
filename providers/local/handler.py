"""
Local development handler for the Entities function app.

Serves the shared FastAPI app backed by the in-memory store and runs the
change listener on a background thread, standing in for the Cosmos DB trigger:

    uvicorn providers.local.handler:app --port 7071
"""
import logging
import threading
from functools import lru_cache

from shared.app import app, registry
from shared.changefeed import consume_changes
from shared.config import Settings
from providers.local.database import MemoryStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def _init() -> MemoryStore:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = MemoryStore()
    store.init_db()
    registry.configure(store=store)

    # Subscribe before any request can insert, so no change is missed.
    listener = threading.Thread(
        target=consume_changes,
        args=(store.subscribe_to_changes(),),
        name="change-listener",
        daemon=True,
    )
    listener.start()
    logger.info("Local providers initialized")
    return store


store = _init()

__all__ = ["app", "store"]
