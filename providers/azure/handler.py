"""
Azure Functions handler for the Entities function app.

This is the entry point for the Azure Functions Python v2 programming model
(loaded through the root `function_app.py`). It serves the shared FastAPI app
through an ASGI function and registers the Cosmos DB change feed trigger.
"""
import logging

import azure.functions as func

from providers.azure.config import get_settings
from shared.changefeed import handle_changes
from shared.models import Entity

logger = logging.getLogger(__name__)

# Trigger bindings are declared at import time, so their names come from
# the environment as it is when the host loads this module.
_binding_settings = get_settings()


# =============================================================================
# Lazy initialization for cold start optimization
# =============================================================================

_initialized = False


def _ensure_initialized():
    """Lazy-initialize the store provider on first request."""
    global _initialized
    if _initialized:
        return

    from shared.app import registry
    from providers.azure.database import CosmosStore

    logger.info("Initializing Azure providers...")
    settings = get_settings()
    store = CosmosStore.from_settings(settings)
    store.init_db()

    registry.configure(store=store)
    _initialized = True
    logger.info("Azure providers initialized")


def entities_from_documents(documents) -> list[Entity]:
    """Convert a trigger DocumentList into entities (empty for a missing batch)."""
    if not documents:
        return []
    return [Entity.model_validate(dict(doc)) for doc in documents]


# Import the shared app
from shared.app import app as fastapi_app


class _InitializingApp:
    """ASGI wrapper that runs provider initialization before the first HTTP request."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            _ensure_initialized()
        await self.app(scope, receive, send)


app = func.AsgiFunctionApp(app=_InitializingApp(fastapi_app), http_auth_level=func.AuthLevel.ANONYMOUS)


@app.function_name(name="CosmosDBTrigger")
@app.cosmos_db_trigger(
    arg_name="documents",
    connection=_binding_settings.connection_setting,
    database_name=_binding_settings.database_name,
    container_name=_binding_settings.container_name,
    lease_container_name=_binding_settings.lease_container_name,
    create_lease_container_if_not_exists=False,
)
def change_listener(documents: func.DocumentList) -> None:
    handle_changes(entities_from_documents(documents))
