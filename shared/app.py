"""
Core FastAPI application for the Entities function app.

This module defines all API routes. It is cloud-provider agnostic.
Provider-specific implementations (the document store) are registered
via the `registry` before the app starts handling requests.
"""
from fastapi import FastAPI, Depends, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from contextlib import asynccontextmanager
import logging
import os
import time

from shared.database import RecordConflictError, StoreError
from shared.models import Entity

logger = logging.getLogger(__name__)


# =============================================================================
# Provider Registry
# =============================================================================
# Providers (Azure, local) register their implementations here before
# the app starts handling requests. This avoids importing provider-specific
# code in the shared layer.

class _ProviderRegistry:
    """Registry for provider-specific implementations."""

    def __init__(self):
        self._store = None  # object implementing StoreProvider

    def configure(self, store=None):
        """Register provider implementations. Only sets non-None values."""
        if store is not None:
            self._store = store

    def reset(self):
        self._store = None

    @property
    def store(self):
        if self._store is None:
            raise RuntimeError("Store provider not configured")
        return self._store


registry = _ProviderRegistry()


# Convenience accessors used by routes
def get_store():
    return registry.store


# =============================================================================
# App Configuration
# =============================================================================

# CORS config
ALLOWED_ORIGIN = os.environ.get('ALLOWED_ORIGIN', '*')


# =============================================================================
# FastAPI App
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler - store init handled by provider."""
    yield


app = FastAPI(
    title="Entities",
    description="Insert and fetch entities in a document store",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[ALLOWED_ORIGIN] if ALLOWED_ORIGIN != "*" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    logger.debug("REQUEST START - %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        duration = time.time() - start_time
        logger.info("REQUEST END - %s %s - Status: %d - Duration: %.2fs",
                    request.method, request.url.path, response.status_code, duration)
        return response
    except Exception as e:
        duration = time.time() - start_time
        logger.error("REQUEST ERROR - %s %s - Error: %s: %s - Duration: %.2fs",
                     request.method, request.url.path, type(e).__name__, e, duration)
        raise


# =============================================================================
# Error Mapping
# =============================================================================
# Store and unexpected failures are mapped here so that no SDK message
# reaches the caller.

@app.exception_handler(RecordConflictError)
async def record_conflict_handler(request: Request, exc: RecordConflictError):
    logger.warning("Conflict on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": "Entity already exists"})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": "Document store unavailable"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# =============================================================================
# Entity Endpoints
# =============================================================================

@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.post("/api/entities")
async def insert_entity(request: Request, store=Depends(get_store)):
    """Parse the raw body as an Entity and insert it."""
    body = (await request.body()).decode("utf-8", errors="replace")
    try:
        entity = Entity.model_validate_json(body)
    except ValidationError as e:
        logger.info("Rejected entity body: %d error(s)", e.error_count())
        return JSONResponse(status_code=400, content={"detail": "Malformed entity body"})

    stored = await run_in_threadpool(store.insert, entity)
    logger.info("Inserted entity %s", stored.id)
    return JSONResponse(status_code=200, content=stored.to_document())


@app.get("/api/entities/{entity_id}")
def get_entity(entity_id: str, store=Depends(get_store)):
    entity = store.get_by_id(entity_id)
    if entity is None:
        return Response(status_code=404)
    return JSONResponse(status_code=200, content=entity.to_document())
