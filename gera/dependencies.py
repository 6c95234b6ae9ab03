"""
FastAPI dependencies for the card routes.

Routes never reach module state directly; they declare what they need and
FastAPI injects it. Tests override these with app.dependency_overrides.

  get_pass_template — the signed pass template, built once per process
  get_pass_store    — the configured PassStore backend
  get_http_client   — shared outbound client for thumbnail downloads
"""

from collections.abc import AsyncIterator
from functools import lru_cache

import httpx
from fastapi import Request

from gera.config import settings
from gera.database import AsyncSessionLocal
from gera.passkit import PassTemplate
from gera.services.pass_service import build_template
from gera.services.pass_store import DatabasePassStore, InMemoryPassStore, PassStore


@lru_cache
def get_pass_template() -> PassTemplate:
    """Load template images and signing credentials on first use."""
    return build_template(settings)


@lru_cache
def get_memory_store() -> InMemoryPassStore:
    """The process-wide in-memory store (one instance per process)."""
    return InMemoryPassStore(capacity=settings.PASS_STORE_CAPACITY)


async def get_pass_store() -> AsyncIterator[PassStore]:
    """
    Provide the pass store selected by PASS_STORE_BACKEND.

    The database backend gets a session per request, closed when the
    request completes.
    """
    if settings.PASS_STORE_BACKEND == "database":
        async with AsyncSessionLocal() as session:
            yield DatabasePassStore(session)
    else:
        yield get_memory_store()


def get_http_client(request: Request) -> httpx.AsyncClient:
    """The client opened by the application lifespan (see gera.main)."""
    return request.app.state.http_client
