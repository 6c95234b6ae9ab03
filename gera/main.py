"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Logging — stdlib logging configured once from LOG_LEVEL
  2. Lifespan manager — template warm-up, optional DB tables, outbound HTTP client
  3. Exception handlers — maps domain errors to the 400 error envelope
  4. Router registration — mounts the card routes under /card

Running locally:
    uvicorn gera.main:app --reload

or, with the port taken from PORT:
    gera-api
"""

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI

from gera.config import settings
from gera.database import engine, Base
from gera.dependencies import get_pass_template
from gera.exceptions import register_exception_handlers
from gera.routers import cards

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
      Builds the pass template (fails fast on bad signing credentials),
      creates the issued_passes table when the database store is selected,
      and opens the shared client used for thumbnail downloads.

    Shutdown:
      Closes the HTTP client and disposes of the database engine.
    """
    # --- Startup ---
    get_pass_template()
    if settings.PASS_STORE_BACKEND == "database":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    app.state.http_client = httpx.AsyncClient(follow_redirects=True)
    logger.info("Serving wallet passes with the %s pass store", settings.PASS_STORE_BACKEND)
    yield
    # --- Shutdown ---
    await app.state.http_client.aclose()
    await engine.dispose()


# Create the FastAPI application instance
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Wallet pass generator for boleto, PicPay, Nubank and bank transfer cards",
    lifespan=lifespan,
    # "/card" is not redirected to "/card/"; unmatched paths answer NotFound
    redirect_slashes=False,
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(cards.router, prefix="/card", tags=["Cards"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for deployment probes."""
    return {"status": "ok", "version": settings.APP_VERSION}


def run() -> None:
    """Console entry point: serve the API on PORT."""
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
