"""
QuoteForge Engine — FastAPI Application Factory.

Wires the quotation router into an app, sets up logging and CORS from the
environment, and exposes ``run()`` as the ``quoteforge`` console script.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.controllers.quotation_controller import router as quotation_router
from app.services.formatting import BOLD, REGULAR, text_width

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

log_level = os.getenv("LOG_LEVEL", "info").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
)
logger = logging.getLogger("quoteforge")


def _cors_origins() -> list[str]:
    """``QUOTEFORGE_CORS_ORIGINS`` as a list; every origin when unset."""
    raw = os.getenv("QUOTEFORGE_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # the first measurement loads the AFM metrics of each font
    for font in (REGULAR, BOLD):
        text_width("QuoteForge", font)
    counter_file = os.getenv("QUOTEFORGE_COUNTER_FILE")
    logger.info(
        "QuoteForge Engine %s ready (quote counters: %s)",
        VERSION, counter_file or "in memory",
    )
    yield
    logger.info("QuoteForge Engine stopped")


app = FastAPI(
    title="QuoteForge Engine",
    description=(
        "Price quotation engine. "
        "Post a quotation and receive a paginated PDF with repeated table "
        "headers, totals, notes and signature, or a CSV / JSON / Excel export."
    ),
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Page-Count"],
)

app.include_router(quotation_router)


@app.get("/", include_in_schema=False)
async def root():
    return {"message": f"QuoteForge Engine v{VERSION}", "docs": "/docs"}


def run() -> None:
    """Serve the app with uvicorn on ``QUOTEFORGE_HOST``:``QUOTEFORGE_PORT``."""
    uvicorn.run(
        "app.main:app",
        host=os.getenv("QUOTEFORGE_HOST", "127.0.0.1"),
        port=int(os.getenv("QUOTEFORGE_PORT", "8000")),
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    run()
