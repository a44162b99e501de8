"""
Quotation Controller – API route definitions.

Defines endpoints for health check, quote-number assignment, totals
preview, PDF rendering and the CSV / JSON / Excel exports.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from app.exceptions import CounterStoreError, DocumentGenerationError
from app.models.schemas import QuotationRecord
from app.repository.counter_repository import InMemoryCounterStore, JsonFileCounterStore
from app.services.export_service import MEDIA_TYPES, ExportService
from app.services.quotation_service import QuotationService
from app.services.quote_number_service import CounterStore, QuoteNumberService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["quotations"])


class QuoteNumberRequest(BaseModel):
    date: Optional[str] = None


# ---------------------------------------------------------------------------
# Dependency injection helpers
# ---------------------------------------------------------------------------

@lru_cache(maxsize=1)
def _get_counter_store() -> CounterStore:
    path = os.getenv("QUOTEFORGE_COUNTER_FILE")
    if path:
        logger.info("Quote counters persisted in %s", path)
        return JsonFileCounterStore(path)
    return InMemoryCounterStore()


def _get_quote_number_service(
    store: CounterStore = Depends(_get_counter_store),
) -> QuoteNumberService:
    return QuoteNumberService(store)


def _get_quotation_service() -> QuotationService:
    return QuotationService()


def _get_export_service() -> ExportService:
    return ExportService()


def _attachment(content: bytes | str, media_type: str, filename: str, **headers) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"', **headers},
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/health")
async def health():
    """Health-check endpoint."""
    return {"status": "ok", "service": "QuoteForge Engine"}


@router.post("/quote-number")
def quote_number(
    body: QuoteNumberRequest,
    numbers: QuoteNumberService = Depends(_get_quote_number_service),
):
    """Assign the next ``Q-YYYYMMDD-NNN`` number for the given (or current) day."""
    try:
        return {"quoteNumber": numbers.next_number(body.date)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date: {body.date!r}") from e
    except CounterStoreError as e:
        logger.exception("Quote counter unavailable")
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.post("/quotations/totals")
def totals(
    record: QuotationRecord,
    quotations: QuotationService = Depends(_get_quotation_service),
):
    """Derived totals, as shown in the totals box of the PDF."""
    result = quotations.summary(record)
    return {
        "subtotal": result.subtotal,
        "vatAmount": result.vat_amount,
        "grandTotal": result.grand_total,
    }


@router.post("/quotations/render")
def render(
    record: QuotationRecord,
    quotations: QuotationService = Depends(_get_quotation_service),
):
    """
    Render a quotation to PDF.

    Returns the document as an attachment; the page count is reported in
    the ``X-Page-Count`` header.
    """
    try:
        artifact = quotations.render(record)
    except DocumentGenerationError as e:
        raise HTTPException(status_code=500, detail="Document generation failed") from e

    return _attachment(
        artifact.content,
        artifact.media_type,
        artifact.filename,
        **{"X-Page-Count": str(artifact.page_count)},
    )


@router.post("/quotations/export/{fmt}")
def export(
    fmt: str,
    record: QuotationRecord,
    exporter: ExportService = Depends(_get_export_service),
):
    """Export the quotation as ``csv``, ``json`` or ``xlsx``."""
    fmt = fmt.lower()
    if fmt not in MEDIA_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported export format {fmt!r}; use one of {sorted(MEDIA_TYPES)}",
        )

    if fmt == "csv":
        content = exporter.to_csv(record)
    elif fmt == "json":
        content = exporter.to_json(record)
    else:
        content = exporter.to_xlsx(record)
    return _attachment(content, MEDIA_TYPES[fmt], exporter.filename(record, fmt))
