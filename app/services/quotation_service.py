"""
Quotation Service – assembles a quotation into a paginated PDF artifact.

Pipeline for one render:
  1. ImageService     — decode logo and signature (failures → no image)
  2. totals_service   — subtotal, VAT, grand total
  3. sections         — header, customer, items, totals, notes/signature,
                        footer, laid out on a fresh LayoutService
  4. PdfService       — serialize the pages

Every render gets its own RenderState; nothing is shared between calls.
"""

from __future__ import annotations

import logging

from app.exceptions import DocumentGenerationError
from app.models.placement import Page
from app.models.schemas import Artifact, DerivedTotals, QuotationRecord
from app.services import sections
from app.services.formatting import safe_filename
from app.services.image_service import ImageService
from app.services.layout_service import LayoutService
from app.services.pdf_service import PdfService
from app.services.totals_service import compute_totals

logger = logging.getLogger(__name__)


class QuotationService:
    """Document assembler: ``render(record) -> Artifact``."""

    def __init__(
        self,
        pdf_service: PdfService | None = None,
        image_service: ImageService | None = None,
    ):
        self._pdf = pdf_service or PdfService()
        self._images = image_service or ImageService()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def summary(record: QuotationRecord) -> DerivedTotals:
        """Totals for the compact summary; same numbers the PDF shows."""
        return compute_totals(record.items, record.vat_percent, record.shipping_cost)

    def layout(self, record: QuotationRecord) -> list[Page]:
        """Lay the quotation out without serializing it."""
        logo = self._images.decode(record.company.logo_image, "logo")
        signature = self._images.decode(record.signature_image, "signature")
        totals = self.summary(record)

        layout = LayoutService()
        sections.render_header(layout, record.company, record.quote_number, record.date, logo)
        sections.render_customer(layout, record.customer)
        sections.render_items_table(layout, record.items)
        sections.render_totals(layout, totals, record.vat_percent, record.shipping_cost)
        sections.render_notes_and_signature(layout, record.notes, signature)
        sections.render_footer(layout)
        return layout.finish()

    def render(self, record: QuotationRecord) -> Artifact:
        """
        Render *record* to a PDF artifact.

        Raises
        ------
        DocumentGenerationError
            If layout or serialization fails. No partial artifact is
            returned; callers retry the whole render.
        """
        try:
            pages = self.layout(record)
            content = self._pdf.serialize(
                pages,
                title=f"Quotation {record.quote_number}".strip(),
                author=record.company.name,
            )
        except Exception as e:
            logger.exception("Document generation failed for %r", record.quote_number)
            raise DocumentGenerationError() from e

        artifact = Artifact(
            content=content,
            page_count=len(pages),
            filename=safe_filename(record.quote_number, "pdf"),
        )
        logger.info(
            "Rendered %s: %d page(s), %d bytes",
            artifact.filename, artifact.page_count, len(content),
        )
        return artifact
