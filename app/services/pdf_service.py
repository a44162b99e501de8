"""
PDF Service – serializes laid-out pages into a PDF document.

Replays the placement commands of each ``Page`` onto a reportlab canvas.
The canvas runs in invariant mode (fixed creation date and document ID),
so identical pages always serialize to identical bytes.
"""

from __future__ import annotations

import io
import logging

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from app.models.placement import FilledRect, ImagePlacement, Page, TextRun
from app.models.schemas import RasterImage

logger = logging.getLogger(__name__)


class PdfService:
    """Backend that turns placement-command pages into PDF bytes."""

    creator = "QuoteForge Engine"

    def serialize(self, pages: list[Page], title: str = "", author: str = "") -> bytes:
        if not pages:
            raise ValueError("cannot serialize a document without pages")

        buf = io.BytesIO()
        first = pages[0]
        pdf = canvas.Canvas(
            buf,
            pagesize=(first.width, first.height),
            invariant=1,
            pageCompression=1,
        )
        pdf.setTitle(title)
        pdf.setAuthor(author)
        pdf.setCreator(self.creator)

        readers: dict[RasterImage, ImageReader] = {}
        for page in pages:
            pdf.setPageSize((page.width, page.height))
            for command in page.commands:
                if isinstance(command, FilledRect):
                    self._draw_rect(pdf, page, command)
                elif isinstance(command, TextRun):
                    self._draw_text(pdf, page, command)
                elif isinstance(command, ImagePlacement):
                    self._draw_image(pdf, page, command, readers)
                else:
                    raise TypeError(f"unknown placement command: {command!r}")
            pdf.showPage()

        pdf.save()
        data = buf.getvalue()
        logger.debug("Serialized %d page(s), %d bytes", len(pages), len(data))
        return data

    # ------------------------------------------------------------------
    # Commands (page coordinates are top-down, PDF is bottom-up)
    # ------------------------------------------------------------------

    @staticmethod
    def _draw_rect(pdf: canvas.Canvas, page: Page, cmd: FilledRect) -> None:
        pdf.setFillColor(colors.HexColor(cmd.color))
        pdf.rect(
            cmd.x, page.height - cmd.y - cmd.height, cmd.width, cmd.height,
            stroke=0, fill=1,
        )

    @staticmethod
    def _draw_text(pdf: canvas.Canvas, page: Page, cmd: TextRun) -> None:
        pdf.setFillColor(colors.HexColor(cmd.color))
        pdf.setFont(cmd.font.name, cmd.font.size)
        y = page.height - cmd.y
        if cmd.align == "right":
            pdf.drawRightString(cmd.x, y, cmd.text)
        else:
            pdf.drawString(cmd.x, y, cmd.text)

    @staticmethod
    def _draw_image(
        pdf: canvas.Canvas,
        page: Page,
        cmd: ImagePlacement,
        readers: dict[RasterImage, ImageReader],
    ) -> None:
        reader = readers.get(cmd.image)
        if reader is None:
            reader = readers[cmd.image] = ImageReader(io.BytesIO(cmd.image.data))
        pdf.drawImage(
            reader,
            cmd.x,
            page.height - cmd.y - cmd.height,
            width=cmd.width,
            height=cmd.height,
            mask="auto",
        )
