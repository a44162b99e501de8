"""
Formatting helpers – currency, quantities and text wrapping.

Text is measured with reportlab's AFM metrics for the base-14 Helvetica
family, so the widths used for layout are exactly the widths the PDF
backend will draw.
"""

from __future__ import annotations

import re
import unicodedata

from reportlab.pdfbase.pdfmetrics import stringWidth

from app.models.placement import FontSpec
from app.models.schemas import to_number

# Naira, written with its ISO code: the base-14 fonts have no ₦ glyph.
CURRENCY_PREFIX = "NGN "

REGULAR = FontSpec("Helvetica", 9, 12)
BOLD = FontSpec("Helvetica-Bold", 9, 12)
SMALL = FontSpec("Helvetica", 8, 10)
LABEL = FontSpec("Helvetica-Bold", 10, 13)
COMPANY = FontSpec("Helvetica-Bold", 14, 17)
TITLE = FontSpec("Helvetica-Bold", 18, 22)
GRAND_TOTAL = FontSpec("Helvetica-Bold", 12, 16)


def format_currency(amount) -> str:
    """``NGN 1,234.50``; anything non-finite or negative formats as zero."""
    return f"{CURRENCY_PREFIX}{to_number(amount):,.2f}"


def format_quantity(value) -> str:
    """Integral values without decimals: ``2``, ``2.5``."""
    number = to_number(value)
    if number == int(number):
        return str(int(number))
    return f"{number:g}"


# VAT label value: ``7.5``, ``10``
format_percent = format_quantity


def to_winansi(text: str) -> str:
    """Replace characters the base-14 fonts cannot show with ``?``; control
    characters become spaces."""
    text = re.sub(r"[\x00-\x1f\x7f]", " ", text)
    return text.encode("cp1252", "replace").decode("cp1252")


def text_width(text: str, font: FontSpec) -> float:
    return stringWidth(to_winansi(text), font.name, font.size)


def wrap_text(text: str, max_width: float, font: FontSpec) -> list[str]:
    """
    Greedy word wrap.

    A word wider than *max_width* gets a line to itself and is never
    split. Newlines in *text* force a break; an empty paragraph becomes
    an empty line. Empty input yields ``[""]``.
    """
    if not text or not text.strip():
        return [""]

    lines: list[str] = []
    for paragraph in text.rstrip().splitlines():
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if not current or text_width(candidate, font) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)

    return lines


def block_height(line_count: int, font: FontSpec) -> float:
    return max(line_count, 0) * font.leading


def safe_filename(stem: str, extension: str) -> str:
    """
    ``<stem>.<extension>`` safe for a path and a ``Content-Disposition``
    header: ASCII only, no control or path-unsafe characters.
    """
    folded = unicodedata.normalize("NFKD", stem or "").encode("ascii", "ignore").decode("ascii")
    cleaned = re.sub(r'[\\/*?:"<>|\x00-\x1f\x7f]', "", folded).strip() or "quotation"
    return f"{cleaned}.{extension}"
