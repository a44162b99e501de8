"""
Section renderers – lay the quotation out, one block at a time.

Each renderer takes the ``LayoutService`` for the current render plus
the slice of the quotation it draws, emits placement commands on the
current page and moves the cursor down past what it drew. They must run
in document order: header, customer, items, totals, notes/signature,
footer.

Every command is tagged with its section so a document can be inspected
without rendering pixels.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from app.models.placement import FontSpec
from app.models.schemas import (
    CompanyInfo,
    CustomerInfo,
    DerivedTotals,
    LineItem,
    RasterImage,
)
from app.services.formatting import (
    BOLD,
    COMPANY,
    GRAND_TOTAL,
    LABEL,
    REGULAR,
    SMALL,
    TITLE,
    block_height,
    format_currency,
    format_percent,
    format_quantity,
    wrap_text,
)
from app.services.layout_service import FOOTER_BAND_HEIGHT, LayoutService
from app.services.totals_service import line_total

# ── Palette ──────────────────────────────────────────────────────────
_PAL = {
    "ink":      "#1E293B",   # slate-800 body text
    "muted":    "#64748B",   # slate-500 labels
    "head_bg":  "#1E293B",   # table header band
    "head_ink": "#FFFFFF",
    "zebra":    "#F1F5F9",   # slate-100 alternate rows
    "box":      "#F8FAFC",   # totals box background
    "rule":     "#CBD5E1",   # slate-300 separators
}

SECTION_GAP = 16.0
RULE_WIDTH = 0.75

# Header
HEADER_MIN_HEIGHT = 72.0
LOGO_MAX_WIDTH = 80.0
LOGO_MAX_HEIGHT = 80.0
LOGO_GAP = 12.0
META_COLUMN_WIDTH = 170.0

# Customer
LINE_HEIGHT = REGULAR.leading
CUSTOMER_MIN_HEIGHT = 52.0
CUSTOMER_MAX_FIELDS = 3

# Item table
COLUMN_SPLITS = (0.55, 0.10, 0.17, 0.18)
COLUMN_LABELS = ("Description", "Qty", "Unit Price", "Total")
HEADER_ROW_HEIGHT = 20.0
ROW_HEIGHT = 16.0          # per wrapped description line
CELL_PADDING = 5.0
ROW_BASELINE = 11.0        # first baseline below a row's top edge

# Totals
TOTALS_BOX_WIDTH = 220.0
TOTALS_ROW_HEIGHT = 16.0
GRAND_TOTAL_ROW_HEIGHT = 22.0
TOTALS_PADDING = 8.0

# Notes & signature
SIGNATURE_WIDTH = 160.0
COLUMN_GUTTER = 20.0
CAPTION_HEIGHT = 18.0
SIGNATURE_CAPTION = "Authorized Signature"

# Footer
FOOTER_OFFSET = 12.0
TERMS_TEXT = (
    "Thank you for your business. This quotation is valid for 30 days from "
    "the date of issue. Prices are in Nigerian Naira (NGN); VAT and shipping "
    "are charged as shown. Delivery timelines are confirmed on acceptance."
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _stack(
    layout: LayoutService,
    x: float,
    top: float,
    rows: Sequence[tuple[str, FontSpec, str]],
    *,
    align: str = "left",
    tag: str,
) -> float:
    """Draw (text, font, color) rows top-down from *top*; return the height."""
    y = top
    for text, font, color in rows:
        layout.text(x, y + font.size, text, font, color=color, align=align, tag=tag)
        y += font.leading
    return y - top


def _rule(layout: LayoutService, y: float, tag: str) -> None:
    layout.rect(layout.content_left, y, layout.content_width, RULE_WIDTH, _PAL["rule"], tag=tag)


def table_columns(left: float, width: float) -> list[tuple[float, float]]:
    """(x, width) of the Description / Qty / Unit Price / Total columns."""
    columns = []
    x = left
    for share in COLUMN_SPLITS:
        columns.append((x, width * share))
        x += width * share
    return columns


def _chunks(lines: list[str], size: int) -> Iterator[list[str]]:
    for start in range(0, len(lines), size):
        yield lines[start:start + size]


# ---------------------------------------------------------------------------
# 1. Header
# ---------------------------------------------------------------------------

def render_header(
    layout: LayoutService,
    company: CompanyInfo,
    quote_number: str,
    date: str,
    logo: RasterImage | None,
) -> None:
    """Logo, company details and the right-aligned quote number/date."""
    top = layout.cursor_y
    text_x = layout.content_left
    logo_height = 0.0

    if logo is not None:
        width, logo_height = logo.fit(LOGO_MAX_WIDTH, LOGO_MAX_HEIGHT)
        layout.image(layout.content_left, top, width, logo_height, logo, tag="header")
        text_x += width + LOGO_GAP

    meta_rows = [("QUOTATION", TITLE, _PAL["ink"])]
    if quote_number:
        meta_rows += [("Quote #", SMALL, _PAL["muted"]), (quote_number, BOLD, _PAL["ink"])]
    if date:
        meta_rows += [("Date", SMALL, _PAL["muted"]), (date, REGULAR, _PAL["ink"])]
    meta_height = _stack(
        layout, layout.content_right, top, meta_rows, align="right", tag="header"
    )

    available = layout.content_right - META_COLUMN_WIDTH - text_x
    company_rows = [
        (line, COMPANY, _PAL["ink"])
        for line in wrap_text(company.name, available, COMPANY)
        if line
    ]
    contact = "  |  ".join(v for v in (company.phone, company.email) if v.strip())
    for value in (company.address, contact):
        company_rows += [
            (line, REGULAR, _PAL["muted"])
            for line in wrap_text(value, available, REGULAR)
            if line
        ]
    company_height = _stack(layout, text_x, top, company_rows, tag="header")

    # company text only stretches the header when it outgrows the minimum
    height = max(logo_height, HEADER_MIN_HEIGHT, company_height, meta_height)
    layout.advance(height)
    _rule(layout, layout.cursor_y + SECTION_GAP / 2, tag="header")
    layout.advance(SECTION_GAP)


# ---------------------------------------------------------------------------
# 2. Customer block
# ---------------------------------------------------------------------------

def render_customer(layout: LayoutService, customer: CustomerInfo) -> None:
    fields = customer.filled_fields()[:CUSTOMER_MAX_FIELDS]
    height = max(CUSTOMER_MIN_HEIGHT, len(fields) * LINE_HEIGHT)
    layout.ensure_space(height, reserve=FOOTER_BAND_HEIGHT)

    rows = [("Prepared for", LABEL, _PAL["muted"])]
    rows += [(value, REGULAR, _PAL["ink"]) for value in fields]
    _stack(layout, layout.content_left, layout.cursor_y, rows, tag="customer")
    layout.advance(height + SECTION_GAP)


# ---------------------------------------------------------------------------
# 3. Item table
# ---------------------------------------------------------------------------

def _draw_table_header(layout: LayoutService, columns: list[tuple[float, float]]) -> None:
    top = layout.cursor_y
    layout.rect(
        layout.content_left, top, layout.content_width, HEADER_ROW_HEIGHT,
        _PAL["head_bg"], tag="table-header",
    )
    baseline = top + (HEADER_ROW_HEIGHT + BOLD.size) / 2 - 1
    for index, ((x, width), label) in enumerate(zip(columns, COLUMN_LABELS)):
        if index < 2:
            layout.text(x + CELL_PADDING, baseline, label, BOLD,
                        color=_PAL["head_ink"], tag="table-header")
        else:
            layout.text_right(x + width - CELL_PADDING, baseline, label, BOLD,
                              color=_PAL["head_ink"], tag="table-header")
    layout.advance(HEADER_ROW_HEIGHT)


def _draw_row(
    layout: LayoutService,
    columns: list[tuple[float, float]],
    item: LineItem,
    lines: list[str],
    shaded: bool,
    with_figures: bool,
) -> None:
    top = layout.cursor_y
    height = len(lines) * ROW_HEIGHT
    if shaded:
        layout.rect(layout.content_left, top, layout.content_width, height,
                    _PAL["zebra"], tag="table-row")

    (desc_x, _), (qty_x, _), (unit_x, unit_w), (total_x, total_w) = columns
    for index, line in enumerate(lines):
        layout.text(desc_x + CELL_PADDING, top + index * ROW_HEIGHT + ROW_BASELINE,
                    line, REGULAR, tag="table-row")

    if with_figures:
        baseline = top + ROW_BASELINE
        layout.text(qty_x + CELL_PADDING, baseline,
                    format_quantity(item.quantity), REGULAR, tag="table-row")
        layout.text_right(unit_x + unit_w - CELL_PADDING, baseline,
                          format_currency(item.unit_price), REGULAR, tag="table-row")
        layout.text_right(total_x + total_w - CELL_PADDING, baseline,
                          format_currency(line_total(item)), BOLD, tag="table-row")

    layout.advance(height)


def render_items_table(layout: LayoutService, items: Sequence[LineItem]) -> None:
    """
    Header row plus one row per item, repeating the header on every page.

    Each item is wrapped and measured before any of it is drawn, and
    space is ensured for the whole row, so an item never straddles a page
    break. The only exception is an item taller than an entire fresh
    page, which is cut into page-sized pieces. Row shading alternates
    per item and carries across pages.
    """
    columns = table_columns(layout.content_left, layout.content_width)
    description_width = columns[0][1] - 2 * CELL_PADDING

    def redraw_header() -> None:
        _draw_table_header(layout, columns)

    # keep the header with at least one row
    layout.ensure_space(HEADER_ROW_HEIGHT + ROW_HEIGHT)
    redraw_header()

    lines_per_page = max(1, int((layout.capacity() - HEADER_ROW_HEIGHT) // ROW_HEIGHT))
    shaded = False
    for item in items:
        lines = wrap_text(item.description, description_width, REGULAR)
        for index, chunk in enumerate(_chunks(lines, lines_per_page)):
            layout.ensure_space(len(chunk) * ROW_HEIGHT, redraw_header)
            _draw_row(layout, columns, item, chunk, shaded, with_figures=index == 0)
        shaded = not shaded

    layout.rect(layout.content_left, layout.cursor_y, layout.content_width,
                RULE_WIDTH, _PAL["rule"], tag="table-row")
    layout.advance(SECTION_GAP)


# ---------------------------------------------------------------------------
# 4. Totals box
# ---------------------------------------------------------------------------

def render_totals(
    layout: LayoutService,
    totals: DerivedTotals,
    vat_percent: float,
    shipping_cost: float,
) -> None:
    """Right-aligned box, kept together on one page."""
    rows = [
        ("Subtotal", totals.subtotal),
        (f"VAT ({format_percent(vat_percent)}%)", totals.vat_amount),
        ("Shipping", shipping_cost),
    ]
    height = 2 * TOTALS_PADDING + len(rows) * TOTALS_ROW_HEIGHT + GRAND_TOTAL_ROW_HEIGHT
    layout.ensure_space(height, reserve=FOOTER_BAND_HEIGHT)

    top = layout.cursor_y
    left = layout.content_right - TOTALS_BOX_WIDTH
    right = layout.content_right - TOTALS_PADDING
    layout.rect(left, top, TOTALS_BOX_WIDTH, height, _PAL["box"], tag="totals")

    y = top + TOTALS_PADDING
    for label, amount in rows:
        layout.text(left + TOTALS_PADDING, y + ROW_BASELINE, label, REGULAR,
                    color=_PAL["muted"], tag="totals")
        layout.text_right(right, y + ROW_BASELINE, format_currency(amount), REGULAR,
                          tag="totals")
        y += TOTALS_ROW_HEIGHT

    layout.rect(left + TOTALS_PADDING, y + 2, TOTALS_BOX_WIDTH - 2 * TOTALS_PADDING,
                RULE_WIDTH, _PAL["rule"], tag="totals")
    baseline = y + GRAND_TOTAL_ROW_HEIGHT - 4
    layout.text(left + TOTALS_PADDING, baseline, "Total", GRAND_TOTAL, tag="totals")
    layout.text_right(right, baseline, format_currency(totals.grand_total), GRAND_TOTAL,
                      tag="totals")

    layout.advance(height + SECTION_GAP)


# ---------------------------------------------------------------------------
# 5. Notes & signature
# ---------------------------------------------------------------------------

def _signature_size(
    layout: LayoutService, signature: RasterImage | None, reserve: float
) -> tuple[float, float]:
    """Fixed width, aspect kept; never taller than a page leaves room for."""
    if signature is None:
        return 0.0, 0.0
    return signature.fit(SIGNATURE_WIDTH, layout.capacity(reserve) - CAPTION_HEIGHT)


def _draw_signature(
    layout: LayoutService,
    top: float,
    signature: RasterImage | None,
    size: tuple[float, float],
) -> None:
    """Signature image (if any) above a rule and caption."""
    x = layout.content_right - SIGNATURE_WIDTH
    width, image_height = size
    if signature is not None:
        layout.image(x, top, width, image_height, signature, tag="signature")

    layout.rect(x, top + image_height + 2, SIGNATURE_WIDTH, RULE_WIDTH,
                _PAL["rule"], tag="signature")
    layout.text(x, top + image_height + 2 + SMALL.leading + 1, SIGNATURE_CAPTION, SMALL,
                color=_PAL["muted"], tag="signature")


def render_notes_and_signature(
    layout: LayoutService, notes: str, signature: RasterImage | None
) -> None:
    """
    Notes on the left, signature on the right.

    Both blocks share a top edge. When the notes are longer than a whole
    page they continue line by line on following pages; the signature
    stays beside their first lines.
    """
    reserve = FOOTER_BAND_HEIGHT
    notes_width = layout.content_width - SIGNATURE_WIDTH - COLUMN_GUTTER
    lines = wrap_text(notes, notes_width, REGULAR) if notes.strip() else []

    notes_height = LABEL.leading + block_height(len(lines), REGULAR) if lines else 0.0
    size = _signature_size(layout, signature, reserve)
    signature_height = size[1] + CAPTION_HEIGHT

    height = max(notes_height, signature_height)
    if height <= layout.capacity(reserve):
        layout.ensure_space(height, reserve=reserve)
        top = layout.cursor_y
        _draw_signature(layout, top, signature, size)
        if lines:
            rows = [("Notes", LABEL, _PAL["muted"])]
            rows += [(line, REGULAR, _PAL["ink"]) for line in lines]
            _stack(layout, layout.content_left, top, rows, tag="notes")
        layout.advance(height)
        return

    layout.ensure_space(max(signature_height, LABEL.leading + REGULAR.leading), reserve=reserve)
    top = layout.cursor_y
    first_page = layout.page_index
    _draw_signature(layout, top, signature, size)
    if lines:
        _stack(layout, layout.content_left, top, [("Notes", LABEL, _PAL["muted"])], tag="notes")
        layout.advance(LABEL.leading)
    for line in lines:
        layout.ensure_space(REGULAR.leading, reserve=reserve)
        _stack(layout, layout.content_left, layout.cursor_y,
               [(line, REGULAR, _PAL["ink"])], tag="notes")
        layout.advance(REGULAR.leading)
    if layout.page_index == first_page:
        layout.advance_to(top + signature_height)


# ---------------------------------------------------------------------------
# 6. Footer
# ---------------------------------------------------------------------------

def render_footer(layout: LayoutService, text: str = TERMS_TEXT) -> None:
    """Terms text at a fixed offset above the bottom margin of the last page."""
    band_top = layout.page_height - layout.margin - FOOTER_BAND_HEIGHT
    if layout.cursor_y > band_top:
        layout.new_page()

    layout.rect(layout.content_left, band_top, layout.content_width, 0.5,
                _PAL["rule"], tag="footer")
    y = band_top + FOOTER_OFFSET
    for line in wrap_text(text, layout.content_width, SMALL):
        layout.text(layout.content_left, y, line, SMALL, color=_PAL["muted"], tag="footer")
        y += SMALL.leading
