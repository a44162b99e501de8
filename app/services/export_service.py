"""
Export Service – CSV, JSON and Excel renditions of a quotation.

  - CSV   – item rows, a blank row, then the totals rows
  - JSON  – the draft payload, loadable back into a QuotationRecord
  - Excel – one styled sheet: details, item table, totals block
"""

from __future__ import annotations

import io
import json
import logging

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from app.models.schemas import QuotationRecord
from app.services.formatting import format_percent, safe_filename
from app.services.totals_service import compute_totals, line_total

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["Description", "Qty", "Price", "Total"]

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _plain(value: float):
    """2.0 -> 2, 2.5 -> 2.5 (matches what users typed)."""
    value = round(value, 2)
    return int(value) if value == int(value) else value


class ExportService:
    """Non-PDF exports of a QuotationRecord."""

    # Styling constants
    _HEADER_FONT = Font(bold=True, size=11, color="FFFFFF")
    _LABEL_FONT = Font(bold=True, size=11)
    _TOTAL_FONT = Font(bold=True, size=12)
    _HEADER_FILL = PatternFill(start_color="1E293B", end_color="1E293B", fill_type="solid")
    _ZEBRA_FILL = PatternFill(start_color="F1F5F9", end_color="F1F5F9", fill_type="solid")
    _THIN_BORDER = Border(
        left=Side(style="thin", color="CBD5E1"),
        right=Side(style="thin", color="CBD5E1"),
        top=Side(style="thin", color="CBD5E1"),
        bottom=Side(style="thin", color="CBD5E1"),
    )
    _MONEY_FORMAT = "#,##0.00"

    @staticmethod
    def filename(record: QuotationRecord, fmt: str) -> str:
        return safe_filename(record.quote_number, fmt)

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    def to_csv(self, record: QuotationRecord) -> str:
        totals = compute_totals(record.items, record.vat_percent, record.shipping_cost)
        rows = [
            [i.description, _plain(i.quantity), _plain(i.unit_price), _plain(line_total(i))]
            for i in record.items
        ]
        rows += [
            ["", "", "", ""],
            ["Subtotal", _plain(totals.subtotal), "", ""],
            ["VAT (%)", format_percent(record.vat_percent),
             "VAT Amount", _plain(totals.vat_amount)],
            ["Shipping", _plain(record.shipping_cost), "", ""],
            ["Total", _plain(totals.grand_total), "", ""],
        ]
        frame = pd.DataFrame(rows, columns=CSV_COLUMNS)
        return frame.to_csv(index=False, lineterminator="\n")

    # ------------------------------------------------------------------
    # JSON draft
    # ------------------------------------------------------------------

    def to_json(self, record: QuotationRecord) -> str:
        payload = {
            "company": {
                "name": record.company.name,
                "address": record.company.address,
                "phone": record.company.phone,
                "email": record.company.email,
                "logoDataUrl": record.company.logo_image,
            },
            "customer": record.customer.model_dump(),
            "items": [
                {"description": i.description, "qty": i.quantity, "price": i.unit_price}
                for i in record.items
            ],
            "vatPercent": record.vat_percent,
            "shipping": record.shipping_cost,
            "notes": record.notes,
            "quoteNumber": record.quote_number,
            "date": record.date,
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    # ------------------------------------------------------------------
    # Excel
    # ------------------------------------------------------------------

    def to_xlsx(self, record: QuotationRecord) -> bytes:
        """One-sheet workbook; returns the .xlsx bytes."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Quotation"

        details = [
            ("Quote #", record.quote_number),
            ("Date", record.date),
            ("Company", record.company.name),
            ("Customer", record.customer.name),
            ("Customer Address", record.customer.address),
            ("Customer Phone", record.customer.phone),
        ]
        for r, (key, val) in enumerate(details, start=1):
            ws.cell(row=r, column=1, value=key).font = self._LABEL_FONT
            ws.cell(row=r, column=2, value=val)

        header_row = len(details) + 2
        for c, label in enumerate(["Description", "Qty", "Unit Price", "Total"], start=1):
            cell = ws.cell(row=header_row, column=c, value=label)
            cell.font = self._HEADER_FONT
            cell.fill = self._HEADER_FILL
            cell.alignment = Alignment(horizontal="left" if c == 1 else "right")

        row = header_row
        for index, item in enumerate(record.items):
            row += 1
            values = [item.description, item.quantity, item.unit_price, line_total(item)]
            for c, val in enumerate(values, start=1):
                cell = ws.cell(row=row, column=c, value=val)
                if c >= 3:
                    cell.number_format = self._MONEY_FORMAT
                if index % 2 == 1:
                    cell.fill = self._ZEBRA_FILL

        self._apply_borders(ws, min_row=header_row, max_row=row, max_col=4)
        self._write_totals(ws, record, start_row=row + 2)

        ws.column_dimensions["A"].width = 48
        ws.column_dimensions["B"].width = 10
        ws.column_dimensions["C"].width = 16
        ws.column_dimensions["D"].width = 18

        buf = io.BytesIO()
        wb.save(buf)
        logger.info("Excel export built for %s (%d items)", record.quote_number, len(record.items))
        return buf.getvalue()

    def _write_totals(self, ws, record: QuotationRecord, start_row: int) -> None:
        totals = compute_totals(record.items, record.vat_percent, record.shipping_cost)
        rows = [
            ("Subtotal", totals.subtotal, self._LABEL_FONT),
            (f"VAT ({format_percent(record.vat_percent)}%)", totals.vat_amount, self._LABEL_FONT),
            ("Shipping", record.shipping_cost, self._LABEL_FONT),
            ("Total", totals.grand_total, self._TOTAL_FONT),
        ]
        for r, (label, amount, font) in enumerate(rows, start=start_row):
            ws.cell(row=r, column=3, value=label).font = font
            cell = ws.cell(row=r, column=4, value=amount)
            cell.font = font
            cell.number_format = self._MONEY_FORMAT

    def _apply_borders(self, ws, min_row, max_row, max_col):
        """Apply thin borders to all cells in the table range."""
        for row in ws.iter_rows(min_row=min_row, max_row=max_row, min_col=1, max_col=max_col):
            for cell in row:
                cell.border = self._THIN_BORDER
