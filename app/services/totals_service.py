"""
Totals Service – derives subtotal, VAT and grand total from line items.

Pure and side-effect free. Line totals are summed with ``math.fsum``,
which is exactly rounded, so the result does not depend on item order
and repeated calls agree bit for bit.
"""

from __future__ import annotations

import math
from typing import Iterable

from app.models.schemas import DerivedTotals, LineItem, to_number


def line_total(item: LineItem) -> float:
    return to_number(item.quantity) * to_number(item.unit_price)


def compute_totals(
    items: Iterable[LineItem],
    vat_percent: float,
    shipping_cost: float,
) -> DerivedTotals:
    subtotal = math.fsum(line_total(item) for item in items)
    vat_amount = subtotal * to_number(vat_percent) / 100
    grand_total = math.fsum((subtotal, vat_amount, to_number(shipping_cost)))
    return DerivedTotals(
        subtotal=subtotal,
        vat_amount=vat_amount,
        grand_total=grand_total,
    )
