"""
Schemas – quotation input models and engine result types.

Input models are pydantic and forgiving: a half-filled quotation is a
valid in-progress state, so defects (non-numeric quantities, missing
fields, negative prices) are normalised to safe defaults instead of
being rejected.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def to_number(value: Any) -> float:
    """Coerce *value* to a finite, non-negative float (0.0 on failure)."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class CompanyInfo(_Record):
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    # data URL or bare base64; decoded lazily by ImageService
    logo_image: str = Field(
        default="",
        validation_alias=AliasChoices("logo_image", "logoImage", "logoDataUrl"),
    )

    @field_validator("name", "address", "phone", "email", "logo_image", mode="before")
    @classmethod
    def _text(cls, v):
        return to_text(v)


class CustomerInfo(_Record):
    name: str = ""
    address: str = ""
    phone: str = ""

    @field_validator("name", "address", "phone", mode="before")
    @classmethod
    def _text(cls, v):
        return to_text(v)

    def filled_fields(self) -> list[str]:
        """Non-empty fields in display order."""
        return [f for f in (self.name, self.address, self.phone) if f.strip()]


class LineItem(_Record):
    description: str = ""
    quantity: float = Field(
        default=0.0, validation_alias=AliasChoices("quantity", "qty")
    )
    unit_price: float = Field(
        default=0.0,
        validation_alias=AliasChoices("unit_price", "unitPrice", "price"),
    )

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, v):
        return to_text(v)

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def _number(cls, v):
        return to_number(v)


class QuotationRecord(_Record):
    """A complete quotation, immutable for the duration of one render."""

    company: CompanyInfo = Field(default_factory=CompanyInfo)
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    items: tuple[LineItem, ...] = ()
    vat_percent: float = Field(
        default=0.0, validation_alias=AliasChoices("vat_percent", "vatPercent")
    )
    shipping_cost: float = Field(
        default=0.0,
        validation_alias=AliasChoices("shipping_cost", "shippingCost", "shipping"),
    )
    notes: str = ""
    quote_number: str = Field(
        default="", validation_alias=AliasChoices("quote_number", "quoteNumber")
    )
    date: str = ""
    signature_image: str = Field(
        default="",
        validation_alias=AliasChoices(
            "signature_image", "signatureImage", "signatureDataUrl"
        ),
    )

    @field_validator("company", "customer", mode="before")
    @classmethod
    def _block(cls, v):
        return v if isinstance(v, (dict, BaseModel)) else {}

    @field_validator("items", mode="before")
    @classmethod
    def _items(cls, v):
        if not isinstance(v, (list, tuple)):
            return ()
        return [item for item in v if isinstance(item, (dict, LineItem))]

    @field_validator("vat_percent", "shipping_cost", mode="before")
    @classmethod
    def _number(cls, v):
        return to_number(v)

    @field_validator("notes", "quote_number", "date", "signature_image", mode="before")
    @classmethod
    def _text(cls, v):
        return to_text(v)


# ---------------------------------------------------------------------------
# Engine results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DerivedTotals:
    subtotal: float
    vat_amount: float
    grand_total: float


@dataclass(frozen=True)
class RasterImage:
    """A decoded raster image: original bytes plus pixel dimensions."""
    data: bytes
    width: int
    height: int

    def fit(self, max_width: float, max_height: float | None = None) -> tuple[float, float]:
        """Scale into the box, preserving aspect ratio."""
        scale = max_width / self.width
        if max_height is not None:
            scale = min(scale, max_height / self.height)
        return self.width * scale, self.height * scale


@dataclass(frozen=True)
class Artifact:
    """Finished document bytes plus listing metadata."""
    content: bytes
    page_count: int
    filename: str
    media_type: str = "application/pdf"
