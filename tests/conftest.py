"""
Shared fixtures: quotation payloads and synthetic PNG images.
"""

import io

import pytest
from PIL import Image

from app.models.schemas import QuotationRecord
from app.services.image_service import to_data_url


def _png(width, height, color=(30, 41, 59, 255)):
    img = Image.new("RGBA", (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_data_url():
    """Factory: ``png_data_url(w, h)`` -> data URL of a solid PNG."""
    def make(width=120, height=60, color=(30, 41, 59, 255)):
        return to_data_url(_png(width, height, color))
    return make


@pytest.fixture
def base_payload():
    """Scenario A: one Widget, 7.5 % VAT, 10 shipping."""
    return {
        "company": {
            "name": "Your Company Ltd",
            "address": "12 Business Rd, Lagos, Nigeria",
            "phone": "+234 800 000 0000",
            "email": "hello@company.com",
        },
        "customer": {
            "name": "Ada Okafor",
            "address": "4 Marina Street, Lagos",
            "phone": "+234 801 234 5678",
        },
        "items": [{"description": "Widget", "quantity": 2, "unitPrice": 100}],
        "vatPercent": 7.5,
        "shippingCost": 10,
        "notes": "Delivery within 5 working days.",
        "quoteNumber": "Q-20261019-001",
        "date": "2026-10-19",
    }


@pytest.fixture
def make_record(base_payload):
    """Factory: ``make_record(**overrides)`` -> QuotationRecord."""
    def make(**overrides):
        payload = {**base_payload, **overrides}
        return QuotationRecord.model_validate(payload)
    return make


@pytest.fixture
def record(make_record):
    return make_record()
