"""
Image Service – decodes logo and signature images before layout.

Layout needs pixel dimensions up front, so images are fully decoded
here. A corrupt or unreadable image never blocks a document: it is
logged and treated as absent.
"""

from __future__ import annotations

import base64
import io
import logging

from PIL import Image

from app.models.schemas import RasterImage

logger = logging.getLogger(__name__)


class ImageService:
    """Turns data URLs / base64 strings / raw bytes into RasterImages."""

    def decode(self, source: str | bytes | None, label: str = "image") -> RasterImage | None:
        if not source:
            return None
        try:
            data = self._payload(source)
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                width, height = img.size
        except Exception as e:
            logger.warning("Could not decode %s, omitting it: %s", label, e)
            return None

        if width <= 0 or height <= 0:
            logger.warning("Ignoring empty %s (%dx%d)", label, width, height)
            return None
        return RasterImage(data=data, width=width, height=height)

    @staticmethod
    def _payload(source: str | bytes) -> bytes:
        """Raw image bytes from a data URL, bare base64 or bytes."""
        if isinstance(source, bytes):
            return source
        text = source.strip()
        if text.startswith("data:"):
            header, _, text = text.partition(",")
            if ";base64" not in header:
                raise ValueError("only base64 data URLs are supported")
        return base64.b64decode(text, validate=True)


def to_data_url(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
