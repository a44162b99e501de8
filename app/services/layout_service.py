"""
Layout Service – page geometry and cursor bookkeeping.

Owns the vertical cursor, margins and page collection for one render.
Section renderers ask it for space before placing anything; when the
remaining space on the current page is insufficient it closes the page,
opens a new one and lets the caller redraw repeated content (the item
table header) through a callback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Literal, Optional

from reportlab.lib.pagesizes import A4

from app.models.placement import (
    FilledRect,
    FontSpec,
    ImagePlacement,
    Page,
    TextRun,
)
from app.models.schemas import RasterImage
from app.services.formatting import to_winansi

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 40.0

# Kept free below the item table so the totals box and signature are not
# pushed alone onto a trailing page by a one-row overflow.
RESERVED_FOOTER_HEIGHT = 110.0

# Kept free on every page for the footer text of the last page.
FOOTER_BAND_HEIGHT = 36.0

# No hard cap on pages; past this a warning is logged once.
PAGE_WARNING_THRESHOLD = 100


@dataclass
class RenderState:
    """Transient per-render bookkeeping, discarded after serialization."""
    cursor_y: float
    page_index: int = 0
    pages: list[Page] = field(default_factory=list)

    @property
    def page(self) -> Page:
        return self.pages[-1]


class LayoutService:
    """
    Top-down cursor layout with automatic page breaks.

    Coordinates are measured from the TOP of the page. The cursor only
    moves down within a page; it returns to the top margin only when a
    new page is started.
    """

    def __init__(
        self,
        page_width: float = PAGE_WIDTH,
        page_height: float = PAGE_HEIGHT,
        margin: float = MARGIN,
        reserved_footer_height: float = RESERVED_FOOTER_HEIGHT,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.reserved_footer_height = reserved_footer_height
        self.content_width = page_width - 2 * margin
        self.state = RenderState(cursor_y=margin)
        self._open_page()

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def cursor_y(self) -> float:
        return self.state.cursor_y

    @property
    def page_index(self) -> int:
        return self.state.page_index

    @property
    def page(self) -> Page:
        return self.state.page

    @property
    def pages(self) -> list[Page]:
        return self.state.pages

    @property
    def content_top(self) -> float:
        return self.margin

    @property
    def content_left(self) -> float:
        return self.margin

    @property
    def content_right(self) -> float:
        return self.margin + self.content_width

    def content_bottom(self, reserve: Optional[float] = None) -> float:
        if reserve is None:
            reserve = self.reserved_footer_height
        return self.page_height - self.margin - reserve

    def remaining(self, reserve: Optional[float] = None) -> float:
        """Vertical space left on the current page."""
        return self.content_bottom(reserve) - self.state.cursor_y

    def capacity(self, reserve: Optional[float] = None) -> float:
        """Vertical space available on a fresh page."""
        return self.content_bottom(reserve) - self.content_top

    # ------------------------------------------------------------------
    # Cursor movement and page breaks
    # ------------------------------------------------------------------

    def advance(self, height: float) -> None:
        """Move the cursor down. Never breaks a page by itself."""
        if height < 0:
            raise ValueError(f"cannot move the cursor up ({height})")
        self.state.cursor_y += height

    def advance_to(self, y: float) -> None:
        """Move the cursor down to *y* if it is above it."""
        if y > self.state.cursor_y:
            self.state.cursor_y = y

    def ensure_space(
        self,
        required_height: float,
        on_new_page: Optional[Callable[[], None]] = None,
        *,
        reserve: Optional[float] = None,
    ) -> bool:
        """
        Make sure *required_height* fits below the cursor.

        Starts a new page (and calls *on_new_page*) when it does not, and
        returns ``True`` if a break happened. A page whose cursor is still
        at the top is never abandoned: a break could not make more room.
        """
        if self.state.cursor_y + required_height <= self.content_bottom(reserve):
            return False
        if self.state.cursor_y <= self.content_top:
            return False
        self.new_page()
        if on_new_page is not None:
            on_new_page()
        return True

    def new_page(self) -> None:
        """Close the current page and start a fresh one."""
        self.state.page.close()
        self.state.page_index += 1
        self.state.cursor_y = self.content_top
        self._open_page()
        if len(self.state.pages) == PAGE_WARNING_THRESHOLD + 1:
            logger.warning(
                "Document exceeds %d pages; content is unusually long",
                PAGE_WARNING_THRESHOLD,
            )

    def finish(self) -> list[Page]:
        """Close the last page and hand over the page collection."""
        self.state.page.close()
        return list(self.state.pages)

    def _open_page(self) -> None:
        self.state.pages.append(
            Page(
                number=self.state.page_index + 1,
                width=self.page_width,
                height=self.page_height,
            )
        )

    # ------------------------------------------------------------------
    # Placement commands (current page)
    # ------------------------------------------------------------------

    def text(
        self,
        x: float,
        y: float,
        text: str,
        font: FontSpec,
        *,
        color: str = "#1E293B",
        align: Literal["left", "right"] = "left",
        tag: str = "",
    ) -> None:
        self.state.page.add(
            TextRun(x=x, y=y, text=to_winansi(text), font=font, color=color, align=align, tag=tag)
        )

    def text_right(self, x: float, y: float, text: str, font: FontSpec, **kwargs) -> None:
        """Text whose right edge sits at *x*."""
        self.text(x, y, text, font, align="right", **kwargs)

    def image(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        image: RasterImage,
        *,
        tag: str = "",
    ) -> None:
        self.state.page.add(
            ImagePlacement(x=x, y=y, width=width, height=height, image=image, tag=tag)
        )

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: str,
        *,
        tag: str = "",
    ) -> None:
        self.state.page.add(
            FilledRect(x=x, y=y, width=width, height=height, color=color, tag=tag)
        )
