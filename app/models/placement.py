"""
Placement commands and pages.

Section renderers never talk to a drawing backend directly: they emit
these commands, and ``PdfService`` replays them. All coordinates are PDF
points measured from the TOP-LEFT corner of the page; ``TextRun.y`` is
the text baseline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

from app.exceptions import PageClosedError
from app.models.schemas import RasterImage


@dataclass(frozen=True)
class FontSpec:
    """A base-14 font at a given size; ``leading`` is the line advance."""
    name: str
    size: float
    leading: float


@dataclass(frozen=True)
class TextRun:
    x: float
    y: float
    text: str
    font: FontSpec
    color: str = "#1E293B"
    align: Literal["left", "right"] = "left"
    tag: str = ""


@dataclass(frozen=True)
class ImagePlacement:
    x: float
    y: float  # top edge
    width: float
    height: float
    image: RasterImage
    tag: str = ""


@dataclass(frozen=True)
class FilledRect:
    x: float
    y: float  # top edge
    width: float
    height: float
    color: str
    tag: str = ""


PlacementCommand = Union[TextRun, ImagePlacement, FilledRect]


@dataclass
class Page:
    """One output page. Append-only; immutable once closed."""
    number: int
    width: float
    height: float
    commands: list[PlacementCommand] = field(default_factory=list)
    closed: bool = False

    def add(self, command: PlacementCommand) -> None:
        if self.closed:
            raise PageClosedError(f"page {self.number} is closed")
        self.commands.append(command)

    def close(self) -> None:
        self.closed = True

    def texts(self, tag: str | None = None) -> list[TextRun]:
        """Text runs on this page, optionally filtered by section tag."""
        return [
            c for c in self.commands
            if isinstance(c, TextRun) and (tag is None or c.tag == tag)
        ]

    def tagged(self, tag: str) -> list[PlacementCommand]:
        return [c for c in self.commands if c.tag == tag]
