"""
Data models for syllabics-ocr.

These models carry glyph candidates from detection through to the
assembled text. All of them live for a single recognition run.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Box:
    """
    A glyph candidate in image pixel coordinates.

    ``handles`` are the opaque detection objects (usually contours) the
    box was built from. A box owns its handles exclusively: merging two
    boxes moves both handle tuples into the merged box, and the operands
    must be dropped from any working list.

    Example:
        >>> box = Box(10, 20, 40, 40, handles=(contour,))
        >>> box.area, box.center_x
        (1600, 30.0)
    """

    x: int
    y: int
    width: int
    height: int
    handles: tuple[Any, ...] = field(default=(), compare=False)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Box dimensions must be positive, got {self.width}x{self.height}"
            )

    @classmethod
    def from_rect(cls, rect: Sequence[int], *handles: Any) -> Box:
        """
        Build a box from an ``(x, y, width, height)`` rectangle.

        This is the shape returned by ``cv2.boundingRect``.
        """
        x, y, width, height = rect
        return cls(int(x), int(y), int(width), int(height), handles=tuple(handles))

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Region:
    """A rectangular region of interest selected by the user."""

    x: int
    y: int
    width: int
    height: int

    def contains(self, box: Box) -> bool:
        """Check whether ``box`` lies fully inside the region."""
        return (
            box.x >= self.x
            and box.right <= self.x + self.width
            and box.y >= self.y
            and box.bottom <= self.y + self.height
        )


@dataclass
class Glyph:
    """
    A single assembled symbol before diacritic correction.

    ``label`` is what the classifier (or the dot heuristic) produced;
    ``symbol`` is what is emitted, which differs when a small box was
    rewritten to its final form.
    """

    symbol: str
    label: str
    area: int  # Area of the source box
    line_mean_area: float
    is_dot: bool = False
    space_before: bool = False  # Word space inserted before this glyph
