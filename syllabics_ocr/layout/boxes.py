"""
Box geometry and candidate filtering.

Detection hands us every external contour in the image, most of which
are not syllabics: specks, ruling lines, page borders. This module
removes implausible candidates and provides the geometric primitives
shared by the merge and line stages.
"""

from __future__ import annotations

import logging
import statistics
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from syllabics_ocr.config import LayoutConfig
from syllabics_ocr.models import Box, Region

logger = logging.getLogger(__name__)

Release = Callable[[Any], None]


# =============================================================================
# DATA STRUCTURES
# =============================================================================


@dataclass
class FilterStats:
    """Statistics for box filtering."""

    boxes_received: int = 0
    rejected_aspect: int = 0
    rejected_invalid: int = 0
    rejected_region: int = 0
    rejected_noise: int = 0
    boxes_kept: int = 0


# =============================================================================
# GEOMETRY
# =============================================================================


def sort_boxes(boxes: Iterable[Box]) -> list[Box]:
    """Return boxes ordered top to bottom, then left to right."""
    return sorted(boxes, key=lambda b: (b.y, b.x))


def merge_boxes(a: Box, b: Box) -> Box:
    """
    Merge two boxes into a single box that contains both.

    The result owns the handles of both operands, ``a`` first. Boxes are
    immutable, so the operands still reference the same handles; callers
    must drop both operands from every list they keep, leaving the
    merged box as the only owner.
    """
    x = min(a.x, b.x)
    y = min(a.y, b.y)
    width = max(a.right, b.right) - x
    height = max(a.bottom, b.bottom) - y
    return Box(x, y, width, height, handles=a.handles + b.handles)


def is_valid_box(box: Box, size: int = 42) -> bool:
    """
    Check that a box survives scaling to the classifier input size.

    The larger side is scaled to ``size``; the smaller side must still
    be at least one pixel.
    """
    scale = min(size / box.width, size / box.height)
    return box.width * scale >= 1 and box.height * scale >= 1


def has_plausible_aspect(box: Box, max_ratio: float = 25.0) -> bool:
    """Reject really long or wide rectangles as no syllabics match this."""
    return box.height <= max_ratio * box.width and box.width <= max_ratio * box.height


def is_box_within_x(box: Box, candidate: Box, threshold: float) -> bool:
    """
    Check whether ``box`` is horizontally inside ``candidate``.

    The candidate's span is widened by ``threshold`` on both sides.
    """
    start = candidate.x - threshold
    end = candidate.right + threshold
    return start <= box.x and end >= box.right


# =============================================================================
# FILTERING
# =============================================================================


def filter_boxes(
    boxes: Iterable[Box],
    region: Region | None = None,
    config: LayoutConfig | None = None,
    release: Release | None = None,
) -> tuple[list[Box], FilterStats]:
    """
    Remove implausible and noise-sized candidate boxes.

    Args:
        boxes: Raw candidates from detection.
        region: Optional region of interest; boxes not fully inside it
            are dropped.
        config: Layout thresholds.
        release: Called once for every handle of every dropped box.

    Returns:
        Tuple of (kept boxes in input order, statistics).
    """
    config = config or LayoutConfig()
    stats = FilterStats()

    def drop(box: Box) -> None:
        if release is not None:
            for handle in box.handles:
                release(handle)

    candidates: list[Box] = []
    for box in boxes:
        stats.boxes_received += 1
        if not has_plausible_aspect(box, config.max_aspect_ratio):
            stats.rejected_aspect += 1
            drop(box)
        elif not is_valid_box(box, config.normalized_size):
            stats.rejected_invalid += 1
            drop(box)
        elif region is not None and not region.contains(box):
            stats.rejected_region += 1
            drop(box)
        else:
            candidates.append(box)

    if not candidates:
        logger.debug("No boxes left after shape filtering (%d received)", stats.boxes_received)
        return [], stats

    # Specks below 1% of the mean area are safe to discard
    min_area = statistics.mean(b.area for b in candidates) * config.noise_ratio
    kept: list[Box] = []
    for box in candidates:
        if box.area < min_area:
            stats.rejected_noise += 1
            drop(box)
        else:
            kept.append(box)

    stats.boxes_kept = len(kept)
    logger.debug(
        "Filtered boxes: %d kept of %d (aspect=%d, invalid=%d, region=%d, noise=%d)",
        stats.boxes_kept,
        stats.boxes_received,
        stats.rejected_aspect,
        stats.rejected_invalid,
        stats.rejected_region,
        stats.rejected_noise,
    )
    return kept, stats
