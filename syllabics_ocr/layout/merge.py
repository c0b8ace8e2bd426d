"""
Dot-to-syllabic merging.

Detection sees the dot diacritic above a syllabic as a separate contour.
Two passes fold such dots back into their syllabic:

1. ``merge_dots``: over the whole page, scanning forward in reading
   order and stopping once candidates are too far below the dot.
2. ``merge_grouped_dots``: within each detected line, with no vertical
   cutoff, to catch dots the first pass could not place.

Both passes work on private copies of their input. A merge is only
committed when the merged box is itself valid; otherwise the dot and
the candidate stay separate.
"""

from __future__ import annotations

import logging
import statistics
from collections.abc import Sequence
from dataclasses import dataclass

from syllabics_ocr.config import LayoutConfig
from syllabics_ocr.layout.boxes import is_box_within_x, is_valid_box, merge_boxes, sort_boxes
from syllabics_ocr.models import Box

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================


@dataclass
class MergeStats:
    """Statistics for a dot merge pass."""

    dots_found: int = 0
    dots_merged: int = 0
    merges_rejected: int = 0  # Merged box failed the validity check


@dataclass
class _Medians:
    area: float
    width: float
    height: float

    @classmethod
    def of(cls, boxes: Sequence[Box]) -> _Medians:
        return cls(
            area=statistics.median(b.area for b in boxes),
            width=statistics.median(b.width for b in boxes),
            height=statistics.median(b.height for b in boxes),
        )


# =============================================================================
# HELPERS
# =============================================================================


def _is_dot(box: Box, medians: _Medians, config: LayoutConfig) -> bool:
    # Less than 1/8 of the median area and not a tall sliver
    return (
        box.area < medians.area / config.dot_area_divisor
        and box.height < config.dot_max_aspect * box.width
    )


def _is_small(box: Box, medians: _Medians, config: LayoutConfig) -> bool:
    return (
        box.width < medians.width * config.small_box_factor
        and box.height < medians.height * config.small_box_factor
    )


# =============================================================================
# MERGE PASSES
# =============================================================================


def merge_dots(
    boxes: Sequence[Box],
    config: LayoutConfig | None = None,
) -> tuple[list[Box], MergeStats]:
    """
    Merge dots above syllabics into the box below.

    Args:
        boxes: Filtered boxes in any order.
        config: Layout thresholds.

    Returns:
        Tuple of (surviving and merged boxes, statistics). The order of
        the returned boxes is not significant.
    """
    config = config or LayoutConfig()
    stats = MergeStats()
    working = sort_boxes(boxes)
    if not working:
        return [], stats

    medians = _Medians.of(working)
    result: list[Box] = []

    for i, box in enumerate(working):
        merged = False

        if _is_dot(box, medians, config):
            stats.dots_found += 1
            y_threshold = max(
                box.height * config.vertical_merge_factor,
                medians.height * config.median_height_merge_factor,
            )
            x_threshold = box.width * config.horizontal_merge_factor

            # Sorted top to bottom, so only boxes ahead need checking
            # until they fall beyond the y threshold
            for j in range(i + 1, len(working)):
                candidate = working[j]
                if _is_small(candidate, medians, config):
                    continue

                if candidate.y - box.bottom > y_threshold:
                    break

                if is_box_within_x(box, candidate, x_threshold):
                    combined = merge_boxes(box, candidate)
                    if is_valid_box(combined, config.normalized_size):
                        working[j] = combined
                        merged = True
                        break
                    stats.merges_rejected += 1

        if merged:
            stats.dots_merged += 1
        else:
            result.append(box)

    logger.debug(
        "Sequential merge: %d dots found, %d merged, %d boxes remain",
        stats.dots_found,
        stats.dots_merged,
        len(result),
    )
    return result, stats


def merge_grouped_dots(
    lines: Sequence[Sequence[Box]],
    config: LayoutConfig | None = None,
) -> tuple[list[list[Box]], MergeStats]:
    """
    Merge dots with syllabics within each line.

    Similar to ``merge_dots`` but as the boxes are already grouped by
    line there is no vertical cutoff. A dot may sit above, beside or
    slightly below its syllabic; only candidates lying more than a
    quarter of their own height below the dot are rejected.

    Args:
        lines: Boxes grouped per line, each sorted left to right.
        config: Layout thresholds.

    Returns:
        Tuple of (new line groups, statistics).
    """
    config = config or LayoutConfig()
    stats = MergeStats()
    groups = [list(line) for line in lines]

    for line in groups:
        if not line:
            continue

        medians = _Medians.of(line)
        i = 0
        while i < len(line):
            box = line[i]
            merged = False

            if _is_dot(box, medians, config):
                stats.dots_found += 1
                x_threshold = box.width * config.horizontal_merge_factor

                for j, candidate in enumerate(line):
                    if j == i:
                        continue

                    # Must not be lower than the first 25% of a syllabic
                    tolerance = candidate.height * config.grouped_vertical_tolerance
                    if candidate.y - box.bottom < -tolerance:
                        continue

                    if _is_small(candidate, medians, config):
                        continue

                    if is_box_within_x(box, candidate, x_threshold):
                        combined = merge_boxes(box, candidate)
                        if is_valid_box(combined, config.normalized_size):
                            line[j] = combined
                            del line[i]
                            merged = True
                            break
                        stats.merges_rejected += 1

            if merged:
                # Indices shifted; look at the same position again
                stats.dots_merged += 1
            else:
                i += 1

    logger.debug(
        "Grouped merge: %d dots found, %d merged across %d lines",
        stats.dots_found,
        stats.dots_merged,
        len(groups),
    )
    return groups, stats
