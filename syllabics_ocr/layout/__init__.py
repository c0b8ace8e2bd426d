"""
Geometric layout stages: filtering, dot merging and line grouping.

Example:
    >>> from syllabics_ocr.layout import filter_boxes, find_lines, group_by_line, merge_dots
    >>> kept, _ = filter_boxes(boxes)
    >>> lines = find_lines(kept)
    >>> merged, _ = merge_dots(kept)
    >>> groups = group_by_line(merged, lines)
"""

from syllabics_ocr.layout.boxes import (
    FilterStats,
    filter_boxes,
    has_plausible_aspect,
    is_box_within_x,
    is_valid_box,
    merge_boxes,
    sort_boxes,
)
from syllabics_ocr.layout.lines import (
    build_histogram,
    collapse_lines,
    find_lines,
    find_peaks,
    group_by_line,
)
from syllabics_ocr.layout.merge import (
    MergeStats,
    merge_dots,
    merge_grouped_dots,
)

__all__ = [
    # Boxes
    "FilterStats",
    "filter_boxes",
    "has_plausible_aspect",
    "is_box_within_x",
    "is_valid_box",
    "merge_boxes",
    "sort_boxes",
    # Merging
    "MergeStats",
    "merge_dots",
    "merge_grouped_dots",
    # Lines
    "build_histogram",
    "collapse_lines",
    "find_lines",
    "find_peaks",
    "group_by_line",
]
