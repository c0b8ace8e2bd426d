"""
Text-line detection and grouping.

Lines are found from a coverage histogram: for every pixel row, the
summed width of all boxes spanning that row. Rows through the middle
of a line of syllabics light up strongly, the gaps between lines do
not. Peaks are extracted with a hysteresis threshold of one standard
deviation, then peaks too close together to be separate lines are
collapsed.
"""

from __future__ import annotations

import logging
import statistics
from collections.abc import Sequence

from syllabics_ocr.config import LayoutConfig
from syllabics_ocr.models import Box

logger = logging.getLogger(__name__)


# =============================================================================
# HISTOGRAM
# =============================================================================


def build_histogram(boxes: Sequence[Box]) -> list[int]:
    """
    Build the per-row coverage histogram for a set of boxes.

    The histogram runs from row 0 to the lowest box bottom edge.
    """
    height = max((b.bottom for b in boxes), default=0)
    histogram = [0] * height
    for box in boxes:
        for row in range(box.y, box.bottom):
            histogram[row] += box.width
    return histogram


def find_peaks(histogram: Sequence[float]) -> list[int]:
    """
    Find the peaks in a 1-D signal.

    Uses the population standard deviation as a hysteresis threshold
    to ride out jitter: a peak starts once the signal rises a threshold
    above the last valley and ends once it drops a threshold below the
    peak. One index is returned per excursion, at its maximum (first
    occurrence on a plateau).
    """
    if not histogram:
        return []

    threshold = statistics.pstdev(histogram)
    if threshold == 0:
        # Flat signal, nothing stands out
        return []

    peaks: list[int] = []
    looking_for_peak = False
    current_peak = 0.0
    current_valley = 0.0

    for i, value in enumerate(histogram):
        if looking_for_peak:
            if value <= max(0, current_peak - threshold):
                looking_for_peak = False
                current_valley = value

            if value > current_peak:
                current_peak = value
                peaks[-1] = i
        else:
            if value >= current_valley + threshold:
                looking_for_peak = True
                current_peak = value
                peaks.append(i)

            if value < current_valley:
                current_valley = value

    return peaks


def collapse_lines(
    lines: Sequence[int],
    histogram: Sequence[float],
    threshold: float,
) -> list[int]:
    """
    Merge adjacent lines that are not more than ``threshold`` apart.

    Of each such pair, the line with the larger histogram value is kept
    (the later one on a tie).
    """
    result = list(lines)
    i = 1
    while i < len(result):
        if result[i] - result[i - 1] <= threshold:
            if histogram[result[i]] < histogram[result[i - 1]]:
                del result[i]
            else:
                del result[i - 1]
            # The survivor now sits at i - 1; compare it with the next line
            continue
        i += 1
    return result


def find_lines(boxes: Sequence[Box], config: LayoutConfig | None = None) -> list[int]:
    """
    Identify text lines from a set of syllabic boxes.

    Args:
        boxes: Filtered boxes (before dot merging).
        config: Layout thresholds.

    Returns:
        Strictly ascending list of line row positions.
    """
    config = config or LayoutConfig()
    histogram = build_histogram(boxes)
    peaks = find_peaks(histogram)
    if not peaks:
        logger.debug("No lines found in histogram of height %d", len(histogram))
        return []

    # Distance from the top of the image counts for the first line
    distances = [peaks[0]] + [b - a for a, b in zip(peaks, peaks[1:])]
    mean_distance = statistics.mean(distances)
    mean_height = statistics.mean(b.height for b in boxes)
    threshold = min(
        mean_distance / config.line_distance_divisor,
        mean_height * config.line_height_factor,
    )

    lines = collapse_lines(peaks, histogram, threshold)
    logger.debug(
        "Found %d lines (%d peaks, collapse threshold %.1f)",
        len(lines),
        len(peaks),
        threshold,
    )
    return lines


# =============================================================================
# GROUPING
# =============================================================================


def _is_strictly_ascending(lines: Sequence[float]) -> bool:
    return all(a < b for a, b in zip(lines, lines[1:]))


def _nearest_line(mid: float, lines: Sequence[float], ascending: bool) -> int:
    best = 0
    best_distance = abs(lines[0] - mid)
    for i in range(1, len(lines)):
        distance = abs(lines[i] - mid)
        if distance > best_distance:
            if ascending:
                # Distances only grow from here on
                break
            continue
        best = i
        best_distance = distance
    return best


def group_by_line(boxes: Sequence[Box], lines: Sequence[float]) -> list[list[Box]]:
    """
    Group boxes to their nearest line.

    Each box goes to the line closest to its vertical centre; each
    group is then sorted left to right by horizontal centre.

    Args:
        boxes: Boxes to group.
        lines: Line positions, expected strictly ascending as returned
            by ``find_lines``. Other orderings are tolerated but logged.

    Returns:
        One list of boxes per line. With no lines, a single group
        holding every box.
    """
    # Edge case, no lines detected
    if not lines:
        return [list(boxes)]

    ascending = _is_strictly_ascending(lines)
    if not ascending:
        logger.warning(
            "Line positions are not strictly ascending (%s); using full nearest-line scan",
            list(lines),
        )

    groups: list[list[Box]] = [[] for _ in lines]
    for box in boxes:
        groups[_nearest_line(box.center_y, lines, ascending)].append(box)

    for group in groups:
        group.sort(key=lambda b: b.center_x)

    return groups
