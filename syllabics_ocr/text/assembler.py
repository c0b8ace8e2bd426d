"""
Text assembly from grouped, classified boxes.

Each line is read left to right. Word spaces are inferred from the
horizontal gaps between boxes, small boxes are rewritten to their final
form, and boxes shaped like a dot are emitted as a placeholder dot for
the diacritic corrector to attach.
"""

from __future__ import annotations

import logging
import statistics
from collections.abc import Callable, Sequence

from syllabics_ocr.config import TextConfig
from syllabics_ocr.models import Box, Glyph
from syllabics_ocr.text.glyphs import DOT, FINALS

logger = logging.getLogger(__name__)

Classify = Callable[[Box], str]


# =============================================================================
# LINE METRICS
# =============================================================================


def is_dot_shaped(box: Box, mean_area: float, config: TextConfig | None = None) -> bool:
    """Check for a small box that is neither tall nor wide."""
    config = config or TextConfig()
    return (
        box.area < mean_area / config.dot_area_divisor
        and box.height < config.dot_max_aspect * box.width
        and box.width < config.dot_max_aspect * box.height
    )


def mean_gap(boxes: Sequence[Box], config: TextConfig | None = None) -> float:
    """
    Calculate the mean horizontal gap between consecutive boxes.

    A dot belongs either to the syllabic before it or to the one after,
    so for a dot the larger of its two gaps is counted once and the box
    following it is skipped.

    Args:
        boxes: One line of boxes sorted left to right.
        config: Text thresholds.

    Returns:
        The mean gap, or 0.0 for lines with fewer than two boxes.
    """
    if len(boxes) < 2:
        return 0.0

    mean_area = statistics.mean(b.area for b in boxes)
    total_gap = 0.0
    count = 0

    i = 1
    while i < len(boxes):
        box = boxes[i]
        prev = boxes[i - 1]
        prev_gap = max(0, box.x - prev.right)

        if is_dot_shaped(box, mean_area, config):
            next_gap = max(0, boxes[i + 1].x - box.right) if i + 1 < len(boxes) else 0
            total_gap += max(prev_gap, next_gap)
            # The gap to the next box has now been accounted for
            i += 1
        else:
            total_gap += prev_gap

        count += 1
        i += 1

    return total_gap / count


def space_threshold(boxes: Sequence[Box], config: TextConfig | None = None) -> float:
    """Gap above which a word space is inserted before a box."""
    config = config or TextConfig()
    if not boxes:
        return 0.0
    median_width = statistics.median(b.width for b in boxes)
    return (
        max(median_width * config.space_width_factor, mean_gap(boxes, config))
        * config.space_factor
    )


# =============================================================================
# ASSEMBLY
# =============================================================================


def assemble_line(
    boxes: Sequence[Box],
    classify: Classify,
    config: TextConfig | None = None,
) -> list[Glyph]:
    """
    Convert one line of boxes into glyphs.

    Args:
        boxes: One line of boxes sorted left to right.
        classify: Returns the top label for a box. Not called for dots.
        config: Text thresholds.

    Returns:
        Glyphs in reading order.
    """
    config = config or TextConfig()
    if not boxes:
        return []

    mean_area = statistics.mean(b.area for b in boxes)
    threshold = space_threshold(boxes, config)

    glyphs: list[Glyph] = []
    prev_right: int | None = None
    for box in boxes:
        is_dot = is_dot_shaped(box, mean_area, config)
        label = DOT if is_dot else classify(box)

        # If smaller than mean, then it is likely the final and not the
        # full sized syllabic
        symbol = label
        if box.area < mean_area * config.final_ratio and label in FINALS:
            symbol = FINALS[label]

        glyphs.append(
            Glyph(
                symbol=symbol,
                label=label,
                area=box.area,
                line_mean_area=mean_area,
                is_dot=is_dot,
                space_before=prev_right is not None and box.x - prev_right > threshold,
            )
        )
        prev_right = box.right

    return glyphs


def assemble_lines(
    lines: Sequence[Sequence[Box]],
    classify: Classify,
    config: TextConfig | None = None,
) -> list[list[Glyph]]:
    """Assemble every line; empty lines yield an empty glyph list."""
    assembled = [assemble_line(line, classify, config) for line in lines]
    logger.debug(
        "Assembled %d glyphs over %d lines",
        sum(len(glyphs) for glyphs in assembled),
        len(assembled),
    )
    return assembled


def render_text(lines: Sequence[Sequence[Glyph]], config: TextConfig | None = None) -> str:
    """
    Join assembled lines into a single string.

    A line break separates each line from the text before it; leading
    empty lines therefore produce nothing.
    """
    config = config or TextConfig()
    parts: list[str] = []
    for glyphs in lines:
        if parts:
            parts.append(config.line_break)
        for glyph in glyphs:
            if glyph.space_before:
                parts.append(config.word_space)
            parts.append(glyph.symbol)
    return "".join(parts)
