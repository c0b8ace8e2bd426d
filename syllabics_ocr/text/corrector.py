"""
Diacritic correction on assembled text.

Dots that survived both merge passes appear in the text as standalone
dot glyphs. This pass fuses them into the neighbouring syllabic where
that syllabic has a dotted form, and collapses two-stroke digraphs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from syllabics_ocr.text.glyphs import (
    ASPIRATE,
    ASPIRATE_PARTS,
    ATTACHABLE_DOT,
    DOT,
    DOT_LEFT,
    DOT_RIGHT,
    DOUBLE_DOT_FINAL,
)

logger = logging.getLogger(__name__)

ASPIRATE_PATTERN = re.compile("([" + "".join(sorted(ASPIRATE_PARTS)) + r"])\1")


@dataclass
class CorrectionStats:
    """Statistics for diacritic correction."""

    double_dots: int = 0
    attached_right: int = 0
    attached_left: int = 0
    standalone_dots: int = 0
    aspirates: int = 0


def _attach_dots(chars: list[str], stats: CorrectionStats) -> None:
    i = 0
    while i < len(chars):
        if chars[i] == ATTACHABLE_DOT:
            if i > 0 and chars[i - 1] in DOT_RIGHT:
                chars[i - 1] = DOT_RIGHT[chars[i - 1]]
                del chars[i]
                stats.attached_right += 1
                continue
            if i + 1 < len(chars) and chars[i + 1] in DOT_LEFT:
                chars[i + 1] = DOT_LEFT[chars[i + 1]]
                del chars[i]
                stats.attached_left += 1
                continue
            stats.standalone_dots += 1
        i += 1


def correct_diacritics_with_stats(text: str) -> tuple[str, CorrectionStats]:
    """
    Fix dots and digraphs in assembled text.

    Two dots in a row are the double-dot final. Any other dot is
    attached to the syllabic before it if that has a dotted form, else
    to the syllabic after it, else kept as a standalone dot. Finally
    two identical aspirate strokes become the aspirate final.

    Args:
        text: Output of the text assembler.

    Returns:
        Tuple of (corrected text, statistics).
    """
    stats = CorrectionStats()

    stats.double_dots = text.count(DOT + DOT)
    text = text.replace(DOT + DOT, DOUBLE_DOT_FINAL)
    text = text.replace(DOT, ATTACHABLE_DOT)

    chars = list(text)
    _attach_dots(chars, stats)
    text = "".join(chars).replace(ATTACHABLE_DOT, DOT)

    text, stats.aspirates = ASPIRATE_PATTERN.subn(ASPIRATE, text)

    logger.debug(
        "Diacritics: %d double dots, %d attached right, %d attached left, "
        "%d standalone, %d aspirates",
        stats.double_dots,
        stats.attached_right,
        stats.attached_left,
        stats.standalone_dots,
        stats.aspirates,
    )
    return text, stats


def correct_diacritics(text: str) -> str:
    """Fix dots and digraphs in assembled text."""
    return correct_diacritics_with_stats(text)[0]
