"""
Text stages: assembling glyphs from classified boxes and correcting
diacritics in the result.

Example:
    >>> from syllabics_ocr.text import assemble_lines, correct_diacritics, render_text
    >>> glyphs = assemble_lines(groups, classify)
    >>> correct_diacritics(render_text(glyphs))
    'ᐘ'
"""

from syllabics_ocr.text.assembler import (
    assemble_line,
    assemble_lines,
    is_dot_shaped,
    mean_gap,
    render_text,
    space_threshold,
)
from syllabics_ocr.text.corrector import (
    CorrectionStats,
    correct_diacritics,
    correct_diacritics_with_stats,
)
from syllabics_ocr.text.glyphs import (
    ASPIRATE,
    ATTACHABLE_DOT,
    DOT,
    DOT_LEFT,
    DOT_RIGHT,
    DOUBLE_DOT_FINAL,
    FINALS,
)

__all__ = [
    # Assembly
    "assemble_line",
    "assemble_lines",
    "is_dot_shaped",
    "mean_gap",
    "render_text",
    "space_threshold",
    # Correction
    "CorrectionStats",
    "correct_diacritics",
    "correct_diacritics_with_stats",
    # Glyph tables
    "ASPIRATE",
    "ATTACHABLE_DOT",
    "DOT",
    "DOT_LEFT",
    "DOT_RIGHT",
    "DOUBLE_DOT_FINAL",
    "FINALS",
]
