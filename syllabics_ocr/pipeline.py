"""
Recognition pipeline orchestrator.

This module runs the recognition stages in order:
1. Box filtering (implausible shapes, region of interest, noise)
2. Line detection on the filtered boxes
3. Sequential dot merging over the whole page
4. Grouping boxes by line
5. Grouped dot merging within each line
6. Text assembly from classifier labels
7. Diacritic correction

Every stage is a plain function over data owned by the run, so callers
that need progress reporting or cancellation can drive the stages
themselves and stop between any two of them.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from PIL import Image

from syllabics_ocr.classify import GlyphClassifier, GlyphLabeler
from syllabics_ocr.config import RecognitionConfig
from syllabics_ocr.layout.boxes import FilterStats, filter_boxes
from syllabics_ocr.layout.lines import find_lines, group_by_line
from syllabics_ocr.layout.merge import MergeStats, merge_dots, merge_grouped_dots
from syllabics_ocr.models import Box, Glyph, Region
from syllabics_ocr.text.assembler import Classify, assemble_lines, render_text
from syllabics_ocr.text.corrector import CorrectionStats, correct_diacritics_with_stats

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================


@dataclass
class RecognitionStats:
    """Statistics for a single recognition run."""

    filter: FilterStats = field(default_factory=FilterStats)
    sequential_merge: MergeStats = field(default_factory=MergeStats)
    grouped_merge: MergeStats = field(default_factory=MergeStats)
    correction: CorrectionStats = field(default_factory=CorrectionStats)
    lines_detected: int = 0
    glyphs_emitted: int = 0
    spaces_inserted: int = 0
    processing_time_ms: float = 0.0


@dataclass
class RecognitionResult:
    """
    Result of recognizing one image.

    ``raw_text`` is the assembled text before diacritic correction;
    ``lines`` and ``groups`` expose the detected layout for debugging.
    """

    text: str
    raw_text: str
    lines: list[int]
    groups: list[list[Box]]
    glyphs: list[list[Glyph]]
    stats: RecognitionStats

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the result
        """
        return {
            "text": self.text,
            "raw_text": self.raw_text,
            "lines": list(self.lines),
            "groups": [[box.to_dict() for box in group] for group in self.groups],
            "stats": {
                "boxes_received": self.stats.filter.boxes_received,
                "boxes_kept": self.stats.filter.boxes_kept,
                "dots_merged": self.stats.sequential_merge.dots_merged
                + self.stats.grouped_merge.dots_merged,
                "lines_detected": self.stats.lines_detected,
                "glyphs_emitted": self.stats.glyphs_emitted,
                "processing_time_ms": self.stats.processing_time_ms,
            },
        }


# =============================================================================
# RECOGNIZER
# =============================================================================


@dataclass
class Recognizer:
    """
    Turns detected glyph boxes into syllabics text.

    Attributes:
        config: Thresholds for every stage.
        release: Called exactly once for every detection handle, either
            when its box is filtered out or once the text is assembled
            (or assembly fails). Use it to free native contour memory.

    Example:
        >>> recognizer = Recognizer()
        >>> result = recognizer.recognize(boxes, classify)
        >>> print(result.text)
    """

    config: RecognitionConfig = field(default_factory=RecognitionConfig)
    release: Callable[[Any], None] | None = None

    def recognize(
        self,
        boxes: Iterable[Box],
        classify: Classify,
        region: Region | None = None,
    ) -> RecognitionResult:
        """
        Run every stage over one set of detected boxes.

        Args:
            boxes: Glyph candidates from detection.
            classify: Returns the top classifier label for a box.
            region: Optional region of interest.

        Returns:
            RecognitionResult; its text is empty when no box survives
            filtering.
        """
        start_time = time.time()
        stats = RecognitionStats()
        layout = self.config.layout

        # Stage 1: Filtering
        filtered, stats.filter = filter_boxes(boxes, region, layout, self.release)

        # Handle edge case of no boxes found by just finishing
        if not filtered:
            stats.processing_time_ms = (time.time() - start_time) * 1000
            logger.info("No glyph candidates in %d boxes", stats.filter.boxes_received)
            return RecognitionResult(
                text="", raw_text="", lines=[], groups=[], glyphs=[], stats=stats
            )

        # Boxes currently owning the surviving handles; released even if a
        # later stage (usually the classifier) raises
        survivors: Sequence[Sequence[Box]] = [filtered]
        try:
            # Stage 2: Line detection (on the unmerged boxes)
            lines = find_lines(filtered, layout)
            stats.lines_detected = len(lines)

            # Stage 3: Merge dots above syllabics with the syllabic below
            merged, stats.sequential_merge = merge_dots(filtered, layout)
            survivors = [merged]

            # Stage 4: Group by nearest line
            grouped = group_by_line(merged, lines)

            # Stage 5: More aggressive merging now that lines are known
            groups, stats.grouped_merge = merge_grouped_dots(grouped, layout)
            survivors = groups

            # Stage 6: Assembly
            glyphs = assemble_lines(groups, classify, self.config.text)
            raw_text = render_text(glyphs, self.config.text)
            stats.glyphs_emitted = sum(len(line) for line in glyphs)
            stats.spaces_inserted = sum(g.space_before for line in glyphs for g in line)
        finally:
            self._release_all(survivors)

        # Stage 7: Diacritic correction
        text = raw_text
        if self.config.correct_diacritics:
            text, stats.correction = correct_diacritics_with_stats(raw_text)

        stats.processing_time_ms = (time.time() - start_time) * 1000
        logger.info(
            "Recognized %d glyphs on %d lines from %d boxes in %.1f ms",
            stats.glyphs_emitted,
            len(groups),
            stats.filter.boxes_received,
            stats.processing_time_ms,
        )

        return RecognitionResult(
            text=text,
            raw_text=raw_text,
            lines=lines,
            groups=groups,
            glyphs=glyphs,
            stats=stats,
        )

    def recognize_image(
        self,
        image: Image.Image,
        boxes: Iterable[Box],
        classifier: GlyphClassifier,
        labels: Sequence[str],
        region: Region | None = None,
    ) -> RecognitionResult:
        """
        Recognize boxes detected in ``image`` with a glyph classifier.

        Args:
            image: Image the boxes were detected in.
            boxes: Glyph candidates from detection.
            classifier: Model with a Keras-style ``predict``.
            labels: Label set matching the model output.
            region: Optional region of interest.
        """
        labeler = GlyphLabeler(
            image, classifier, labels, size=self.config.layout.normalized_size
        )
        return self.recognize(boxes, labeler, region)

    def _release_all(self, groups: Sequence[Sequence[Box]]) -> None:
        if self.release is None:
            return
        for group in groups:
            for box in group:
                for handle in box.handles:
                    self.release(handle)

    def get_info(self) -> dict[str, Any]:
        """Get recognizer configuration information."""
        layout = self.config.layout
        text = self.config.text
        return {
            "normalized_size": layout.normalized_size,
            "max_aspect_ratio": layout.max_aspect_ratio,
            "noise_ratio": layout.noise_ratio,
            "final_ratio": text.final_ratio,
            "space_factor": text.space_factor,
            "correct_diacritics": self.config.correct_diacritics,
            "releases_handles": self.release is not None,
        }


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def recognize(
    boxes: Iterable[Box],
    classify: Classify,
    region: Region | None = None,
    config: RecognitionConfig | None = None,
) -> str:
    """
    Recognize syllabics text from detected boxes.

    Args:
        boxes: Glyph candidates from detection.
        classify: Returns the top classifier label for a box.
        region: Optional region of interest.
        config: Optional configuration.

    Returns:
        The recognized text; lines separated by line breaks and words
        by two spaces.
    """
    recognizer = Recognizer(config=config or RecognitionConfig())
    return recognizer.recognize(boxes, classify, region).text
