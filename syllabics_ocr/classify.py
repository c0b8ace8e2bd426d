"""
Glyph classification adapter.

The classifier itself is an external pretrained model that takes a
normalized 42x42 single-channel bitmap and returns a probability vector
over a fixed label set. This module prepares that bitmap from a box and
its source image, and turns the model output back into a label:

1. Crop the box region and binarize it with an Otsu threshold
2. Mask out anything not inside the box's own contours
3. Scale the longer side to the input size and pad to a white square
4. Pick the label with the highest probability

Any object with a Keras-style ``predict(batch)`` method can serve as the
classifier.

Example:
    >>> from syllabics_ocr.classify import GlyphLabeler, load_labels
    >>> labeler = GlyphLabeler(image, model, load_labels("classes.json"))
    >>> labeler(box)
    'ᐊ'
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import numpy as np
from PIL import Image, ImageDraw

from syllabics_ocr.exceptions import ClassificationError, ConfigurationError
from syllabics_ocr.models import Box

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

NORMALIZED_SIZE = 42
BACKGROUND = 255  # Glyphs are dark on white


# =============================================================================
# CLASSIFIER PROTOCOL
# =============================================================================


class GlyphClassifier(Protocol):
    """A model mapping a batch of glyph bitmaps to probability vectors."""

    def predict(self, batch: np.ndarray) -> Any:
        """
        Args:
            batch: Float array of shape ``(1, size, size, 1)`` in [0, 1].

        Returns:
            Array-like of shape ``(1, n_labels)``.
        """
        ...


# =============================================================================
# BITMAP EXTRACTION
# =============================================================================


def otsu_threshold(pixels: np.ndarray) -> int:
    """Compute the Otsu threshold of an 8-bit greyscale array."""
    hist, _ = np.histogram(pixels.ravel(), bins=256, range=(0, 256))
    total = pixels.size
    sum_total = float(np.dot(np.arange(256), hist))
    sum_background = 0.0
    weight_background = 0.0
    best_variance = 0.0
    threshold = 0
    for t in range(256):
        weight_background += hist[t]
        if weight_background == 0:
            continue
        weight_foreground = total - weight_background
        if weight_foreground == 0:
            break
        sum_background += t * hist[t]
        mean_background = sum_background / weight_background
        mean_foreground = (sum_total - sum_background) / weight_foreground
        variance = weight_background * weight_foreground * (mean_background - mean_foreground) ** 2
        if variance > best_variance:
            best_variance = variance
            threshold = t
    return threshold


def _handle_points(handle: Any) -> np.ndarray | None:
    """Interpret a handle as a sequence of points, e.g. an OpenCV contour."""
    points = np.asarray(handle)
    if not np.issubdtype(points.dtype, np.number) or points.size < 2 or points.size % 2:
        return None
    return points.reshape(-1, 2)


def contours_mask(box: Box) -> Image.Image | None:
    """
    Draw the interior of a box's contour handles into a mask.

    Compressed contours of one pixel wide strokes reduce to one or two
    points; those are drawn as a point or a line.

    Returns:
        A mode "L" mask the size of the box (255 inside a contour), or
        None if none of the handles describe a contour.
    """
    mask = Image.new("L", (box.width, box.height), 0)
    draw = ImageDraw.Draw(mask)
    drawn = 0
    for handle in box.handles:
        points = _handle_points(handle)
        if points is None:
            continue
        outline = [(int(x) - box.x, int(y) - box.y) for x, y in points.tolist()]
        if len(outline) >= 3:
            draw.polygon(outline, fill=255, outline=255)
        elif len(outline) == 2:
            draw.line(outline, fill=255)
        else:
            draw.point(outline, fill=255)
        drawn += 1
    return mask if drawn else None


def extract_glyph(image: Image.Image, box: Box, size: int = NORMALIZED_SIZE) -> Image.Image:
    """
    Extract a box from an image as a normalized classifier bitmap.

    Args:
        image: Source image (any mode; converted to greyscale).
        box: Region to extract. Its handles, when they are point
            sequences, mask out neighbouring ink inside the rectangle.
        size: Output width and height.

    Returns:
        A ``size`` x ``size`` mode "L" image, glyph centred on white.
    """
    crop = image.crop((box.x, box.y, box.right, box.bottom)).convert("L")
    gray = np.asarray(crop, dtype=np.uint8)
    binary = np.where(gray > otsu_threshold(gray), 255, 0).astype(np.uint8)

    mask = contours_mask(box)
    if mask is not None:
        binary = np.where(np.asarray(mask) > 0, binary, BACKGROUND).astype(np.uint8)

    scale = min(size / box.width, size / box.height)
    scaled_size = (max(1, int(box.width * scale)), max(1, int(box.height * scale)))
    glyph = Image.fromarray(binary).resize(scaled_size, Image.Resampling.BICUBIC)

    canvas = Image.new("L", (size, size), BACKGROUND)
    canvas.paste(glyph, ((size - scaled_size[0]) // 2, (size - scaled_size[1]) // 2))
    return canvas


def to_model_input(bitmap: Image.Image) -> np.ndarray:
    """Convert a bitmap to a ``(1, h, w, 1)`` float32 batch in [0, 1]."""
    pixels = np.asarray(bitmap.convert("L"), dtype=np.float32) / 255.0
    return pixels.reshape(1, pixels.shape[0], pixels.shape[1], 1)


# =============================================================================
# LABEL SELECTION
# =============================================================================


def top_label(probabilities: Any, labels: Sequence[str]) -> tuple[str, float]:
    """
    Pick the most probable label.

    Args:
        probabilities: Probability vector (or a batch of one).
        labels: Label set the model was trained with.

    Returns:
        Tuple of (label, confidence). Ties go to the earliest label.

    Raises:
        ClassificationError: If the vector does not match the label set.
    """
    scores = np.asarray(probabilities, dtype=np.float64).reshape(-1)
    if scores.size == 0 or scores.size != len(labels):
        raise ClassificationError(
            f"Classifier returned {scores.size} scores for {len(labels)} labels"
        )
    index = int(np.argmax(scores))
    return labels[index], float(scores[index])


def load_labels(path: str | Path) -> list[str]:
    """
    Load the label set shipped alongside a trained model.

    Args:
        path: JSON file containing a list of glyph strings.

    Raises:
        ConfigurationError: If the file is not a non-empty JSON list of
            strings.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Label file {path} is not valid JSON: {e}") from e

    if not isinstance(data, list) or not data or not all(isinstance(s, str) for s in data):
        raise ConfigurationError(f"Label file {path} must contain a non-empty list of strings")

    logger.debug("Loaded %d labels from %s", len(data), path)
    return data


# =============================================================================
# LABELER
# =============================================================================


@dataclass
class GlyphLabeler:
    """
    Callable labelling boxes of one image with a glyph classifier.

    Attributes:
        image: Source image the boxes were detected in.
        classifier: Model with a Keras-style ``predict``.
        labels: Label set matching the model output.
        size: Classifier input size.
    """

    image: Image.Image
    classifier: GlyphClassifier
    labels: Sequence[str]
    size: int = NORMALIZED_SIZE

    _gray: Image.Image = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Convert the source image once for all boxes."""
        self._gray = self.image.convert("L")

    def predict(self, box: Box) -> tuple[str, float]:
        """Classify a box, returning (label, confidence)."""
        bitmap = extract_glyph(self._gray, box, self.size)
        prediction = self.classifier.predict(to_model_input(bitmap))
        label, confidence = top_label(prediction, self.labels)
        logger.debug(
            "Box (%d, %d, %d, %d) -> %s (%.2f)",
            box.x,
            box.y,
            box.width,
            box.height,
            label,
            confidence,
        )
        return label, confidence

    def __call__(self, box: Box) -> str:
        return self.predict(box)[0]
