"""
syllabics-ocr: Reconstruct Cree syllabics text from glyph detections.

Upstream, an image is segmented into glyph-candidate boxes and each box
is classified by a pretrained model. This library does the assembly in
between: it filters noise, fuses dot diacritics into their syllabics,
finds text lines, infers word spacing and finals, and corrects the
dots left over.

Example:
    >>> import syllabics_ocr
    >>> boxes = [syllabics_ocr.Box.from_rect(cv2.boundingRect(c), c) for c in contours]
    >>> text = syllabics_ocr.recognize(boxes, classify)

    >>> # With a Keras-style model and its label file
    >>> recognizer = syllabics_ocr.Recognizer()
    >>> labels = syllabics_ocr.load_labels("classes.json")
    >>> result = recognizer.recognize_image(image, boxes, model, labels)
    >>> print(result.text)
"""

from syllabics_ocr.classify import (
    GlyphClassifier,
    GlyphLabeler,
    extract_glyph,
    load_labels,
    to_model_input,
    top_label,
)
from syllabics_ocr.config import LayoutConfig, RecognitionConfig, TextConfig
from syllabics_ocr.exceptions import (
    ClassificationError,
    ConfigurationError,
    SyllabicsOCRError,
)
from syllabics_ocr.models import Box, Glyph, Region
from syllabics_ocr.pipeline import (
    RecognitionResult,
    RecognitionStats,
    Recognizer,
    recognize,
)

__version__ = "0.1.0"
__all__ = [
    # Main API
    "recognize",
    "Recognizer",
    "RecognitionResult",
    "RecognitionStats",
    # Configuration
    "RecognitionConfig",
    "LayoutConfig",
    "TextConfig",
    # Models
    "Box",
    "Region",
    "Glyph",
    # Classification
    "GlyphClassifier",
    "GlyphLabeler",
    "extract_glyph",
    "load_labels",
    "to_model_input",
    "top_label",
    # Exceptions
    "SyllabicsOCRError",
    "ConfigurationError",
    "ClassificationError",
]
