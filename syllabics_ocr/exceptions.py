"""
Exception classes for syllabics-ocr.

All syllabics-ocr exceptions inherit from SyllabicsOCRError,
making it easy to catch all library errors.

The recognition stages themselves never raise for unusual box input:
empty sets, flat histograms and single-glyph lines all have defined
fallbacks. Errors here come from configuration and from the
classification collaborator.

Example:
    >>> try:
    ...     labels = syllabics_ocr.load_labels("classes.json")
    ... except syllabics_ocr.ConfigurationError as e:
    ...     print(f"Bad label file: {e}")
    ... except syllabics_ocr.SyllabicsOCRError as e:
    ...     print(f"syllabics-ocr error: {e}")
"""


class SyllabicsOCRError(Exception):
    """
    Base exception for all syllabics-ocr errors.

    Catch this to handle any syllabics-ocr-specific error.
    """

    pass


class ConfigurationError(SyllabicsOCRError, ValueError):
    """
    Raised for invalid configuration or label files.

    Example:
        >>> LayoutConfig(normalized_size=0)
        ConfigurationError: normalized_size must be >= 1, got 0
    """

    pass


class ClassificationError(SyllabicsOCRError):
    """
    Raised when the glyph classifier returns an unusable result.

    For example a probability vector whose length does not match
    the label set it was trained with.
    """

    pass
