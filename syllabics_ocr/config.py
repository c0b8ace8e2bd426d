"""
Configuration for syllabics recognition.

Every numeric heuristic used by the layout and text stages lives here
so it can be tuned without touching the algorithms. The defaults are
the values the recognizer was tuned with.
"""

from dataclasses import dataclass, field

from syllabics_ocr.exceptions import ConfigurationError


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")


def _require_ratio(name: str, value: float) -> None:
    if value <= 0.0 or value > 1.0:
        raise ConfigurationError(f"{name} must be between 0.0 and 1.0, got {value}")


@dataclass
class LayoutConfig:
    """
    Thresholds for box filtering, dot merging and line detection.

    Example:
        >>> config = RecognitionConfig(
        ...     layout=LayoutConfig(horizontal_merge_factor=1.5)
        ... )
    """

    # Box filter
    max_aspect_ratio: float = 25.0  # Longer/thinner boxes are never syllabics
    normalized_size: int = 42  # Classifier input size; boxes must survive scaling to it
    noise_ratio: float = 0.01  # Drop boxes below this fraction of the mean area

    # Dot detection (relative to the median area of the set being merged)
    dot_area_divisor: float = 8.0
    dot_max_aspect: float = 3.0  # height < dot_max_aspect * width

    # Sequential merge
    vertical_merge_factor: float = 3.0  # Times the dot's own height
    median_height_merge_factor: float = 0.7  # Times the median height
    horizontal_merge_factor: float = 1.25  # Times the dot's width, either side
    small_box_factor: float = 0.5  # Candidates below half the median size are skipped

    # Grouped merge
    grouped_vertical_tolerance: float = 0.25  # Fraction of candidate height

    # Line collapse
    line_distance_divisor: float = 4.0
    line_height_factor: float = 0.75

    def __post_init__(self):
        """Validate configuration."""
        if self.max_aspect_ratio < 1.0:
            raise ConfigurationError(
                f"max_aspect_ratio must be >= 1.0, got {self.max_aspect_ratio}"
            )
        if self.normalized_size < 1:
            raise ConfigurationError(f"normalized_size must be >= 1, got {self.normalized_size}")
        _require_ratio("noise_ratio", self.noise_ratio)
        _require_ratio("small_box_factor", self.small_box_factor)
        for name in (
            "dot_area_divisor",
            "dot_max_aspect",
            "vertical_merge_factor",
            "median_height_merge_factor",
            "horizontal_merge_factor",
            "line_distance_divisor",
            "line_height_factor",
        ):
            _require_positive(name, getattr(self, name))
        if self.grouped_vertical_tolerance < 0:
            raise ConfigurationError(
                f"grouped_vertical_tolerance must be >= 0, got {self.grouped_vertical_tolerance}"
            )


@dataclass
class TextConfig:
    """
    Thresholds for turning grouped boxes into text.
    """

    # Dot detection (relative to the mean area of the line)
    dot_area_divisor: float = 8.0
    dot_max_aspect: float = 2.5  # In both directions

    # Word spacing
    space_width_factor: float = 0.5  # Times the median box width
    space_factor: float = 1.5

    # Boxes smaller than this fraction of the line mean become finals
    final_ratio: float = 0.7

    word_space: str = "  "
    line_break: str = "\n"

    def __post_init__(self):
        """Validate configuration."""
        _require_positive("dot_area_divisor", self.dot_area_divisor)
        _require_positive("dot_max_aspect", self.dot_max_aspect)
        _require_positive("space_width_factor", self.space_width_factor)
        _require_positive("space_factor", self.space_factor)
        _require_ratio("final_ratio", self.final_ratio)
        if not self.word_space:
            raise ConfigurationError("word_space must not be empty")
        if not self.line_break:
            raise ConfigurationError("line_break must not be empty")


@dataclass
class RecognitionConfig:
    """
    Configuration for a recognition run.

    All options have sensible defaults. Create a config only
    if you need to customize behavior.

    Example:
        >>> config = RecognitionConfig(correct_diacritics=False)
        >>> recognizer = Recognizer(config=config)
    """

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    text: TextConfig = field(default_factory=TextConfig)

    # Fuse loose dots into neighbouring syllabics after assembly
    correct_diacritics: bool = True
