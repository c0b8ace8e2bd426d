"""Tests for box geometry and filtering."""

import pytest

from syllabics_ocr.config import LayoutConfig
from syllabics_ocr.layout.boxes import (
    filter_boxes,
    has_plausible_aspect,
    is_box_within_x,
    is_valid_box,
    merge_boxes,
    sort_boxes,
)
from syllabics_ocr.models import Box, Region

# =============================================================================
# GEOMETRY TESTS
# =============================================================================


class TestMergeBoxes:
    """Tests for merge_boxes."""

    def test_bounding_rectangle(self):
        """Merged box is the minimal rectangle containing both."""
        merged = merge_boxes(Box(10, 0, 8, 8), Box(0, 12, 40, 40))

        assert (merged.x, merged.y, merged.width, merged.height) == (0, 0, 40, 52)

    def test_handles_concatenated(self):
        """Merged box owns the handles of both operands."""
        merged = merge_boxes(Box(0, 0, 5, 5, handles=("a",)), Box(10, 10, 5, 5, handles=("b", "c")))

        assert merged.handles == ("a", "b", "c")

    def test_merge_is_associative(self, make_box):
        """Merge order does not change the rectangle or the handle set."""
        a = make_box(0, 0, 10, 10)
        b = make_box(30, 5, 10, 20)
        c = make_box(12, 40, 6, 6)

        left = merge_boxes(merge_boxes(a, b), c)
        right = merge_boxes(a, merge_boxes(b, c))
        other = merge_boxes(merge_boxes(c, a), b)

        assert left == right == other
        for merged in (left, right, other):
            assert sorted(merged.handles) == ["h0", "h1", "h2"]
            assert len(set(merged.handles)) == len(merged.handles)

    def test_operands_unchanged(self):
        """Merging returns a new box and leaves operands alone."""
        a = Box(0, 0, 5, 5, handles=("a",))
        b = Box(10, 10, 5, 5, handles=("b",))
        merge_boxes(a, b)

        assert a.handles == ("a",)
        assert b.handles == ("b",)


class TestIsValidBox:
    """Tests for is_valid_box."""

    def test_square_is_valid(self):
        assert is_valid_box(Box(0, 0, 1, 1))

    def test_vanishes_when_scaled(self):
        """A 50x1 box scales to 42x0.84 and is invalid."""
        assert not is_valid_box(Box(0, 0, 50, 1))

    def test_thin_but_visible(self):
        """A 42x1 box keeps its single row."""
        assert is_valid_box(Box(0, 0, 42, 1))

    def test_custom_size(self):
        """Validity depends on the normalization size."""
        assert not is_valid_box(Box(0, 0, 42, 1), size=21)


class TestAspect:
    """Tests for has_plausible_aspect."""

    def test_limit_is_inclusive(self):
        assert has_plausible_aspect(Box(0, 0, 25, 1))
        assert has_plausible_aspect(Box(0, 0, 1, 25))

    def test_too_wide_or_tall(self):
        assert not has_plausible_aspect(Box(0, 0, 26, 1))
        assert not has_plausible_aspect(Box(0, 0, 1, 26))


class TestIsBoxWithinX:
    """Tests for is_box_within_x."""

    def test_inside(self):
        assert is_box_within_x(Box(10, 0, 5, 5), Box(0, 10, 40, 40), 0)

    def test_within_threshold(self):
        """A box hanging over the edge is accepted within the threshold."""
        assert is_box_within_x(Box(38, 0, 8, 8), Box(0, 10, 40, 40), 6)

    def test_beyond_threshold(self):
        assert not is_box_within_x(Box(38, 0, 8, 8), Box(0, 10, 40, 40), 5)


class TestSortBoxes:
    """Tests for sort_boxes."""

    def test_sorts_by_y_then_x(self):
        boxes = [Box(20, 5, 5, 5), Box(0, 10, 5, 5), Box(10, 5, 5, 5)]

        assert [(b.x, b.y) for b in sort_boxes(boxes)] == [(10, 5), (20, 5), (0, 10)]

    def test_returns_new_list(self):
        boxes = [Box(0, 10, 5, 5), Box(0, 0, 5, 5)]
        sort_boxes(boxes)

        assert boxes[0].y == 10


# =============================================================================
# FILTER TESTS
# =============================================================================


class TestFilterBoxes:
    """Tests for filter_boxes."""

    def test_empty_input(self):
        """No boxes gives no boxes and no error."""
        kept, stats = filter_boxes([])

        assert kept == []
        assert stats.boxes_received == 0

    def test_rejects_long_rectangles(self, make_box):
        """Ruling lines are dropped."""
        kept, stats = filter_boxes([make_box(0, 0, 30, 30), make_box(0, 50, 300, 2)])

        assert len(kept) == 1
        assert stats.rejected_aspect == 1

    def test_rejects_invalid_boxes(self, make_box):
        """Boxes vanishing under scaling are dropped."""
        config = LayoutConfig(max_aspect_ratio=100)
        kept, stats = filter_boxes([make_box(0, 0, 30, 30), make_box(0, 50, 50, 1)], config=config)

        assert len(kept) == 1
        assert stats.rejected_invalid == 1

    def test_rejects_noise(self, make_box):
        """Boxes under 1% of the mean area are dropped."""
        boxes = [make_box(i * 50, 0, 40, 40) for i in range(3)] + [make_box(200, 0, 1, 1)]
        kept, stats = filter_boxes(boxes)

        assert len(kept) == 3
        assert stats.rejected_noise == 1
        assert all(b.width == 40 for b in kept)

    def test_noise_boundary_kept(self, make_box):
        """A box of exactly 1% of the mean area is not noise."""
        # Mean area (3 * 133 + 1) / 4 = 100, so the cutoff is exactly 1
        boxes = [make_box(i * 50, 0, 7, 19) for i in range(3)] + [make_box(200, 0, 1, 1)]
        kept, stats = filter_boxes(boxes)

        assert len(kept) == 4
        assert stats.rejected_noise == 0

    def test_region_restricts_boxes(self, make_box):
        """Only boxes fully inside the region are kept."""
        boxes = [make_box(0, 0, 30, 30), make_box(100, 100, 30, 30)]
        kept, stats = filter_boxes(boxes, region=Region(90, 90, 50, 50))

        assert [(b.x, b.y) for b in kept] == [(100, 100)]
        assert stats.rejected_region == 1

    def test_no_region_passes_everything(self, make_box):
        boxes = [make_box(0, 0, 30, 30), make_box(100, 100, 30, 30)]
        kept, _ = filter_boxes(boxes, region=None)

        assert len(kept) == 2

    def test_everything_outside_region(self, make_box):
        """An empty result is returned without computing statistics."""
        kept, stats = filter_boxes([make_box(0, 0, 30, 30)], region=Region(500, 500, 10, 10))

        assert kept == []
        assert stats.boxes_kept == 0

    def test_release_called_for_dropped_boxes(self, make_box):
        """Handles of dropped boxes are released, kept ones are not."""
        released = []
        boxes = [make_box(0, 0, 30, 30), make_box(0, 50, 300, 2)]
        filter_boxes(boxes, release=released.append)

        assert released == ["h1"]

    @pytest.mark.parametrize("width,height", [(40, 40), (10, 200), (200, 10)])
    def test_kept_boxes_are_valid(self, make_box, width, height):
        """Kept boxes always pass the aspect and validity checks."""
        kept, _ = filter_boxes([make_box(0, 0, width, height)])

        for box in kept:
            assert is_valid_box(box)
            assert has_plausible_aspect(box)
