"""
End-to-end tests for the recognition pipeline.

Boxes are built by hand in the shapes detection produces; the classifier
is a lookup keyed on box position so every expected label is explicit.
"""

import json
from collections import Counter

import numpy as np
import pytest
from PIL import Image, ImageDraw

from syllabics_ocr import (
    Box,
    ClassificationError,
    RecognitionConfig,
    Recognizer,
    Region,
    recognize,
)


def classify_by_position(labels):
    """Build a classifier returning ``labels[(x, y)]`` for each box."""

    def classify(box):
        return labels[(box.x, box.y)]

    return classify


def side_dot_boxes(make_box):
    """A syllabic with a dot to its right, which no merge pass joins."""
    return [make_box(0, 0, 40, 40), make_box(42, 16, 8, 8)]


class TestRecognize:
    """Tests for Recognizer.recognize."""

    def test_side_dot_attached_by_correction(self, make_box):
        classify = classify_by_position({(0, 0): "ᐊ"})

        result = Recognizer().recognize(side_dot_boxes(make_box), classify)

        assert result.raw_text == "ᐊᐤ"
        assert result.text == "ᐘ"
        assert result.lines == [16]
        assert result.stats.correction.attached_right == 1

    def test_dot_above_merged_before_classification(self, make_box):
        """The dot and syllabic reach the classifier as a single box."""
        seen = []

        def classify(box):
            seen.append(box)
            return "ᐘ" if len(box.handles) == 2 else "ᐊ"

        boxes = [make_box(16, 0, 8, 8), make_box(0, 12, 40, 40)]

        result = Recognizer().recognize(boxes, classify)

        assert result.text == "ᐘ"
        assert seen == [Box(0, 0, 40, 52)]
        assert seen[0].handles == ("h0", "h1")
        assert result.stats.sequential_merge.dots_merged == 1

    def test_lines_and_word_space(self, make_box):
        labels = {
            (0, 0): "ᐊ",
            (45, 0): "ᐁ",
            (150, 0): "ᐃ",
            (0, 100): "ᐅ",
            (45, 100): "ᐊ",
        }
        boxes = [make_box(x, y, 40, 40) for x, y in labels]

        result = Recognizer().recognize(boxes, classify_by_position(labels))

        assert result.text == "ᐊᐁ  ᐃ\nᐅᐊ"
        assert result.lines == [0, 100]
        assert result.stats.lines_detected == 2
        assert result.stats.glyphs_emitted == 5
        assert result.stats.spaces_inserted == 1

    def test_input_order_irrelevant(self, make_box):
        labels = {(0, 0): "ᐊ", (45, 0): "ᐁ", (0, 100): "ᐅ"}
        boxes = [make_box(x, y, 40, 40) for x, y in labels]

        result = Recognizer().recognize(reversed(boxes), classify_by_position(labels))

        assert result.text == "ᐊᐁ\nᐅ"

    def test_empty_input(self):
        result = Recognizer().recognize([], classify_by_position({}))

        assert result.text == ""
        assert result.groups == []
        assert result.stats.filter.boxes_received == 0

    def test_region_filters_boxes(self, make_box):
        boxes = side_dot_boxes(make_box) + [make_box(200, 0, 40, 40)]
        classify = classify_by_position({(0, 0): "ᐊ", (200, 0): "ᐁ"})

        result = Recognizer().recognize(boxes, classify, Region(0, 0, 60, 60))

        assert result.text == "ᐘ"
        assert result.stats.filter.rejected_region == 1

    def test_nothing_inside_region(self, make_box):
        result = Recognizer().recognize(
            side_dot_boxes(make_box), classify_by_position({}), Region(100, 100, 10, 10)
        )

        assert result.text == ""

    def test_correction_disabled(self, make_box):
        config = RecognitionConfig(correct_diacritics=False)
        classify = classify_by_position({(0, 0): "ᐊ"})

        result = Recognizer(config).recognize(side_dot_boxes(make_box), classify)

        assert result.text == "ᐊᐤ"
        assert result.text == result.raw_text


class TestHandleRelease:
    """Every detection handle is released exactly once."""

    def test_each_handle_released_once(self, make_box):
        released = []
        boxes = [
            make_box(16, 0, 8, 8),  # dot above, merged
            make_box(0, 12, 40, 40),
            make_box(100, 100, 1, 1),  # noise
            make_box(0, 200, 200, 4),  # ruling line
        ]

        Recognizer(release=released.append).recognize(boxes, lambda box: "ᐘ")

        assert Counter(released) == Counter({"h0": 1, "h1": 1, "h2": 1, "h3": 1})

    def test_released_when_everything_filtered(self, make_box):
        released = []
        boxes = [make_box(0, 0, 200, 4)]

        Recognizer(release=released.append).recognize(boxes, classify_by_position({}))

        assert released == ["h0"]

    def test_released_when_classifier_fails(self, make_box):
        """Surviving handles are still released if the classifier raises."""
        released = []
        image = Image.new("L", (120, 60), 255)

        class MismatchedModel:
            def predict(self, batch):
                return np.array([[0.2, 0.3, 0.5]])

        boxes = [make_box(0, 0, 40, 40), make_box(60, 0, 40, 40)]
        recognizer = Recognizer(release=released.append)
        with pytest.raises(ClassificationError):
            recognizer.recognize_image(image, boxes, MismatchedModel(), ["ᐊ", "ᐁ"])

        assert sorted(released) == ["h0", "h1"]

    def test_merged_handles_released_when_classifier_fails(self, make_box):
        released = []
        boxes = [make_box(16, 0, 8, 8), make_box(0, 12, 40, 40), make_box(100, 100, 1, 1)]

        def classify(box):
            raise ClassificationError("model unavailable")

        with pytest.raises(ClassificationError):
            Recognizer(release=released.append).recognize(boxes, classify)

        assert Counter(released) == Counter({"h0": 1, "h1": 1, "h2": 1})


class TestRecognitionResult:
    """Tests for RecognitionResult serialization."""

    def test_to_dict(self, make_box):
        classify = classify_by_position({(0, 0): "ᐊ"})
        result = Recognizer().recognize(side_dot_boxes(make_box), classify)

        data = result.to_dict()

        assert data["text"] == "ᐘ"
        assert data["raw_text"] == "ᐊᐤ"
        assert data["groups"] == [
            [
                {"x": 0, "y": 0, "width": 40, "height": 40},
                {"x": 42, "y": 16, "width": 8, "height": 8},
            ]
        ]
        assert data["stats"]["boxes_kept"] == 2
        assert data["stats"]["dots_merged"] == 0
        assert data["stats"]["glyphs_emitted"] == 2
        json.dumps(data, ensure_ascii=False)


class TestRecognizeImage:
    """Tests for Recognizer.recognize_image."""

    def test_with_classifier(self, make_box):
        image = Image.new("RGB", (80, 60), "white")
        draw = ImageDraw.Draw(image)
        draw.rectangle([5, 5, 34, 34], fill="black")
        draw.rectangle([42, 16, 49, 23], fill="black")

        class Model:
            calls = 0

            def predict(self, batch):
                Model.calls += 1
                return np.array([[0.9, 0.1]])

        result = Recognizer().recognize_image(
            image, side_dot_boxes(make_box), Model(), ["ᐊ", "ᐁ"]
        )

        assert result.text == "ᐘ"
        # The dot is never sent to the classifier
        assert Model.calls == 1


class TestInfo:
    """Tests for Recognizer.get_info."""

    def test_get_info(self):
        info = Recognizer(release=print).get_info()

        assert info["normalized_size"] == 42
        assert info["correct_diacritics"] is True
        assert info["releases_handles"] is True


class TestConvenienceFunction:
    """Tests for the module-level recognize()."""

    def test_recognize(self, make_box):
        classify = classify_by_position({(0, 0): "ᐊ"})

        assert recognize(side_dot_boxes(make_box), classify) == "ᐘ"

    def test_recognize_with_config(self, make_box):
        classify = classify_by_position({(0, 0): "ᐊ"})
        config = RecognitionConfig(correct_diacritics=False)

        assert recognize(side_dot_boxes(make_box), classify, config=config) == "ᐊᐤ"
