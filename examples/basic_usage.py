#!/usr/bin/env python3
"""
Basic syllabics-ocr Usage Example

This example demonstrates the core workflow:
1. Build boxes from detected contours
2. Recognize text with any labelling function
3. Recognize text with a trained glyph classifier
4. Inspect the layout and statistics
5. Run individual stages
"""

import logging

import numpy as np
from PIL import Image, ImageDraw

from syllabics_ocr import (
    Box,
    LayoutConfig,
    RecognitionConfig,
    Recognizer,
    Region,
    TextConfig,
    recognize,
)
from syllabics_ocr.layout import filter_boxes, find_lines, group_by_line
from syllabics_ocr.text import correct_diacritics


class ConstantModel:
    """Stand-in for a Keras model; always predicts the first label."""

    def predict(self, batch):
        return np.array([[1.0, 0.0]])


def main():
    logging.basicConfig(level=logging.INFO)

    # ─────────────────────────────────────────────────────────────────────────
    # 1. Boxes From Detection
    # ─────────────────────────────────────────────────────────────────────────

    # With OpenCV this would be:
    #   contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    #   boxes = [Box.from_rect(cv2.boundingRect(c), c) for c in contours]
    image = Image.new("L", (120, 60), 255)
    draw = ImageDraw.Draw(image)
    draw.rectangle([0, 0, 39, 39], fill=0)  # syllabic
    draw.rectangle([42, 16, 49, 23], fill=0)  # dot beside it

    boxes = [
        Box.from_rect((0, 0, 40, 40), "contour-0"),
        Box.from_rect((42, 16, 8, 8), "contour-1"),
    ]

    # ─────────────────────────────────────────────────────────────────────────
    # 2. Recognize With A Labelling Function
    # ─────────────────────────────────────────────────────────────────────────

    text = recognize(boxes, lambda box: "ᐊ")
    print(f"Recognized: {text}")  # ᐘ

    # ─────────────────────────────────────────────────────────────────────────
    # 3. Recognize With A Classifier
    # ─────────────────────────────────────────────────────────────────────────

    config = RecognitionConfig(
        layout=LayoutConfig(noise_ratio=0.02),  # Drop slightly larger specks
        text=TextConfig(word_space=" "),  # Single-space words
    )
    recognizer = Recognizer(config=config, release=lambda h: print(f"  released {h}"))

    result = recognizer.recognize_image(
        image, boxes, ConstantModel(), ["ᐊ", "ᐁ"], region=Region(0, 0, 120, 60)
    )

    # ─────────────────────────────────────────────────────────────────────────
    # 4. Inspect Results
    # ─────────────────────────────────────────────────────────────────────────

    print(f"Text: {result.text}")
    print(f"  Before correction: {result.raw_text}")
    print(f"  Lines at rows: {result.lines}")
    print(f"  Boxes kept: {result.stats.filter.boxes_kept}")
    print(f"  Dots attached: {result.stats.correction.attached_right}")
    print(f"  Time: {result.stats.processing_time_ms:.1f} ms")
    print(f"Recognizer: {recognizer.get_info()}")

    # ─────────────────────────────────────────────────────────────────────────
    # 5. Individual Stages
    # ─────────────────────────────────────────────────────────────────────────

    filtered, stats = filter_boxes(boxes)
    lines = find_lines(filtered)
    for i, group in enumerate(group_by_line(filtered, lines)):
        print(f"Line {i}: {[box.to_dict() for box in group]}")

    print(correct_diacritics("ᐁᐤ"))  # ᐍ


if __name__ == "__main__":
    main()
