"""
Pytest configuration and fixtures for syllabics-ocr tests.
"""

import itertools

import pytest


@pytest.fixture(scope="session")
def sample_config():
    """Return a sample RecognitionConfig for testing."""
    from syllabics_ocr import RecognitionConfig

    return RecognitionConfig()


@pytest.fixture
def make_box():
    """
    Factory for boxes with a unique string handle each.

    Handles look like "h0", "h1", ... so ownership can be checked after
    merging.
    """
    from syllabics_ocr import Box

    counter = itertools.count()

    def factory(x, y, width, height):
        return Box(x, y, width, height, handles=(f"h{next(counter)}",))

    return factory
