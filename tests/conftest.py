"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from runseg.bitmap.types import ArrayBitmap, PixelFormat


def rgba_from_mask(mask, fg=(255, 255, 255), bg=(0, 0, 0)) -> ArrayBitmap:
    """White-on-black (by default) RGBA bitmap from a boolean mask."""
    mask = np.asarray(mask, dtype=bool)
    pixels = np.zeros(mask.shape + (4,), dtype=np.uint8)
    pixels[..., :3] = bg
    pixels[mask, :3] = fg
    pixels[..., 3] = 255
    return ArrayBitmap(pixels, PixelFormat.RGBA)


def gray_bitmap(values) -> ArrayBitmap:
    return ArrayBitmap(np.asarray(values, dtype=np.uint8), PixelFormat.GRAY)


# Masks for the canonical shapes

def two_squares_mask() -> np.ndarray:
    mask = np.zeros((10, 10), dtype=bool)
    mask[1:4, 1:4] = True
    mask[6:9, 5:8] = True
    return mask


def staircase_mask() -> np.ndarray:
    mask = np.zeros((3, 8), dtype=bool)
    mask[0, 0:3] = True
    mask[1, 2:5] = True
    mask[2, 4:7] = True
    return mask


def late_member_mask() -> np.ndarray:
    """Left column spans rows 0-2; a second region starts at row 1.

    In scan order the left column's third run follows the second region's
    root.
    """
    mask = np.zeros((3, 4), dtype=bool)
    mask[0:3, 0] = True
    mask[1, 2] = True
    return mask


@pytest.fixture
def black_bitmap() -> ArrayBitmap:
    return rgba_from_mask(np.zeros((10, 10), dtype=bool))


@pytest.fixture
def white_bitmap() -> ArrayBitmap:
    return rgba_from_mask(np.ones((10, 10), dtype=bool))


@pytest.fixture
def two_squares_bitmap() -> ArrayBitmap:
    return rgba_from_mask(two_squares_mask())


@pytest.fixture
def staircase_bitmap() -> ArrayBitmap:
    return rgba_from_mask(staircase_mask())


@pytest.fixture
def two_cluster_bitmap() -> ArrayBitmap:
    values = np.full((8, 8), 10, dtype=np.uint8)
    values[:, 4:] = 200
    return gray_bitmap(values)


@pytest.fixture
def random_mask() -> np.ndarray:
    rng = np.random.default_rng(1234)
    return rng.random((40, 50)) < 0.45
