"""S0.04 — Binarization: foreground (255) iff intensity > threshold, else 0."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from runseg.bitmap.types import ArrayBitmap, PixelFormat
from runseg.engine.context import BACKGROUND, FOREGROUND, SegmentationContext
from runseg.engine.registry import Layer, stage


def binarize(gray: NDArray[np.uint8], threshold: int) -> NDArray[np.uint8]:
    return np.where(np.asarray(gray) > threshold, FOREGROUND, BACKGROUND).astype(np.uint8)


@stage(
    id="S0.04",
    layer=Layer.REDUCTION,
    dependencies=["S0.01", "S0.03"],
    description="Split grayscale into black and white at the threshold",
)
def binary(ctx: SegmentationContext) -> None:
    pixels = binarize(ctx.grayscale.to_array(), ctx.threshold)
    ctx.binary = ArrayBitmap(pixels, PixelFormat.GRAY, copy=False).freeze()
