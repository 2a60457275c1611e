"""S0.01 — Grayscale conversion.

Y = round(wr·R + wg·G + wb·B), alpha ignored. Indexed sources go through
their palette first; single-channel sources are copied as-is.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from runseg.bitmap.types import ArrayBitmap, PixelFormat
from runseg.engine.context import SegmentationContext
from runseg.engine.registry import Layer, stage


def luminance(
    rgb: NDArray[np.uint8],
    weights: tuple[float, float, float] = (0.299, 0.587, 0.114),
) -> NDArray[np.uint8]:
    """Weighted sum of the R, G, B channels, rounded half-up into [0, 255]."""
    luma = rgb.astype(np.float64) @ np.asarray(weights, dtype=np.float64)
    return np.clip(np.floor(luma + 0.5), 0, 255).astype(np.uint8)


@stage(
    id="S0.01",
    layer=Layer.REDUCTION,
    description="Convert the source bitmap to luminance",
)
def grayscale(ctx: SegmentationContext) -> None:
    src = ctx.source
    if src.format is PixelFormat.GRAY:
        gray = np.array(src.to_array())
    else:
        gray = luminance(src.rgb_array(), ctx.config.luma_weights)
    ctx.grayscale = ArrayBitmap(gray, PixelFormat.GRAY, copy=False).freeze()
