"""S0.02 — Intensity histogram: 256 bins, counts sum to width × height."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from runseg.engine.context import SegmentationContext
from runseg.engine.registry import Layer, stage

N_BINS = 256


def build_histogram(gray: NDArray) -> NDArray[np.int64]:
    values = np.asarray(gray).ravel()
    if values.size and (values.min() < 0 or values.max() >= N_BINS):
        raise ValueError(
            f"Intensities must lie in [0, {N_BINS - 1}], got [{values.min()}, {values.max()}]"
        )
    return np.bincount(values.astype(np.intp), minlength=N_BINS).astype(np.int64)


@stage(
    id="S0.02",
    layer=Layer.REDUCTION,
    dependencies=["S0.01"],
    description="Tally grayscale intensities into 256 bins",
)
def histogram(ctx: SegmentationContext) -> None:
    ctx.histogram = build_histogram(ctx.grayscale.to_array())
    ctx.histogram.flags.writeable = False
