"""S0.03 — Otsu threshold.

For every cut t, low = {v ≤ t}, high = {v > t}. Between-class variance
σ²(t) = n_low · n_high · (μ_high − μ_low)². The first t with the largest
σ² wins. Class counts and sums are carried along as t grows, so the scan
is a single pass over the histogram.

If no cut leaves both classes non-empty (uniform or empty image) the
threshold is 0.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from runseg.engine.context import SegmentationContext
from runseg.engine.registry import Layer, stage

logger = logging.getLogger(__name__)


def otsu_threshold(histogram: NDArray[np.int64] | list[int]) -> int:
    counts = [int(c) for c in histogram]
    if len(counts) != 256:
        raise ValueError(f"Histogram must have 256 bins, got {len(counts)}")
    if any(c < 0 for c in counts):
        raise ValueError("Histogram counts must be non-negative")

    count_low = 0
    count_high = sum(counts)
    sum_low = 0
    sum_high = sum(t * c for t, c in enumerate(counts))

    best_threshold = 0
    best_variance = 0.0
    for t, c in enumerate(counts):
        count_low += c
        count_high -= c
        sum_low += t * c
        sum_high -= t * c
        if count_high == 0:
            break
        if count_low == 0:
            continue

        diff = sum_high / count_high - sum_low / count_low
        variance = count_low * count_high * diff * diff
        if variance > best_variance:
            best_variance = variance
            best_threshold = t

    return best_threshold


@stage(
    id="S0.03",
    layer=Layer.REDUCTION,
    dependencies=["S0.02"],
    description="Pick the intensity cut maximizing between-class variance",
)
def threshold(ctx: SegmentationContext) -> None:
    ctx.threshold = otsu_threshold(ctx.histogram)
    logger.debug("Otsu threshold %d over %d pixels", ctx.threshold, ctx.area)
