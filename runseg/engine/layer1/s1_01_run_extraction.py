"""S1.01 — Run extraction.

Each row is scanned left to right; a run is a maximal stretch of foreground
pixels [x_start, x_end). Runs come out top-to-bottom, left-to-right, each
starting as its own root.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from runseg.engine.context import FOREGROUND, Run, SegmentationContext
from runseg.engine.registry import Layer, stage

logger = logging.getLogger(__name__)


def extract_runs(mask: NDArray[np.bool_]) -> list[Run]:
    """Runs of True pixels in a 2-D boolean mask, in scan order."""
    mask = np.asarray(mask, dtype=bool)
    if mask.ndim != 2:
        raise ValueError(f"Mask must be 2-D, got shape {mask.shape}")

    runs: list[Run] = []
    pad = np.zeros(1, dtype=np.int8)
    for y, row in enumerate(mask):
        # +1 where a run opens, -1 one past where it closes
        edges = np.diff(np.concatenate((pad, row.astype(np.int8), pad)))
        starts = np.flatnonzero(edges == 1)
        ends = np.flatnonzero(edges == -1)
        for x_start, x_end in zip(starts, ends):
            runs.append(Run(int(x_start), int(x_end), y, parent=len(runs)))
    return runs


@stage(
    id="S1.01",
    layer=Layer.LABELING,
    dependencies=["S0.04"],
    description="Extract horizontal foreground runs row by row",
)
def runs(ctx: SegmentationContext) -> None:
    ctx.runs = extract_runs(ctx.binary.to_array() == FOREGROUND)
    logger.debug("Extracted %d runs from %dx%d binary", len(ctx.runs), ctx.width, ctx.height)
