"""S1.03 — Label image: 0 for background, 1..n for components in root order."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from runseg.engine.context import Run, SegmentationContext
from runseg.engine.registry import Layer, stage


def root_order(roots: list[int]) -> dict[int, int]:
    """Map each distinct root to its 0-based rank of first appearance."""
    order: dict[int, int] = {}
    for root in roots:
        if root not in order:
            order[root] = len(order)
    return order


def label_image(runs: list[Run], roots: list[int], width: int, height: int) -> NDArray[np.int32]:
    labels = np.zeros((height, width), dtype=np.int32)
    order = root_order(roots)
    for run, root in zip(runs, roots):
        labels[run.y, run.x_start:run.x_end] = order[root] + 1
    return labels


@stage(
    id="S1.03",
    layer=Layer.LABELING,
    dependencies=["S1.02"],
    description="Paint component ids into a label image",
)
def labels(ctx: SegmentationContext) -> None:
    ctx.labels = label_image(ctx.runs, ctx.roots, ctx.width, ctx.height)
    ctx.labels.flags.writeable = False
