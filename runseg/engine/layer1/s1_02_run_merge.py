"""S1.02 — Union-find merge of runs into connected components.

Two runs touch when they sit on consecutive rows and their x-intervals
overlap by at least one column. Runs on the same row never merge.

The forest lives in ``Run.parent`` (indices into the run list). A union
always hangs the later root (by y, then x_start) under the earlier one, so
every component's root is its topmost-leftmost run.
"""

from __future__ import annotations

import logging

from runseg.engine.context import Run, SegmentationContext
from runseg.engine.registry import Layer, stage

logger = logging.getLogger(__name__)


def find_root(runs: list[Run], index: int) -> int:
    """Root index of ``runs[index]``, halving the path on the way up."""
    while runs[index].parent != index:
        run = runs[index]
        run.parent = runs[run.parent].parent
        index = run.parent
    return index


def union(runs: list[Run], a: int, b: int) -> int:
    """Join the sets of runs ``a`` and ``b``; returns the surviving root."""
    root_a = find_root(runs, a)
    root_b = find_root(runs, b)
    if root_a == root_b:
        return root_a
    if runs[root_b].precedes(runs[root_a]):
        root_a, root_b = root_b, root_a
    runs[root_b].parent = root_a
    return root_a


def are_adjacent(upper: Run, lower: Run) -> bool:
    return (
        upper.y + 1 == lower.y
        and upper.x_start < lower.x_end
        and lower.x_start < upper.x_end
    )


def merge_runs(runs: list[Run]) -> None:
    """Union every adjacent pair of runs in one sweep.

    ``runs`` must be in scan order. ``j`` trails ``i``: it moves on once its
    run lies more than a row above run i, or ends before run i does on the
    row just above (so it cannot reach any later run on i's row).
    """
    i = j = 0
    while i < len(runs):
        upper, lower = runs[j], runs[i]
        if are_adjacent(upper, lower):
            union(runs, j, i)
        if upper.y + 1 < lower.y or (upper.y + 1 == lower.y and upper.x_end < lower.x_end):
            j += 1
        else:
            i += 1


@stage(
    id="S1.02",
    layer=Layer.LABELING,
    dependencies=["S1.01"],
    description="Merge overlapping runs on adjacent rows",
)
def merge(ctx: SegmentationContext) -> None:
    merge_runs(ctx.runs)
    ctx.roots = [find_root(ctx.runs, i) for i in range(len(ctx.runs))]
    ctx.component_count = sum(1 for i, root in enumerate(ctx.roots) if root == i)
    logger.debug("Merged %d runs into %d components", len(ctx.runs), ctx.component_count)
