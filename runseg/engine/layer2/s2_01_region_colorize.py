"""S2.01 — Region coloring.

Every component gets one random color: hue uniform in [0, 1), saturation and
brightness uniform in [min, 1). Background stays black. Colors are drawn from
a generator seeded by the config, so equal inputs give equal output.

Two strategies:
- "root_map": colors are bound to roots after all unions, in the order roots
  first appear in the run sequence.
- "traversal": runs are visited in scan order; a run that is its own root
  draws a new "current" color, and every run is painted with the current
  color. Runs of one component that follow another component's root get the
  wrong color; kept for output compatibility only.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray
from skimage.color import hsv2rgb

from runseg.bitmap.types import ArrayBitmap, PixelFormat
from runseg.engine.context import Run, SegmentationContext
from runseg.engine.layer1.s1_02_run_merge import find_root
from runseg.engine.layer1.s1_03_component_labels import root_order
from runseg.engine.registry import Layer, stage

logger = logging.getLogger(__name__)

WHITE = np.array([255, 255, 255], dtype=np.uint8)


def random_colors(
    rng: np.random.Generator,
    n: int,
    min_saturation: float = 0.5,
    min_brightness: float = 0.5,
) -> NDArray[np.uint8]:
    """Draw ``n`` RGB colors, shape (n, 3)."""
    if n == 0:
        return np.zeros((0, 3), dtype=np.uint8)
    hsv = rng.random((n, 3))
    hsv[:, 1] = min_saturation + (1.0 - min_saturation) * hsv[:, 1]
    hsv[:, 2] = min_brightness + (1.0 - min_brightness) * hsv[:, 2]
    rgb = hsv2rgb(hsv[np.newaxis, :, :])[0]
    return np.clip(np.floor(rgb * 255.0 + 0.5), 0, 255).astype(np.uint8)


def colorize_by_root(
    runs: list[Run],
    roots: list[int],
    canvas: NDArray[np.uint8],
    rng: np.random.Generator,
    min_saturation: float = 0.5,
    min_brightness: float = 0.5,
) -> int:
    """Paint each run with its root's color. Returns the number of colors drawn."""
    order = root_order(roots)
    colors = random_colors(rng, len(order), min_saturation, min_brightness)
    for run, root in zip(runs, roots):
        canvas[run.y, run.x_start:run.x_end] = colors[order[root]]
    return len(order)


def colorize_by_traversal(
    runs: list[Run],
    canvas: NDArray[np.uint8],
    rng: np.random.Generator,
    min_saturation: float = 0.5,
    min_brightness: float = 0.5,
) -> int:
    """Paint runs with a running color that changes at each root."""
    current = WHITE
    drawn = 0
    for i, run in enumerate(runs):
        if find_root(runs, i) == i:
            current = random_colors(rng, 1, min_saturation, min_brightness)[0]
            drawn += 1
        canvas[run.y, run.x_start:run.x_end] = current
    return drawn


@stage(
    id="S2.01",
    layer=Layer.RENDERING,
    dependencies=["S1.02"],
    description="Paint each connected component in its own color",
)
def segmented(ctx: SegmentationContext) -> None:
    cfg = ctx.config
    rng = np.random.default_rng(cfg.random_seed)
    canvas = np.zeros((ctx.height, ctx.width, 3), dtype=np.uint8)

    if cfg.color_strategy == "traversal":
        drawn = colorize_by_traversal(
            ctx.runs, canvas, rng, cfg.min_saturation, cfg.min_brightness
        )
    else:
        drawn = colorize_by_root(
            ctx.runs, ctx.roots, canvas, rng, cfg.min_saturation, cfg.min_brightness
        )

    ctx.segmented = ArrayBitmap(canvas, PixelFormat.RGB, copy=False).freeze()
    logger.debug("Colored %d components (%s)", drawn, cfg.color_strategy)
