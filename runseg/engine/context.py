"""SegmentationContext: the state object the stages fill in, one slot per stage.

Image results → ArrayBitmap (frozen once written)
Structural results → runs, roots, labels
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from runseg.bitmap.types import ArrayBitmap
from runseg.engine.config import SegmentationConfig

# Binary pixel values
FOREGROUND = 255
BACKGROUND = 0


@dataclass
class Run:
    """Maximal interval [x_start, x_end) of foreground pixels on row y."""

    x_start: int
    x_end: int
    y: int
    # Index of the parent run in the run sequence; a root stores its own index
    parent: int

    def precedes(self, other: Run) -> bool:
        """True if this run comes first in top-to-bottom, left-to-right order."""
        return (self.y, self.x_start) < (other.y, other.x_start)


@dataclass
class SegmentationContext:
    """Shared state flowing through the stages."""

    # Immutable snapshot of the host's bitmap
    source: ArrayBitmap
    config: SegmentationConfig = field(default_factory=SegmentationConfig)

    # --- Layer 0: intensity reduction ---
    grayscale: ArrayBitmap | None = None
    histogram: NDArray[np.int64] | None = None
    threshold: int | None = None
    binary: ArrayBitmap | None = None

    # --- Layer 1: labeling ---
    # Runs in scan order; parents form the union-find forest
    runs: list[Run] = field(default_factory=list)
    # Root index of every run once all unions are done
    roots: list[int] = field(default_factory=list)
    component_count: int = 0
    # 0 = background, 1..n = components in root order
    labels: NDArray[np.int32] | None = None

    # --- Layer 2: rendering ---
    segmented: ArrayBitmap | None = None

    # --- Pipeline metadata ---
    completed_stages: set[str] = field(default_factory=set)
    timings_ms: dict[str, float] = field(default_factory=dict)

    @property
    def width(self) -> int:
        return self.source.width

    @property
    def height(self) -> int:
        return self.source.height

    @property
    def area(self) -> int:
        return self.width * self.height
