"""Segmentation configuration: the knobs of the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from runseg.config import Settings

COLOR_STRATEGIES = ("root_map", "traversal")


@dataclass
class SegmentationConfig:
    """Controls grayscale weighting and region coloring."""

    # Pseudorandom seed for region colors
    random_seed: int = 0

    # Luma weights for (red, green, blue), ITU-R BT.601
    luma_weights: tuple[float, float, float] = (0.299, 0.587, 0.114)

    # Lower bounds for random saturation / brightness; upper bound is 1.0
    min_saturation: float = 0.5
    min_brightness: float = 0.5

    # "root_map": one color per root, resolved after all unions.
    # "traversal": new color whenever a visited run is its own root, carried
    # over to the following runs.
    color_strategy: str = "root_map"

    def validate(self) -> SegmentationConfig:
        if self.color_strategy not in COLOR_STRATEGIES:
            raise ValueError(
                f"Unknown color strategy {self.color_strategy!r}, "
                f"expected one of {COLOR_STRATEGIES}"
            )
        if len(self.luma_weights) != 3 or any(w < 0 for w in self.luma_weights):
            raise ValueError(f"Luma weights must be 3 non-negative values: {self.luma_weights}")
        if abs(sum(self.luma_weights) - 1.0) > 1e-6:
            raise ValueError(f"Luma weights must sum to 1.0: {self.luma_weights}")
        for name in ("min_saturation", "min_brightness"):
            value = getattr(self, name)
            if not 0.0 <= value < 1.0:
                raise ValueError(f"{name} must lie in [0, 1): {value}")
        return self

    @classmethod
    def from_settings(cls, settings: Settings) -> SegmentationConfig:
        return cls(
            random_seed=settings.runseg_random_seed,
            color_strategy=settings.runseg_color_strategy,
        ).validate()
