"""Pipeline orchestrator: computes each view on first request, then serves it from cache.

The source bitmap is snapshotted on construction. Asking for a view runs the
missing stages of its dependency closure, in order, under a lock; every stage
writes its context slot exactly once.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
import threading
import time
from collections.abc import Generator
from dataclasses import replace
from typing import Any

import numpy as np
from numpy.typing import NDArray

from runseg.bitmap.types import ArrayBitmap, Bitmap
from runseg.config import settings
from runseg.engine.config import SegmentationConfig
from runseg.engine.context import Run, SegmentationContext
from runseg.engine.registry import StageRegistry, StageSpec, get_registry

logger = logging.getLogger(__name__)

GRAYSCALE = "S0.01"
HISTOGRAM = "S0.02"
THRESHOLD = "S0.03"
BINARY = "S0.04"
RUNS = "S1.01"
MERGE = "S1.02"
LABELS = "S1.03"
SEGMENTED = "S2.01"


def register_stages() -> None:
    """Import all stage modules so @stage decorators fire."""
    for layer_name in ["layer0", "layer1", "layer2"]:
        package = importlib.import_module(f"runseg.engine.{layer_name}")
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            importlib.import_module(f"{package.__name__}.{module_name}")


class SegmentationPipeline:
    """Owns one source bitmap and its derived views."""

    def __init__(
        self,
        source: Bitmap,
        config: SegmentationConfig | None = None,
        registry: StageRegistry | None = None,
    ) -> None:
        if registry is None:
            register_stages()
            registry = get_registry()
        self.registry = registry
        self.config = (config or SegmentationConfig.from_settings(settings)).validate()
        self.ctx = SegmentationContext(source=ArrayBitmap.from_bitmap(source), config=self.config)
        self._lock = threading.RLock()

    # --- Views ---

    @property
    def original(self) -> ArrayBitmap:
        return self.ctx.source

    @property
    def grayscale(self) -> ArrayBitmap:
        self.ensure(GRAYSCALE)
        return self.ctx.grayscale

    @property
    def binary(self) -> ArrayBitmap:
        self.ensure(BINARY)
        return self.ctx.binary

    @property
    def segmented(self) -> ArrayBitmap:
        self.ensure(SEGMENTED)
        return self.ctx.segmented

    # --- Intermediate results ---

    @property
    def histogram(self) -> NDArray[np.int64]:
        self.ensure(HISTOGRAM)
        return self.ctx.histogram

    @property
    def threshold(self) -> int:
        self.ensure(THRESHOLD)
        return self.ctx.threshold

    @property
    def runs(self) -> tuple[Run, ...]:
        """Copies of the merged runs; parents point at final roots."""
        self.ensure(MERGE)
        return tuple(replace(run, parent=root) for run, root in zip(self.ctx.runs, self.ctx.roots))

    @property
    def component_count(self) -> int:
        self.ensure(MERGE)
        return self.ctx.component_count

    @property
    def labels(self) -> NDArray[np.int32]:
        self.ensure(LABELS)
        return self.ctx.labels

    # --- Execution ---

    def ensure(self, stage_id: str) -> None:
        """Run whatever part of ``stage_id``'s closure has not run yet."""
        if stage_id in self.ctx.completed_stages:
            return
        computed: list[str] = []
        with self._lock:
            for spec in self.registry.resolve_order({stage_id}):
                if spec.id not in self.ctx.completed_stages:
                    self._run_stage(spec)
                    computed.append(spec.id)
        if computed:
            logger.info(
                "Computed %s for %dx%d source (%s)",
                stage_id,
                self.ctx.width,
                self.ctx.height,
                ", ".join(computed),
            )

    def run(self) -> SegmentationContext:
        """Compute every registered stage."""
        start = time.perf_counter()
        with self._lock:
            ordered = self.registry.resolve_order()
            for spec in ordered:
                if spec.id not in self.ctx.completed_stages:
                    self._run_stage(spec)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %d stages, %d runs, %d components in %.0fms",
            len(ordered),
            len(self.ctx.runs),
            self.ctx.component_count,
            total,
        )
        return self.ctx

    def run_streaming(self) -> Generator[dict[str, Any], None, None]:
        """Compute every registered stage, yielding a progress dict after each.

        Stages already cached report ``status == "cached"``. A failing stage
        reports ``status == "error"`` and its exception is then re-raised.
        """
        ordered = self.registry.resolve_order()
        total = len(ordered)
        for i, spec in enumerate(ordered):
            event = {
                "stage_id": spec.id,
                "description": spec.description,
                "layer": spec.layer.name,
                "index": i,
                "total": total,
                "elapsed_ms": 0.0,
                "status": "cached",
                "error": "",
            }
            failure: Exception | None = None
            # Lock is never held across a yield
            with self._lock:
                if spec.id not in self.ctx.completed_stages:
                    try:
                        self._run_stage(spec)
                    except Exception as e:
                        failure = e
                        event.update(status="error", error=str(e))
                    else:
                        event.update(
                            status="ok",
                            elapsed_ms=round(self.ctx.timings_ms[spec.id], 1),
                        )

            yield event
            if failure is not None:
                raise failure

    def _run_stage(self, spec: StageSpec) -> None:
        t0 = time.perf_counter()
        try:
            spec.fn(self.ctx)
        except Exception as e:
            logger.warning("  %s FAILED: %s", spec.id, e)
            raise
        elapsed = (time.perf_counter() - t0) * 1000
        self.ctx.completed_stages.add(spec.id)
        self.ctx.timings_ms[spec.id] = elapsed
        logger.debug("  %s completed in %.1fms", spec.id, elapsed)


def create_pipeline(source: Bitmap, config: SegmentationConfig | None = None) -> SegmentationPipeline:
    """Factory function for creating a pipeline instance."""
    return SegmentationPipeline(source, config=config)
