"""Stage registry: every stage is a standalone function registered via decorator.

Usage:
    @stage(id="S0.04", layer=Layer.REDUCTION, dependencies=["S0.01", "S0.03"])
    def binarize_stage(ctx: SegmentationContext) -> None:
        ctx.binary = ...

A stage reads what its dependencies wrote into the context and writes its own
slot. The pipeline runs the dependency closure of whatever view is requested.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from runseg.engine.context import SegmentationContext

logger = logging.getLogger(__name__)


class Layer(enum.IntEnum):
    REDUCTION = 0
    LABELING = 1
    RENDERING = 2


@dataclass
class StageSpec:
    id: str
    layer: Layer
    fn: Callable[["SegmentationContext"], None]
    dependencies: list[str] = field(default_factory=list)
    description: str = ""


class StageRegistry:
    """Registry of stages keyed by id."""

    def __init__(self) -> None:
        self._stages: dict[str, StageSpec] = {}

    def register(self, spec: StageSpec) -> None:
        if spec.id in self._stages:
            raise ValueError(f"Duplicate stage ID: {spec.id}")
        self._stages[spec.id] = spec
        logger.debug("Registered stage %s (%s)", spec.id, spec.layer.name)

    def get(self, stage_id: str) -> StageSpec:
        try:
            return self._stages[stage_id]
        except KeyError:
            raise KeyError(f"Unknown stage ID: {stage_id}") from None

    def get_layer(self, layer: Layer) -> list[StageSpec]:
        return sorted((s for s in self._stages.values() if s.layer == layer), key=lambda s: s.id)

    def resolve_order(self, targets: set[str] | None = None) -> list[StageSpec]:
        """Dependencies-first order of the targets' closure (all stages if None).

        Siblings are visited in id order so the result is stable.
        """
        if targets is None:
            targets = set(self._stages)

        ordered: list[StageSpec] = []
        done: set[str] = set()
        visiting: set[str] = set()

        def visit(stage_id: str, path: tuple[str, ...]) -> None:
            if stage_id in done:
                return
            if stage_id in visiting:
                cycle = " -> ".join(path + (stage_id,))
                raise ValueError(f"Circular dependency detected: {cycle}")
            spec = self.get(stage_id)
            visiting.add(stage_id)
            for dep in sorted(spec.dependencies):
                visit(dep, path + (stage_id,))
            visiting.discard(stage_id)
            done.add(stage_id)
            ordered.append(spec)

        for stage_id in sorted(targets):
            visit(stage_id, ())
        return ordered

    @property
    def count(self) -> int:
        return len(self._stages)


# Module-level singleton
_registry = StageRegistry()


def get_registry() -> StageRegistry:
    return _registry


def stage(
    *,
    id: str,
    layer: Layer,
    dependencies: list[str] | None = None,
    description: str = "",
):
    """Decorator to register a stage function."""

    def decorator(fn: Callable[["SegmentationContext"], None]):
        _registry.register(
            StageSpec(
                id=id,
                layer=layer,
                fn=fn,
                dependencies=dependencies or [],
                description=description,
            )
        )
        return fn

    return decorator
