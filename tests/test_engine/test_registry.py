"""Tests for the stage registry."""

import pytest

from runseg.engine.context import SegmentationContext
from runseg.engine.pipeline import register_stages
from runseg.engine.registry import Layer, StageRegistry, StageSpec, get_registry


def _noop(ctx: SegmentationContext) -> None:
    pass


def test_register_and_get():
    reg = StageRegistry()
    spec = StageSpec(id="S0.01", layer=Layer.REDUCTION, fn=_noop)
    reg.register(spec)
    assert reg.get("S0.01") is spec
    assert reg.count == 1


def test_duplicate_id_rejected():
    reg = StageRegistry()
    reg.register(StageSpec(id="S0.01", layer=Layer.REDUCTION, fn=_noop))
    with pytest.raises(ValueError, match="Duplicate"):
        reg.register(StageSpec(id="S0.01", layer=Layer.REDUCTION, fn=_noop))


def test_unknown_id():
    reg = StageRegistry()
    with pytest.raises(KeyError):
        reg.get("S9.99")


def test_get_layer():
    reg = StageRegistry()
    reg.register(StageSpec(id="S1.01", layer=Layer.LABELING, fn=_noop))
    reg.register(StageSpec(id="S0.01", layer=Layer.REDUCTION, fn=_noop))
    layer0 = reg.get_layer(Layer.REDUCTION)
    assert [s.id for s in layer0] == ["S0.01"]


def test_resolve_order_only_closure():
    reg = StageRegistry()
    reg.register(StageSpec(id="S0.01", layer=Layer.REDUCTION, fn=_noop))
    reg.register(StageSpec(id="S0.02", layer=Layer.REDUCTION, fn=_noop, dependencies=["S0.01"]))
    reg.register(StageSpec(id="S2.01", layer=Layer.RENDERING, fn=_noop, dependencies=["S0.02"]))
    reg.register(StageSpec(id="S1.01", layer=Layer.LABELING, fn=_noop))
    assert [s.id for s in reg.resolve_order({"S0.02"})] == ["S0.01", "S0.02"]
    assert [s.id for s in reg.resolve_order(None)] == ["S0.01", "S0.02", "S1.01", "S2.01"]


def test_resolve_order_diamond_runs_shared_dependency_once():
    reg = StageRegistry()
    reg.register(StageSpec(id="A", layer=Layer.REDUCTION, fn=_noop))
    reg.register(StageSpec(id="B", layer=Layer.REDUCTION, fn=_noop, dependencies=["A"]))
    reg.register(StageSpec(id="C", layer=Layer.REDUCTION, fn=_noop, dependencies=["A"]))
    reg.register(StageSpec(id="D", layer=Layer.REDUCTION, fn=_noop, dependencies=["C", "B"]))
    assert [s.id for s in reg.resolve_order({"D"})] == ["A", "B", "C", "D"]


def test_resolve_order_cycle():
    reg = StageRegistry()
    reg.register(StageSpec(id="A", layer=Layer.REDUCTION, fn=_noop, dependencies=["B"]))
    reg.register(StageSpec(id="B", layer=Layer.REDUCTION, fn=_noop, dependencies=["A"]))
    with pytest.raises(ValueError, match="Circular"):
        reg.resolve_order({"A"})


def test_resolve_order_missing_dependency():
    reg = StageRegistry()
    reg.register(StageSpec(id="A", layer=Layer.REDUCTION, fn=_noop, dependencies=["Z"]))
    with pytest.raises(KeyError):
        reg.resolve_order({"A"})


def test_global_registry_has_all_stages():
    register_stages()
    reg = get_registry()
    assert [s.id for s in reg.get_layer(Layer.REDUCTION)] == ["S0.01", "S0.02", "S0.03", "S0.04"]
    assert [s.id for s in reg.get_layer(Layer.LABELING)] == ["S1.01", "S1.02", "S1.03"]
    assert [s.id for s in reg.get_layer(Layer.RENDERING)] == ["S2.01"]
    order = [s.id for s in reg.resolve_order({"S2.01"})]
    assert order == ["S0.01", "S0.02", "S0.03", "S0.04", "S1.01", "S1.02", "S2.01"]
