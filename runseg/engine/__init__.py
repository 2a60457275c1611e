"""runseg segmentation engine."""

from runseg.engine.config import SegmentationConfig
from runseg.engine.context import Run, SegmentationContext
from runseg.engine.pipeline import SegmentationPipeline, create_pipeline
from runseg.engine.registry import Layer, get_registry, stage

__all__ = [
    "stage",
    "Layer",
    "get_registry",
    "Run",
    "SegmentationConfig",
    "SegmentationContext",
    "SegmentationPipeline",
    "create_pipeline",
]
