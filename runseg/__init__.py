"""runseg: Otsu binarization and run-based connected-component coloring."""

from runseg.bitmap import ArrayBitmap, Bitmap, PILBitmap, PixelFormat, to_pil
from runseg.engine import SegmentationConfig, SegmentationPipeline, create_pipeline

__version__ = "0.1.0"

__all__ = [
    "ArrayBitmap",
    "Bitmap",
    "PILBitmap",
    "PixelFormat",
    "to_pil",
    "SegmentationConfig",
    "SegmentationPipeline",
    "create_pipeline",
]
