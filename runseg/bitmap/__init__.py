"""Bitmap contract and adapters."""

from runseg.bitmap.pil import PILBitmap, to_pil
from runseg.bitmap.types import ArrayBitmap, Bitmap, Pixel, PixelFormat

__all__ = [
    "ArrayBitmap",
    "Bitmap",
    "Pixel",
    "PixelFormat",
    "PILBitmap",
    "to_pil",
]
