"""Pillow interop: hosts usually hold their pixels in a ``PIL.Image``."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from runseg.bitmap.types import ArrayBitmap, Pixel, PixelFormat

_MODE_FORMATS = {
    "RGBA": PixelFormat.RGBA,
    "RGB": PixelFormat.RGB,
    "L": PixelFormat.GRAY,
    "1": PixelFormat.GRAY,
    "P": PixelFormat.INDEXED,
}


class PILBitmap:
    """Bitmap view over a Pillow image. Bilevel ("1") images read as 0/255 gray."""

    def __init__(self, image: Image.Image) -> None:
        if image.mode not in _MODE_FORMATS:
            raise ValueError(
                f"Unsupported image mode {image.mode!r}, expected one of {sorted(_MODE_FORMATS)}"
            )
        self.image = image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def format(self) -> PixelFormat:
        return _MODE_FORMATS[self.image.mode]

    @property
    def palette(self) -> NDArray[np.uint8] | None:
        if self.image.mode != "P":
            return None
        raw = self.image.getpalette()
        if raw is None:
            raise ValueError("Indexed image has no palette")
        return np.array(raw, dtype=np.uint8).reshape(-1, 3)

    def get_pixel(self, x: int, y: int) -> Pixel:
        return self.image.getpixel((x, y))

    def set_pixel(self, x: int, y: int, value: Pixel) -> None:
        self.image.putpixel((x, y), value)

    def to_array(self) -> NDArray:
        arr = np.asarray(self.image)
        if self.image.mode == "1":
            return arr.astype(np.uint8) * 255
        return arr


def to_pil(bitmap: ArrayBitmap) -> Image.Image:
    """Render a bitmap as a new Pillow image (pixels are copied)."""
    mode = bitmap.format.value
    if bitmap.width == 0 or bitmap.height == 0:
        return Image.new(mode, (bitmap.width, bitmap.height))

    if bitmap.format is PixelFormat.INDEXED and len(bitmap.palette) > 256:
        raise ValueError(f"Pillow palettes hold at most 256 entries, got {len(bitmap.palette)}")

    arr = np.array(bitmap.to_array(), order="C")
    if bitmap.format is PixelFormat.INDEXED:
        image = Image.fromarray(arr.astype(np.uint8))
        image.putpalette(bitmap.palette[:, :3].tobytes())
        return image
    return Image.fromarray(arr)
