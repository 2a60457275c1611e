"""Pixel-addressable bitmaps: the only boundary between the engine and its host.

The host application decodes, encodes and displays images; the engine only
reads and writes pixels through the small ``Bitmap`` contract below.
"""

from __future__ import annotations

import enum
from typing import Protocol, Union, runtime_checkable

import numpy as np
from numpy.typing import NDArray

Pixel = Union[int, tuple[int, ...]]


class PixelFormat(str, enum.Enum):
    RGBA = "RGBA"
    RGB = "RGB"
    GRAY = "L"
    INDEXED = "P"

    @property
    def channels(self) -> int:
        """Trailing channel count; 0 means a 2-D array of scalars."""
        return _CHANNELS[self]


_CHANNELS = {
    PixelFormat.RGBA: 4,
    PixelFormat.RGB: 3,
    PixelFormat.GRAY: 0,
    PixelFormat.INDEXED: 0,
}


@runtime_checkable
class Bitmap(Protocol):
    """What the engine needs from an image: dimensions and per-pixel access."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    @property
    def format(self) -> PixelFormat: ...

    def get_pixel(self, x: int, y: int) -> Pixel: ...

    def set_pixel(self, x: int, y: int, value: Pixel) -> None: ...


class ArrayBitmap:
    """Bitmap backed by a numpy array of shape (H, W) or (H, W, C), dtype uint8.

    Indexed bitmaps carry a (N, 3) or (N, 4) uint8 palette; their pixels are
    palette indices. Once frozen, every write raises ``ValueError``.
    """

    def __init__(
        self,
        pixels: NDArray,
        fmt: PixelFormat | str,
        palette: NDArray | None = None,
        *,
        copy: bool = True,
    ) -> None:
        fmt = PixelFormat(fmt)
        arr = np.array(pixels, copy=True) if copy else np.asarray(pixels)
        _check_pixels(arr, fmt)
        if fmt is PixelFormat.INDEXED:
            palette = _check_palette(arr, palette)
        elif palette is not None:
            raise ValueError(f"Palette given for non-indexed format {fmt.value}")
        self._pixels = arr
        self._format = fmt
        self._palette = palette

    @classmethod
    def blank(cls, width: int, height: int, fmt: PixelFormat | str) -> ArrayBitmap:
        if width < 0 or height < 0:
            raise ValueError(f"Negative bitmap size {width}x{height}")
        fmt = PixelFormat(fmt)
        if fmt is PixelFormat.INDEXED:
            raise ValueError("Blank indexed bitmaps need a palette; construct directly")
        shape = (height, width, fmt.channels) if fmt.channels else (height, width)
        return cls(np.zeros(shape, dtype=np.uint8), fmt, copy=False)

    @classmethod
    def from_bitmap(cls, bitmap: Bitmap) -> ArrayBitmap:
        """Snapshot any ``Bitmap`` into a frozen, independent ArrayBitmap."""
        if not isinstance(bitmap, Bitmap):
            raise TypeError(f"{type(bitmap).__name__} does not implement the Bitmap contract")
        if isinstance(bitmap, ArrayBitmap):
            return cls(bitmap._pixels, bitmap.format, bitmap.palette).freeze()
        fmt = PixelFormat(bitmap.format)
        palette = getattr(bitmap, "palette", None)
        to_array = getattr(bitmap, "to_array", None)
        if callable(to_array):
            arr = to_array()
        else:
            arr = _read_pixels(bitmap, fmt)
        return cls(arr, fmt, palette).freeze()

    # --- Bitmap contract ---

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def format(self) -> PixelFormat:
        return self._format

    @property
    def palette(self) -> NDArray[np.uint8] | None:
        if self._palette is None:
            return None
        view = self._palette.view()
        view.flags.writeable = False
        return view

    def get_pixel(self, x: int, y: int) -> Pixel:
        self._check_bounds(x, y)
        value = self._pixels[y, x]
        if self._format.channels:
            return tuple(int(v) for v in value)
        return int(value)

    def set_pixel(self, x: int, y: int, value: Pixel) -> None:
        if self.frozen:
            raise ValueError("Bitmap is read-only")
        self._check_bounds(x, y)
        self._pixels[y, x] = value

    # --- Array access ---

    @property
    def frozen(self) -> bool:
        return not self._pixels.flags.writeable

    def freeze(self) -> ArrayBitmap:
        self._pixels.flags.writeable = False
        if self._palette is not None:
            self._palette.flags.writeable = False
        return self

    def to_array(self) -> NDArray[np.uint8]:
        """Read-only view of the pixel array."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    def rgb_array(self) -> NDArray[np.uint8]:
        """Resolve color formats to an (H, W, 3) array; alpha is dropped."""
        if self._format is PixelFormat.RGBA:
            return self._pixels[..., :3]
        if self._format is PixelFormat.RGB:
            return self._pixels
        if self._format is PixelFormat.INDEXED:
            return self._palette[self._pixels][..., :3]
        raise ValueError("Single-channel bitmap has no RGB representation")

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} bitmap")

    def __repr__(self) -> str:
        return f"ArrayBitmap({self.width}x{self.height}, {self._format.value}, frozen={self.frozen})"


def _check_pixels(arr: NDArray, fmt: PixelFormat) -> None:
    if fmt is PixelFormat.INDEXED:
        if not np.issubdtype(arr.dtype, np.integer):
            raise ValueError(f"Indexed pixels must be integers, got {arr.dtype}")
    elif arr.dtype != np.uint8:
        raise ValueError(f"{fmt.value} pixels must be uint8, got {arr.dtype}")

    if fmt.channels:
        if arr.ndim != 3 or arr.shape[2] != fmt.channels:
            raise ValueError(
                f"{fmt.value} pixels must have shape (H, W, {fmt.channels}), got {arr.shape}"
            )
    elif arr.ndim != 2:
        raise ValueError(f"{fmt.value} pixels must have shape (H, W), got {arr.shape}")


def _check_palette(arr: NDArray, palette: NDArray | None) -> NDArray[np.uint8]:
    if palette is None:
        raise ValueError("Indexed bitmap requires a palette")
    pal = np.array(palette, dtype=np.uint8)
    if pal.ndim != 2 or pal.shape[1] not in (3, 4):
        raise ValueError(f"Palette must have shape (N, 3) or (N, 4), got {pal.shape}")
    if arr.size and (arr.min() < 0 or arr.max() >= len(pal)):
        raise ValueError(f"Palette index out of range for palette of {len(pal)} entries")
    return pal


def _read_pixels(bitmap: Bitmap, fmt: PixelFormat) -> NDArray:
    """Slow path for hosts that only offer per-pixel access."""
    w, h = bitmap.width, bitmap.height
    shape = (h, w, fmt.channels) if fmt.channels else (h, w)
    dtype = np.int64 if fmt is PixelFormat.INDEXED else np.uint8
    arr = np.zeros(shape, dtype=dtype)
    for y in range(h):
        for x in range(w):
            arr[y, x] = bitmap.get_pixel(x, y)
    return arr
