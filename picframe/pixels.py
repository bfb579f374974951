"""Pixel buffers, video memory descriptors, nearest-neighbour zoom and merge."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class PixelData:
    """A packed image buffer of ``height`` rows, each ``line_bytes`` long."""

    width: int
    height: int
    bpp: int
    line_bytes: int
    data: bytearray

    @property
    def pixel_bytes(self) -> int:
        return self.bpp // 8

    @property
    def total_bytes(self) -> int:
        return self.line_bytes * self.height

    def row(self, y: int) -> bytes:
        """Return the bytes of row ``y``."""
        start = y * self.line_bytes
        return bytes(self.data[start:start + self.line_bytes])


class VideoMemState(Enum):
    FREE = 0
    USED_FOR_PREPARE = 1
    USED_FOR_CUR = 2


class PicState(Enum):
    BLANK = 0
    GENERATING = 1
    GENERATED = 2


@dataclass
class VideoMem:
    """A block of video memory holding one page."""

    id: int
    pixels: PixelData
    is_device_framebuffer: bool = False
    state: VideoMemState = VideoMemState.FREE
    pic_state: PicState = PicState.BLANK

    def release(self) -> None:
        """Mark the memory free; anonymous pages (id -1) lose their picture."""
        self.state = VideoMemState.FREE
        if self.id == -1:
            self.pic_state = PicState.BLANK


def new_pixel_data(width: int, height: int, bpp: int) -> PixelData:
    """Allocate a zero-filled buffer of the given size and depth."""
    if width < 0 or height < 0:
        raise ValueError(f"invalid size {width}x{height}")
    if bpp <= 0 or bpp % 8:
        raise ValueError(f"unsupported bpp {bpp}")
    line_bytes = width * bpp // 8
    return PixelData(width, height, bpp, line_bytes, bytearray(line_bytes * height))


def pic_zoom(origin: PixelData, width: int, height: int) -> PixelData:
    """Scale ``origin`` to ``width`` x ``height`` by nearest-neighbour sampling."""
    zoom = new_pixel_data(width, height, origin.bpp)
    if width == 0 or height == 0:
        return zoom
    if origin.width <= 0 or origin.height <= 0:
        raise ValueError("cannot zoom an empty picture")

    pixel_bytes = origin.pixel_bytes
    src_columns = [x * origin.width // width for x in range(width)]
    src = memoryview(origin.data)
    row_cache: dict[int, bytes] = {}

    for y in range(height):
        src_y = y * origin.height // height
        row = row_cache.get(src_y)
        if row is None:
            base = src_y * origin.line_bytes
            row = b"".join(
                src[base + sx * pixel_bytes: base + (sx + 1) * pixel_bytes]
                for sx in src_columns
            )
            row_cache[src_y] = row
        dest = y * zoom.line_bytes
        zoom.data[dest:dest + len(row)] = row
    return zoom


def pic_merge(x: int, y: int, small: PixelData, big: PixelData) -> None:
    """Copy ``small`` into ``big`` with its top-left corner at (x, y).

    The copy is clipped to the bounds of ``big``.
    """
    if small.width > big.width or small.height > big.height or small.bpp != big.bpp:
        raise ValueError("picture does not fit into the target")

    pixel_bytes = big.pixel_bytes
    left, top = max(x, 0), max(y, 0)
    right = min(x + small.width, big.width)
    bottom = min(y + small.height, big.height)
    if left >= right or top >= bottom:
        return

    count = (right - left) * pixel_bytes
    for dest_y in range(top, bottom):
        src = (dest_y - y) * small.line_bytes + (left - x) * pixel_bytes
        dest = dest_y * big.line_bytes + left * pixel_bytes
        big.data[dest:dest + count] = small.data[src:src + count]