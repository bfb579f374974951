"""Drawing primitives for video memory: pixels, rectangles, glyphs and icons."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .bmp import BmpParser
from .picformats import ParserRegistry, default_registry
from .pixels import PixelData, VideoMem

COLOR_BACKGROUND = 0xE7DBB5
COLOR_FOREGROUND = 0x514438

ICON_PATH = "/etc/digitpic/icons/"
DEFAULT_DIR = "/"

_INVERT = bytes(range(255, -1, -1))


@dataclass
class FontBitmap:
    """A rendered glyph and where it lies on the page.

    ``x_max`` and ``y_max`` are exclusive. For 1 bpp glyphs each row starts
    at a multiple of ``pitch`` bytes; 8 bpp glyphs are packed row after row.
    """

    x_left: int = 0
    y_top: int = 0
    x_max: int = 0
    y_max: int = 0
    pitch: int = 0
    bpp: int = 1
    buffer: bytes = b""
    next_origin_x: int = 0
    next_origin_y: int = 0


class Font(Protocol):
    def render(self, code: int, origin_x: int, origin_y: int) -> FontBitmap:
        """Render ``code`` at the given origin; raise LookupError if unavailable."""
        ...


def _encode_color(bpp: int, color: int) -> bytes:
    if bpp == 8:
        return bytes([color & 0xFF])
    if bpp == 16:
        red = (color >> 19) & 0x1F
        green = (color >> 10) & 0x3F
        blue = (color >> 3) & 0x1F
        return struct.pack("<H", red << 11 | green << 5 | blue)
    if bpp == 32:
        return struct.pack("<I", color & 0xFFFFFFFF)
    raise ValueError(f"unsupported bpp {bpp}")


def _check_point(pixels: PixelData, x: int, y: int) -> None:
    if not (0 <= x < pixels.width and 0 <= y < pixels.height):
        raise IndexError(f"point ({x}, {y}) outside {pixels.width}x{pixels.height}")


def set_pixel_color(video_mem: VideoMem, x: int, y: int, color: int) -> None:
    """Set one pixel of ``video_mem`` to the 0xRRGGBB ``color``."""
    pixels = video_mem.pixels
    encoded = _encode_color(pixels.bpp, color)
    _check_point(pixels, x, y)
    start = y * pixels.line_bytes + x * len(encoded)
    pixels.data[start:start + len(encoded)] = encoded


def clear_rectangle(
    video_mem: VideoMem, left: int, top: int, right: int, bottom: int, color: int
) -> None:
    """Fill the rectangle with corners inclusive with ``color``."""
    pixels = video_mem.pixels
    encoded = _encode_color(pixels.bpp, color)
    if right < left or bottom < top:
        return
    _check_point(pixels, left, top)
    _check_point(pixels, right, bottom)
    row = encoded * (right - left + 1)
    for y in range(top, bottom + 1):
        start = y * pixels.line_bytes + left * len(encoded)
        pixels.data[start:start + len(row)] = row


def invert_rectangle(pixels: PixelData, left: int, top: int, right: int, bottom: int) -> None:
    """Invert every byte of the rectangle; ``right`` and ``bottom`` are exclusive."""
    if left < 0 or top < 0 or right > pixels.width or bottom > pixels.height:
        raise IndexError("rectangle outside the picture")
    count = (right - left) * pixels.pixel_bytes
    if count <= 0:
        return
    for y in range(top, bottom):
        start = y * pixels.line_bytes + left * pixels.pixel_bytes
        pixels.data[start:start + count] = bytes(pixels.data[start:start + count]).translate(_INVERT)


def merge_glyph(bitmap: FontBitmap, video_mem: VideoMem) -> None:
    """Draw a glyph into ``video_mem`` in foreground on background."""
    if bitmap.bpp == 1:
        for y in range(bitmap.y_top, bitmap.y_max):
            row_start = (y - bitmap.y_top) * bitmap.pitch
            for col, x in enumerate(range(bitmap.x_left, bitmap.x_max)):
                byte = bitmap.buffer[row_start + col // 8]
                on = byte & (0x80 >> (col % 8))
                set_pixel_color(video_mem, x, y, COLOR_FOREGROUND if on else COLOR_BACKGROUND)
    elif bitmap.bpp == 8:
        values = iter(bitmap.buffer)
        for y in range(bitmap.y_top, bitmap.y_max):
            for x in range(bitmap.x_left, bitmap.x_max):
                on = next(values)
                set_pixel_color(video_mem, x, y, COLOR_FOREGROUND if on else COLOR_BACKGROUND)
    else:
        raise ValueError(f"unsupported glyph bpp {bitmap.bpp}")


def _glyph_in_area(bitmap: FontBitmap, left: int, top: int, right: int, bottom: int) -> bool:
    return (
        bitmap.x_left >= left
        and bitmap.x_max <= right
        and bitmap.y_top >= top
        and bitmap.y_max <= bottom
    )


def merge_string_centered(
    video_mem: VideoMem, left: int, top: int, right: int, bottom: int, text: str, font: Font
) -> None:
    """Clear the rectangle and draw ``text`` centred in it.

    Glyphs the font cannot render are skipped; drawing stops at the first
    glyph that would fall outside the rectangle.
    """
    clear_rectangle(video_mem, left, top, right, bottom, COLOR_BACKGROUND)
    codes = [ord(char) for char in text]
    if not codes:
        raise ValueError("empty string")

    min_x = min_y = 32000
    max_x = max_y = -1
    origin_x = origin_y = 0
    rendered = False
    for code in codes:
        try:
            glyph = font.render(code, origin_x, origin_y)
        except LookupError:
            continue
        rendered = True
        min_x = min(min_x, glyph.x_left)
        max_x = max(max_x, glyph.x_max)
        min_y = min(min_y, glyph.y_top)
        max_y = max(max_y, glyph.y_max)
        origin_x, origin_y = glyph.next_origin_x, glyph.next_origin_y
    if not rendered:
        return

    width = min(max_x - min_x, right - left)
    height = max_y - min_y
    if height > bottom - top:
        raise ValueError("string is too tall for the rectangle")

    origin_x = left + (right - left - width) // 2 - min_x
    origin_y = top + (bottom - top - height) // 2 - min_y
    for code in codes:
        try:
            glyph = font.render(code, origin_x, origin_y)
        except LookupError:
            continue
        if not _glyph_in_area(glyph, left, top, right, bottom):
            return
        merge_glyph(glyph, video_mem)
        origin_x, origin_y = glyph.next_origin_x, glyph.next_origin_y


def load_icon(name: str, bpp: int, icon_dir: str | Path = ICON_PATH) -> PixelData:
    """Load the BMP icon ``name`` from ``icon_dir`` at depth ``bpp``."""
    data = (Path(icon_dir) / name).read_bytes()
    return BmpParser().decode(data, bpp)


def load_picture(path: str | Path, bpp: int, registry: ParserRegistry | None = None) -> PixelData:
    """Load a picture in any format the registry knows, at depth ``bpp``."""
    if registry is None:
        registry = default_registry()
    data = Path(path).read_bytes()
    return registry.for_data(data).decode(data, bpp)