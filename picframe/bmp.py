"""Decoder for uncompressed 24-bit BMP files."""

from __future__ import annotations

import struct

from .pixels import PixelData

_FILE_HEADER = struct.Struct("<2sIHHI")
_INFO_HEADER = struct.Struct("<IiiHHIIiiII")
_HEADERS_SIZE = _FILE_HEADER.size + _INFO_HEADER.size


def convert_line(width: int, src_bpp: int, dest_bpp: int, src: bytes) -> bytes:
    """Convert one row of 24-bit pixels to ``dest_bpp`` (16, 24 or 32)."""
    if src_bpp != 24:
        raise ValueError(f"source bpp must be 24, not {src_bpp}")
    needed = width * 3
    if len(src) < needed:
        raise ValueError("source row is too short")
    line = bytes(src[:needed])
    if dest_bpp == 24:
        return line

    triples = zip(line[0::3], line[1::3], line[2::3])
    if dest_bpp == 32:
        return b"".join(struct.pack("<I", r << 16 | g << 8 | b) for r, g, b in triples)
    if dest_bpp == 16:
        return b"".join(
            struct.pack("<H", (r >> 3) << 11 | (g >> 2) << 5 | (b >> 2))
            for r, g, b in triples
        )
    raise ValueError(f"unsupported destination bpp {dest_bpp}")


class BmpParser:
    """Picture parser for bottom-up 24-bit BMP files."""

    name = "BMP"

    def is_supported(self, data: bytes) -> bool:
        return data[:2] == b"BM"

    def decode(self, data: bytes, bpp: int) -> PixelData:
        """Decode ``data`` into a top-down buffer of depth ``bpp``."""
        if not self.is_supported(data):
            raise ValueError("not a BMP file")
        if len(data) < _HEADERS_SIZE:
            raise ValueError("truncated BMP header")

        _, _, _, _, offset = _FILE_HEADER.unpack_from(data, 0)
        (_, width, height, _, bit_count, *_rest) = _INFO_HEADER.unpack_from(
            data, _FILE_HEADER.size
        )
        if bit_count != 24:
            raise ValueError(f"unsupported BMP bit count {bit_count}")
        if width <= 0 or height <= 0:
            raise ValueError(f"unsupported BMP size {width}x{height}")

        real_width = width * 3
        stride = (real_width + 3) & ~3
        if len(data) < offset + stride * (height - 1) + real_width:
            raise ValueError("truncated BMP pixel data")

        rows = (
            convert_line(width, 24, bpp, data[start:start + real_width])
            for start in (offset + y * stride for y in reversed(range(height)))
        )
        pixels = bytearray(b"".join(rows))
        return PixelData(width, height, bpp, width * bpp // 8, pixels)