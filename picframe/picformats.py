"""Picture format parsers and their registry."""

from __future__ import annotations

import io
import struct
from typing import Iterator, Protocol

from PIL import Image, UnidentifiedImageError

from .bmp import BmpParser
from .pixels import PixelData


class PictureParser(Protocol):
    name: str

    def is_supported(self, data: bytes) -> bool: ...

    def decode(self, data: bytes, bpp: int) -> PixelData: ...


def _jpeg_convert_line(rgb: bytes, bpp: int) -> bytes:
    if bpp == 24:
        return rgb
    triples = zip(rgb[0::3], rgb[1::3], rgb[2::3])
    if bpp == 32:
        return b"".join(struct.pack("<I", r << 16 | g << 8 | b) for r, g, b in triples)
    if bpp == 16:
        return b"".join(
            struct.pack("<H", (r >> 3) << 11 | (g >> 2) << 5 | (b >> 3))
            for r, g, b in triples
        )
    raise ValueError(f"unsupported destination bpp {bpp}")


class JpegParser:
    """Picture parser for JPEG files."""

    name = "jpg"

    def is_supported(self, data: bytes) -> bool:
        try:
            with Image.open(io.BytesIO(data)) as image:
                return image.format == "JPEG"
        except (UnidentifiedImageError, OSError):
            return False

    def decode(self, data: bytes, bpp: int) -> PixelData:
        """Decode ``data`` into a top-down buffer of depth ``bpp``."""
        try:
            with Image.open(io.BytesIO(data)) as image:
                if image.format != "JPEG":
                    raise ValueError("not a JPEG file")
                rgb = image.convert("RGB")
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("not a JPEG file") from exc

        width, height = rgb.size
        raw = rgb.tobytes()
        row_bytes = width * 3
        rows = (
            _jpeg_convert_line(raw[y * row_bytes:(y + 1) * row_bytes], bpp)
            for y in range(height)
        )
        return PixelData(width, height, bpp, width * bpp // 8, bytearray(b"".join(rows)))


class ParserRegistry:
    """Ordered collection of picture parsers."""

    def __init__(self) -> None:
        self._parsers: list[PictureParser] = []

    def __iter__(self) -> Iterator[PictureParser]:
        return iter(self._parsers)

    def register(self, parser: PictureParser) -> None:
        self._parsers.append(parser)

    def names(self) -> list[str]:
        return [parser.name for parser in self._parsers]

    def by_name(self, name: str) -> PictureParser:
        for parser in self._parsers:
            if parser.name == name:
                return parser
        raise KeyError(name)

    def for_data(self, data: bytes) -> PictureParser:
        """Return the first parser that accepts ``data``."""
        for parser in self._parsers:
            if parser.is_supported(data):
                return parser
        raise ValueError("unsupported picture format")


def default_registry() -> ParserRegistry:
    """A registry holding the BMP and JPEG parsers, in that order."""
    registry = ParserRegistry()
    registry.register(BmpParser())
    registry.register(JpegParser())
    return registry