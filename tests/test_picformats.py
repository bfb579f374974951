import io
import struct

import pytest
from PIL import Image

from picframe.bmp import BmpParser
from picframe.picformats import JpegParser, ParserRegistry, default_registry


def make_jpeg(width=8, height=6, color=(255, 255, 255)):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="JPEG", quality=100)
    return buffer.getvalue()


def make_bmp():
    pixel = bytes([1, 2, 3, 0])
    info = struct.pack("<IiiHHIIiiII", 40, 1, 1, 1, 24, 0, len(pixel), 0, 0, 0, 0)
    header = struct.pack("<2sIHHI", b"BM", 54 + len(pixel), 0, 0, 54)
    return header + info + pixel


def test_jpeg_is_supported():
    parser = JpegParser()
    assert parser.is_supported(make_jpeg())
    assert not parser.is_supported(make_bmp())
    assert not parser.is_supported(b"garbage")


def test_jpeg_decode_dimensions():
    pixels = JpegParser().decode(make_jpeg(8, 6), 32)
    assert (pixels.width, pixels.height, pixels.bpp) == (8, 6, 32)
    assert pixels.line_bytes == 32
    assert len(pixels.data) == pixels.total_bytes


def test_jpeg_decode_white_16bpp_is_all_ones():
    pixels = JpegParser().decode(make_jpeg(), 16)
    assert set(pixels.data) == {0xFF}


def test_jpeg_decode_24bpp_matches_pillow():
    data = make_jpeg(4, 4, (200, 100, 50))
    pixels = JpegParser().decode(data, 24)
    expected = Image.open(io.BytesIO(data)).convert("RGB").tobytes()
    assert bytes(pixels.data) == expected


def test_jpeg_decode_rejects_other_data():
    with pytest.raises(ValueError):
        JpegParser().decode(make_bmp(), 16)


def test_jpeg_decode_rejects_unsupported_bpp():
    with pytest.raises(ValueError):
        JpegParser().decode(make_jpeg(), 8)


def test_default_registry_order():
    assert default_registry().names() == ["BMP", "jpg"]


def test_by_name():
    registry = default_registry()
    assert isinstance(registry.by_name("BMP"), BmpParser)
    assert isinstance(registry.by_name("jpg"), JpegParser)
    with pytest.raises(KeyError):
        registry.by_name("png")


def test_for_data_picks_matching_parser():
    registry = default_registry()
    assert registry.for_data(make_bmp()).name == "BMP"
    assert registry.for_data(make_jpeg()).name == "jpg"


def test_for_data_unknown_raises():
    with pytest.raises(ValueError):
        default_registry().for_data(b"not a picture")


def test_register_appends_in_order():
    registry = ParserRegistry()
    jpeg = JpegParser()
    bmp = BmpParser()
    registry.register(jpeg)
    registry.register(bmp)
    assert registry.names() == ["jpg", "BMP"]
    assert list(registry) == [jpeg, bmp]


def test_empty_registry_rejects_everything():
    with pytest.raises(ValueError):
        ParserRegistry().for_data(make_bmp())