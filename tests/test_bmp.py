import struct

import pytest

from picframe.bmp import BmpParser, convert_line


def make_bmp(rows, bit_count=24):
    """Build a BMP file from top-down rows of 3-byte pixels."""
    height = len(rows)
    width = len(rows[0])
    stride = (width * 3 + 3) & ~3
    pixel = b"".join(
        bytes(c for px in row for c in px).ljust(stride, b"\0") for row in reversed(rows)
    )
    info = struct.pack("<IiiHHIIiiII", 40, width, height, 1, bit_count, 0, len(pixel), 0, 0, 0, 0)
    header = struct.pack("<2sIHHI", b"BM", 54 + len(pixel), 0, 0, 54)
    return header + info + pixel


def test_convert_line_24_copies():
    src = bytes([1, 2, 3, 4, 5, 6])
    assert convert_line(2, 24, 24, src) == src


def test_convert_line_32_packs_components():
    assert convert_line(1, 24, 32, bytes([1, 2, 3])) == b"\x03\x02\x01\x00"


def test_convert_line_16_high_bits():
    assert convert_line(1, 24, 16, bytes([0xFF, 0, 0])) == b"\x00\xf8"
    assert convert_line(1, 24, 16, bytes([0, 0, 0])) == b"\x00\x00"


@pytest.mark.parametrize("dest_bpp", [16, 24, 32])
def test_convert_line_length(dest_bpp):
    out = convert_line(5, 24, dest_bpp, bytes(range(15)))
    assert len(out) == 5 * dest_bpp // 8


def test_convert_line_rejects_other_source_depth():
    with pytest.raises(ValueError):
        convert_line(1, 16, 16, bytes(3))


def test_convert_line_rejects_short_source():
    with pytest.raises(ValueError):
        convert_line(2, 24, 32, bytes(3))


def test_is_supported():
    parser = BmpParser()
    assert parser.is_supported(make_bmp([[(0, 0, 0)]]))
    assert not parser.is_supported(b"\xff\xd8\xff\xe0")


def test_decode_flips_rows_and_drops_padding():
    data = make_bmp([[(1, 2, 3)], [(4, 5, 6)]])
    pixels = BmpParser().decode(data, 24)
    assert (pixels.width, pixels.height) == (1, 2)
    assert pixels.line_bytes == 3
    assert pixels.data == bytearray([1, 2, 3, 4, 5, 6])


def test_decode_to_32bpp_matches_line_conversion():
    rows = [[(10, 20, 30), (40, 50, 60)], [(70, 80, 90), (100, 110, 120)]]
    pixels = BmpParser().decode(make_bmp(rows), 32)
    assert pixels.bpp == 32
    assert pixels.line_bytes == 8
    for y, row in enumerate(rows):
        flat = bytes(c for px in row for c in px)
        assert pixels.row(y) == convert_line(2, 24, 32, flat)


def test_decode_rejects_other_bit_count():
    with pytest.raises(ValueError):
        BmpParser().decode(make_bmp([[(0, 0, 0)]], bit_count=8), 16)


def test_decode_rejects_non_bmp():
    with pytest.raises(ValueError):
        BmpParser().decode(b"XX" + bytes(60), 16)


def test_decode_rejects_truncated_data():
    data = make_bmp([[(1, 2, 3)], [(4, 5, 6)]])
    with pytest.raises(ValueError):
        BmpParser().decode(data[:-5], 24)