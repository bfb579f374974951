import struct

import pytest

from picframe.pixels import VideoMem, new_pixel_data
from picframe.render import (
    COLOR_BACKGROUND,
    COLOR_FOREGROUND,
    FontBitmap,
    clear_rectangle,
    invert_rectangle,
    load_icon,
    load_picture,
    merge_glyph,
    merge_string_centered,
    set_pixel_color,
)


def make_mem(width, height, bpp=32):
    return VideoMem(id=1, pixels=new_pixel_data(width, height, bpp))


def pixel(mem, x, y):
    p = mem.pixels
    size = p.bpp // 8
    start = y * p.line_bytes + x * size
    return bytes(p.data[start:start + size])


def color_bytes(color, bpp=32):
    ref = make_mem(1, 1, bpp)
    set_pixel_color(ref, 0, 0, color)
    return pixel(ref, 0, 0)


def bmp_bytes(rows_bottom_up, width):
    stride = (width * 3 + 3) & ~3
    body = b"".join(row.ljust(stride, b"\0") for row in rows_bottom_up)
    offset = 54
    head = struct.pack("<2sIHHI", b"BM", offset + len(body), 0, 0, offset)
    info = struct.pack("<IiiHHIIiiII", 40, width, len(rows_bottom_up), 1, 24, 0, len(body), 0, 0, 0, 0)
    return head + info + body


class BlockFont:
    def __init__(self, width=4, height=6, advance=5, missing=""):
        self.width = width
        self.height = height
        self.advance = advance
        self.missing = missing

    def render(self, code, origin_x, origin_y):
        if chr(code) in self.missing:
            raise LookupError(code)
        return FontBitmap(
            x_left=origin_x,
            y_top=origin_y - self.height,
            x_max=origin_x + self.width,
            y_max=origin_y,
            pitch=self.width,
            bpp=8,
            buffer=bytes([1]) * (self.width * self.height),
            next_origin_x=origin_x + self.advance,
            next_origin_y=origin_y,
        )


def foreground_points(mem):
    fg = color_bytes(COLOR_FOREGROUND, mem.pixels.bpp)
    return [
        (x, y)
        for y in range(mem.pixels.height)
        for x in range(mem.pixels.width)
        if pixel(mem, x, y) == fg
    ]


def test_set_pixel_32bpp_round_trip():
    mem = make_mem(4, 4)
    set_pixel_color(mem, 2, 3, COLOR_BACKGROUND)
    assert int.from_bytes(pixel(mem, 2, 3), "little") == COLOR_BACKGROUND
    assert pixel(mem, 1, 3) == b"\0\0\0\0"


def test_set_pixel_16bpp_white():
    mem = make_mem(2, 2, 16)
    set_pixel_color(mem, 1, 1, 0xFFFFFF)
    assert pixel(mem, 1, 1) == b"\xff\xff"


def test_set_pixel_8bpp_low_byte():
    mem = make_mem(2, 2, 8)
    set_pixel_color(mem, 0, 1, 0x123456)
    assert pixel(mem, 0, 1) == b"\x56"


def test_set_pixel_unsupported_bpp():
    with pytest.raises(ValueError):
        set_pixel_color(make_mem(2, 2, 24), 0, 0, 0)


def test_set_pixel_out_of_bounds():
    with pytest.raises(IndexError):
        set_pixel_color(make_mem(2, 2), 2, 0, 0)


def test_clear_rectangle_is_inclusive_and_bounded():
    mem = make_mem(6, 6)
    clear_rectangle(mem, 1, 1, 3, 4, COLOR_BACKGROUND)
    bg = color_bytes(COLOR_BACKGROUND)
    inside = {(x, y) for x in range(1, 4) for y in range(1, 5)}
    for y in range(6):
        for x in range(6):
            expected = bg if (x, y) in inside else b"\0\0\0\0"
            assert pixel(mem, x, y) == expected


def test_clear_rectangle_out_of_bounds():
    with pytest.raises(IndexError):
        clear_rectangle(make_mem(4, 4), 0, 0, 4, 3, COLOR_BACKGROUND)


def test_invert_rectangle_exclusive_and_involutive():
    mem = make_mem(8, 8)
    invert_rectangle(mem.pixels, 1, 1, 3, 3)
    assert pixel(mem, 1, 1) == b"\xff" * 4
    assert pixel(mem, 2, 2) == b"\xff" * 4
    assert pixel(mem, 3, 3) == b"\0" * 4
    assert pixel(mem, 0, 0) == b"\0" * 4
    invert_rectangle(mem.pixels, 1, 1, 3, 3)
    assert mem.pixels.data == bytearray(len(mem.pixels.data))


def test_invert_rectangle_out_of_bounds():
    mem = make_mem(4, 4)
    with pytest.raises(IndexError):
        invert_rectangle(mem.pixels, 0, 0, 5, 2)


def test_merge_glyph_8bpp():
    mem = make_mem(4, 4)
    merge_glyph(FontBitmap(x_left=1, y_top=1, x_max=3, y_max=2, bpp=8, buffer=bytes([0, 7])), mem)
    assert pixel(mem, 1, 1) == color_bytes(COLOR_BACKGROUND)
    assert pixel(mem, 2, 1) == color_bytes(COLOR_FOREGROUND)


def test_merge_glyph_1bpp_crosses_byte_boundary():
    mem = make_mem(12, 2)
    glyph = FontBitmap(
        x_left=0, y_top=0, x_max=10, y_max=1, pitch=2, bpp=1,
        buffer=bytes([0b10000000, 0b01000000]),
    )
    merge_glyph(glyph, mem)
    fg = color_bytes(COLOR_FOREGROUND)
    bg = color_bytes(COLOR_BACKGROUND)
    assert pixel(mem, 0, 0) == fg
    assert pixel(mem, 1, 0) == bg
    assert pixel(mem, 8, 0) == bg
    assert pixel(mem, 9, 0) == fg


def test_merge_glyph_bad_bpp():
    with pytest.raises(ValueError):
        merge_glyph(FontBitmap(x_max=1, y_max=1, bpp=4, buffer=b"\x01"), make_mem(2, 2))


def test_merge_string_centered():
    mem = make_mem(32, 16)
    font = BlockFont()
    merge_string_centered(mem, 0, 0, 20, 10, "ab", font)
    points = foreground_points(mem)
    xs = [x for x, _ in points]
    ys = [y for _, y in points]
    assert max(ys) - min(ys) + 1 == font.height
    assert max(xs) - min(xs) + 1 == font.advance + font.width
    assert abs(min(xs) - (20 - (max(xs) + 1))) <= 1
    assert abs(min(ys) - (10 - (max(ys) + 1))) <= 1
    assert pixel(mem, 0, 0) == color_bytes(COLOR_BACKGROUND)
    assert pixel(mem, 25, 0) == b"\0\0\0\0"


def test_merge_string_skips_missing_glyphs():
    plain = make_mem(32, 16)
    merge_string_centered(plain, 0, 0, 20, 10, "ab", BlockFont())
    skipped = make_mem(32, 16)
    merge_string_centered(skipped, 0, 0, 20, 10, "axb", BlockFont(missing="x"))
    assert skipped.pixels.data == plain.pixels.data


def test_merge_string_stops_at_glyph_outside_area():
    mem = make_mem(16, 16)
    font = BlockFont()
    merge_string_centered(mem, 0, 0, 8, 10, "ab", font)
    points = foreground_points(mem)
    assert points
    assert all(x < font.advance for x, _ in points)


def test_merge_string_too_tall():
    with pytest.raises(ValueError):
        merge_string_centered(make_mem(32, 16), 0, 0, 20, 3, "a", BlockFont())


def test_merge_string_empty():
    with pytest.raises(ValueError):
        merge_string_centered(make_mem(8, 8), 0, 0, 7, 7, "", BlockFont())


def test_load_icon_is_top_down(tmp_path):
    (tmp_path / "icon.bmp").write_bytes(bmp_bytes([b"\x01\x02\x03", b"\x04\x05\x06"], 1))
    icon = load_icon("icon.bmp", 24, icon_dir=tmp_path)
    assert (icon.width, icon.height) == (1, 2)
    assert icon.row(0) == b"\x04\x05\x06"
    assert icon.row(1) == b"\x01\x02\x03"


def test_load_icon_rejects_other_format(tmp_path):
    (tmp_path / "icon.bmp").write_bytes(b"not a bitmap at all")
    with pytest.raises(ValueError):
        load_icon("icon.bmp", 24, icon_dir=tmp_path)


def test_load_icon_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_icon("none.bmp", 24, icon_dir=tmp_path)


def test_load_picture_with_default_registry(tmp_path):
    path = tmp_path / "pic.bmp"
    path.write_bytes(bmp_bytes([b"\x01\x02\x03", b"\x04\x05\x06"], 1))
    picture = load_picture(path, 24)
    assert (picture.width, picture.height, picture.bpp) == (1, 2, 24)
    assert picture.row(0) == b"\x04\x05\x06"


def test_load_picture_unsupported(tmp_path):
    path = tmp_path / "pic.txt"
    path.write_bytes(b"hello")
    with pytest.raises(ValueError):
        load_picture(path, 24)