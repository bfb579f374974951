# picframe

Building blocks for a touchscreen digital picture frame: picture decoding
and scaling, drawing into page buffers, the frame's menu pages and directory
browser, and a small UDP client for the frame's debug channel.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `picframe.pixels` – `PixelData` (a packed buffer with `width`, `height`,
  `bpp`, `line_bytes` and `data`), `new_pixel_data`, nearest-neighbour scaling
  with `pic_zoom`, and `pic_merge`, which copies a small picture into a larger
  one (raising `ValueError` when it is larger or of another depth). `VideoMem`
  describes one page of video memory; `VideoMem.release()` marks it free.
- `picframe.bmp` – `BmpParser` decodes uncompressed, bottom-up 24-bit BMP files
  into top-down buffers of 16, 24 or 32 bits per pixel; `convert_line`
  converts one row.
- `picframe.picformats` – `JpegParser` (decoding through Pillow) and
  `ParserRegistry` with `register`, `names`, `by_name` and `for_data`.
  `default_registry()` holds the BMP parser, then the JPEG parser.
- `picframe.render` – `set_pixel_color`, `clear_rectangle`, `invert_rectangle`,
  `merge_glyph`, `merge_string_centered` (text centred in a rectangle, using a
  font object you supply), `load_icon` (a BMP from the icon directory, by
  default `/etc/digitpic/icons/`) and `load_picture` (any format the registry
  knows).
- `picframe.page_manager` – `InputEvent`, `PicPos`, `PageLayout`,
  `PageConfig`, `PageContext`, `PageRegistry`, `page_id`, the hit tests
  `hit_test` and `hit_test_strict`, and `generate_page`.
- `picframe.menu_pages` – `MainPage`, `SettingPage` and `IntervalPage`, their
  layout functions (`layout_main_page`, `layout_setting_page`,
  `layout_interval_page`), `step_interval` (wraps within 0–59 seconds) and
  `is_out_of_500ms`.
- `picframe.browse_layout` – `menu_layout`, `dir_file_layout` (the grid of
  icon and name cells, as a `DirFileGrid`), `position_in_layout`,
  `DirContent` and `FileType`.
- `picframe.manual_page` – `ManualPage`, which walks directories, lets a
  directory be chosen with the select button (`selected_dir()`), and shows
  pictures full screen, moving between them with horizontal swipes of more
  than 100 pixels; helpers `swipe_direction`, `next_picture_index`,
  `parent_dir` and `join_dir`.
- `picframe.udp_client` – `UdpClient`, `make_server_address` and the
  `picframe-client` command.

## Decoding and scaling a picture

```python
from picframe.picformats import default_registry
from picframe.pixels import new_pixel_data, pic_merge, pic_zoom

registry = default_registry()
with open("photo.bmp", "rb") as fh:
    data = fh.read()

picture = registry.for_data(data).decode(data, 16)

thumb = pic_zoom(picture, 80, 60)
screen = new_pixel_data(480, 272, 16)
pic_merge(10, 10, thumb, screen)
```

## Running the pages

Each page takes a `PageContext`, which supplies everything the page touches:
the screen size and depth, `next_event` for input, `get_video_mem` and
`device_mem` for page buffers, `show_page` to put a buffer on screen,
`icon_loader` and `picture_loader`, and optionally a `font`, a `list_dir`
callable returning `DirContent` entries, the shared `PageRegistry` and
`PageConfig`. `MainPage` opens the pages registered as `"manul"`, `"auto"`
and `"setting"`; `SettingPage` opens `"browse"` and `"interval"`.
`IntervalPage` stores the chosen value in `config.interval_second` when ok is
released.

## The debug client

The frame accepts UDP commands such as `dbglevel=<0-9>`, `stdout=0|1` and
`netprint=0|1`. Start the client with the frame's IPv4 address and port:

```
picframe-client 192.168.1.50 5678
```

It sends `setclient` to register, then sends every line typed on standard
input as a zero-padded 128-byte command and prints each reply as
`Recv:<text>`. It stops when standard input ends.

## What this package does not do

- It does not drive a display or read a touchscreen: showing a page, the
  video memory pool and the input events all come through the callables in
  `PageContext`.
- It renders no fonts; text is drawn only with a font object you provide.
- It does not list directories itself; `ManualPage` needs `list_dir`.
- It has no slideshow (`"auto"`) or `"browse"` page; register your own under
  those names before the menus open them.
- There is no command that starts the frame itself; the only command is
  `picframe-client`.