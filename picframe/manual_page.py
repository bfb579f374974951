"""The manual browsing page: walk directories, pick one, view pictures."""

from __future__ import annotations

from typing import Optional, Sequence

from .browse_layout import (
    DirContent,
    DirFileGrid,
    dir_file_layout,
    menu_layout,
    position_in_layout,
)
from .page_manager import (
    InputEvent,
    InputType,
    PageContext,
    PageLayout,
    PicPos,
    generate_page,
    hit_test,
    page_id,
)
from .pixels import PicState, PixelData, VideoMem, pic_merge, pic_zoom
from .render import (
    COLOR_BACKGROUND,
    DEFAULT_DIR,
    clear_rectangle,
    invert_rectangle,
    merge_string_centered,
)

# Grid cells are numbered from this base so they never clash with menu icons.
DIRFILE_ICON_INDEX_BASE = 1000

SWIPE_PIXELS = 100
LONG_PRESS_MS = 2000
PATH_MAX = 255

_DIR_CLOSED_ICON = "fold_closed.bmp"
_DIR_OPENED_ICON = "fold_opened.bmp"
_FILE_ICON = "file.bmp"

_MENU_UP, _MENU_SELECT, _MENU_PREV, _MENU_NEXT = range(4)


def swipe_direction(current: InputEvent, previous: InputEvent) -> int:
    """1 for a swipe right of more than 100 pixels, -1 for one left, else 0."""
    delta = current.x - previous.x
    if delta > SWIPE_PIXELS:
        return 1
    if delta < -SWIPE_PIXELS:
        return -1
    return 0


def next_picture_index(index: int, contents: Sequence[DirContent], direction: int) -> int:
    """Step from ``index`` to the nearest picture, wrapping around.

    Direction 1 moves to the previous entry, -1 to the next one.
    """
    if direction not in (1, -1):
        raise ValueError(f"direction must be 1 or -1, not {direction}")
    if not any(entry.is_picture for entry in contents):
        raise ValueError("the directory holds no pictures")
    step = -1 if direction == 1 else 1
    last = len(contents) - 1
    while True:
        index += step
        if index > last:
            index = 0
        elif index < 0:
            index = last
        if contents[index].is_picture:
            return index


def parent_dir(path: str) -> str:
    """Drop the last ``/`` component of ``path``."""
    if path == "/":
        raise ValueError("already at the top directory")
    cut = path.rfind("/")
    if cut < 0:
        raise ValueError(f"not an absolute path: {path!r}")
    return path[:cut] or "/"


def join_dir(directory: str, name: str) -> str:
    """``directory/name``, cut to the longest path the page keeps."""
    return f"{directory}/{name}"[:PATH_MAX]


def _elapsed_ms(start: float, end: float) -> int:
    return round((end - start) * 1000)


class ManualPage:
    """Browse the file system and view single pictures with swipes."""

    name = "manul"

    def __init__(self, context: PageContext, start_dir: str = DEFAULT_DIR) -> None:
        self.context = context
        self.current_dir = start_dir
        self.contents: list[DirContent] = []
        self.start_index = 0
        self._selected_dir = DEFAULT_DIR
        self._menu: Optional[PageLayout] = None
        self._grid: Optional[DirFileGrid] = None
        self._icons: Optional[dict[str, PixelData]] = None

    def selected_dir(self) -> str:
        """The directory last chosen with the select button."""
        return self._selected_dir

    @property
    def menu(self) -> PageLayout:
        if self._menu is None:
            ctx = self.context
            self._menu = menu_layout(ctx.xres, ctx.yres, ctx.bpp)
        return self._menu

    @property
    def grid(self) -> DirFileGrid:
        if self._grid is None:
            ctx = self.context
            self._grid = dir_file_layout(ctx.xres, ctx.yres, ctx.bpp, self.menu)
        return self._grid

    @property
    def _dir_icons(self) -> dict[str, PixelData]:
        if self._icons is None:
            first = self.grid.positions[0]
            width = first.right - first.left + 1
            height = first.bottom - first.top + 1
            load = self.context.icon_loader
            self._icons = {
                key: pic_zoom(load(name), width, height)
                for key, name in (
                    ("closed", _DIR_CLOSED_ICON),
                    ("opened", _DIR_OPENED_ICON),
                    ("file", _FILE_ICON),
                )
            }
        return self._icons

    def _list(self, path: str) -> list[DirContent]:
        lister = self.context.list_dir
        if lister is None:
            raise RuntimeError("no directory lister configured")
        return list(lister(path))

    def _flush(self, video_mem: VideoMem) -> None:
        if not video_mem.is_device_framebuffer:
            self.context.show_page(video_mem)

    def _draw_grid(self, video_mem: VideoMem) -> None:
        grid = self.grid
        area = grid.layout
        clear_rectangle(video_mem, area.left, area.top, area.right, area.bottom, COLOR_BACKGROUND)
        positions = grid.positions
        font = self.context.font
        if font is not None:
            set_size = getattr(font, "set_size", None)
            if callable(set_size):
                set_size(positions[1].bottom - positions[1].top - 5)

        icons = self._dir_icons
        entries = self.contents[self.start_index:self.start_index + grid.capacity]
        for entry, icon_pos, label_pos in zip(entries, positions[0::2], positions[1::2]):
            icon = icons["closed"] if entry.is_dir else icons["file"]
            pic_merge(icon_pos.left, icon_pos.top, icon, video_mem.pixels)
            if font is None:
                continue
            try:
                merge_string_centered(
                    video_mem, label_pos.left, label_pos.top,
                    label_pos.right, label_pos.bottom, entry.name, font,
                )
            except ValueError:
                # A name that cannot be drawn leaves its label blank.
                pass

    def _show_browse_page(self) -> None:
        video_mem = self.context.get_video_mem(page_id(self.name), True)
        try:
            generate_page(self.menu, video_mem, self.context.icon_loader)
            self._draw_grid(video_mem)
            self._flush(video_mem)
        finally:
            video_mem.release()

    def _show_picture(self, path: str) -> None:
        ctx = self.context
        video_mem = ctx.get_video_mem(-1, True)
        try:
            pixels = video_mem.pixels
            clear_rectangle(video_mem, 0, 0, pixels.width - 1, pixels.height - 1, COLOR_BACKGROUND)
            picture = ctx.picture_loader(path)
            ratio = picture.height / picture.width
            width, height = ctx.xres, int(ctx.xres * ratio)
            if height > ctx.yres:
                width, height = int(ctx.yres / ratio), ctx.yres
            zoomed = pic_zoom(picture, width, height)
            pic_merge((ctx.xres - width) // 2, (ctx.yres - height) // 2, zoomed, pixels)
            self._flush(video_mem)
        finally:
            video_mem.release()

    def _invert(self, pos: PicPos) -> None:
        invert_rectangle(self.context.device_mem.pixels, pos.left, pos.top, pos.right, pos.bottom)

    def _toggle_menu(self, index: int) -> None:
        self._invert(self.menu.positions[index])

    def _mark_cell(self, cell: int, selected: bool) -> None:
        cell &= ~1
        entry = self.contents[self.start_index + cell // 2]
        positions = self.grid.positions
        if entry.is_dir:
            icon = self._dir_icons["opened" if selected else "closed"]
            pos = positions[cell]
            pic_merge(pos.left, pos.top, icon, self.context.device_mem.pixels)
        else:
            self._invert(positions[cell])
            self._invert(positions[cell + 1])

    def _locate(self, event: InputEvent) -> Optional[int]:
        index = hit_test(self.menu.positions, event.x, event.y)
        if index is not None:
            return index
        cell = position_in_layout(self.grid.positions, event.x, event.y)
        if cell is None or self.start_index + cell // 2 >= len(self.contents):
            return None
        return cell + DIRFILE_ICON_INDEX_BASE

    def _enter(self, path: str) -> bool:
        try:
            contents = self._list(path)
        except OSError:
            return False
        self.current_dir = path
        self.contents = contents
        self.start_index = 0
        self._draw_grid(self.context.device_mem)
        return True

    def _turn_page(self, delta: int) -> None:
        start = self.start_index + delta
        if 0 <= start < len(self.contents):
            self.start_index = start
            self._draw_grid(self.context.device_mem)

    def _view_pictures(self, index: int, pre_press: InputEvent) -> None:
        ctx = self.context
        self._show_picture(join_dir(self.current_dir, self.contents[index].name))
        display_pressed = False
        while True:
            event = ctx.next_event()
            if event.type != InputType.TOUCHSCREEN:
                continue
            if event.pressure == 0:
                display_pressed = False
                direction = swipe_direction(event, pre_press)
                if direction == 0:
                    break
                index = next_picture_index(index, self.contents, direction)
                self._show_picture(join_dir(self.current_dir, self.contents[index].name))
            elif not display_pressed:
                display_pressed = True
                pre_press = event

        device = ctx.device_mem
        # The picture replaced the screen, so the menu has to be drawn again.
        device.pic_state = PicState.BLANK
        generate_page(self.menu, device, ctx.icon_loader)
        self._draw_grid(device)

    def run(self) -> None:
        """Browse until "up" is released at the top directory or held for 2 s."""
        ctx = self.context
        try:
            self.contents = self._list(self.current_dir)
        except OSError:
            return
        self._show_browse_page()

        capacity = self.grid.capacity
        icon_pressed = False
        select_clicked = False
        pressed = -1
        pre_press = InputEvent(time=0.0)

        while True:
            event = ctx.next_event()
            if event.type != InputType.TOUCHSCREEN:
                continue
            index = self._locate(event)

            if event.pressure == 0:
                if not icon_pressed:
                    continue
                icon_pressed = False
                if pressed < DIRFILE_ICON_INDEX_BASE:
                    if pressed != _MENU_SELECT:
                        self._toggle_menu(pressed)
                    if pressed != index:
                        continue
                    if pressed == _MENU_UP:
                        if self.current_dir == "/":
                            return
                        if not self._enter(parent_dir(self.current_dir)):
                            return
                    elif pressed == _MENU_SELECT:
                        if select_clicked:
                            self._toggle_menu(_MENU_SELECT)
                        select_clicked = not select_clicked
                    elif pressed == _MENU_PREV:
                        self._turn_page(-capacity)
                    elif pressed == _MENU_NEXT:
                        self._turn_page(capacity)
                else:
                    cell = pressed - DIRFILE_ICON_INDEX_BASE
                    self._mark_cell(cell, selected=False)
                    if pressed != index:
                        continue
                    entry_index = self.start_index + cell // 2
                    entry = self.contents[entry_index]
                    path = join_dir(self.current_dir, entry.name)
                    if select_clicked:
                        if entry.is_dir:
                            self._toggle_menu(_MENU_SELECT)
                            select_clicked = False
                            self._selected_dir = path
                            ctx.config.selected_dir = path
                    elif entry.is_dir:
                        if not self._enter(path):
                            return
                    elif entry.is_picture:
                        self._view_pictures(entry_index, pre_press)
            elif index is not None:
                if not icon_pressed:
                    icon_pressed = True
                    pressed = index
                    pre_press = event
                    if index < DIRFILE_ICON_INDEX_BASE:
                        if not (select_clicked and index == _MENU_SELECT):
                            self._toggle_menu(index)
                    else:
                        self._mark_cell(index - DIRFILE_ICON_INDEX_BASE, selected=True)
                if pressed == _MENU_UP and _elapsed_ms(pre_press.time, event.time) > LONG_PRESS_MS:
                    return