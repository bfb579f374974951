"""Geometry of the browsing page: the menu icons and the directory grid."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .page_manager import PageLayout, PicPos

DIR_FILE_ICON_WIDTH = 40
DIR_FILE_ICON_HEIGHT = DIR_FILE_ICON_WIDTH
DIR_FILE_NAME_HEIGHT = 20
DIR_FILE_NAME_WIDTH = DIR_FILE_ICON_HEIGHT + DIR_FILE_NAME_HEIGHT
DIR_FILE_ALL_WIDTH = DIR_FILE_NAME_WIDTH
DIR_FILE_ALL_HEIGHT = DIR_FILE_ALL_WIDTH

MIN_ICON_GAP = 10

MENU_ICONS = ("up.bmp", "select.bmp", "pre_page.bmp", "next_page.bmp")


class FileType(Enum):
    DIR = 0
    FILE = 1


@dataclass
class DirContent:
    """One entry of a directory listing."""

    name: str
    file_type: FileType
    is_picture: bool = False

    @property
    def is_dir(self) -> bool:
        return self.file_type is FileType.DIR


@dataclass
class DirFileGrid:
    """The directory area: an icon rectangle and a name rectangle per cell.

    ``layout.positions`` holds icon and name rectangles alternately, row by row.
    """

    layout: PageLayout
    per_row: int
    per_col: int

    @property
    def capacity(self) -> int:
        """How many entries fit on one page."""
        return self.per_row * self.per_col

    @property
    def positions(self) -> list[PicPos]:
        return self.layout.positions


def menu_layout(xres: int, yres: int, bpp: int) -> PageLayout:
    """Place the four menu icons along the short side of the screen.

    On a portrait screen they form a row at the top, otherwise a column
    at the left.
    """
    portrait = xres < yres
    size = xres // 4 if portrait else yres // 4
    positions: list[PicPos] = []
    for step, name in enumerate(MENU_ICONS):
        offset = step * size
        left, top = (offset, 0) if portrait else (0, offset)
        positions.append(PicPos(name, left, top, left + size - 1, top + size - 1))

    max_total_bytes = max(
        (pos.right - pos.left + 1) * (pos.bottom - pos.top + 1) * bpp // 8
        for pos in positions
    )
    return PageLayout(positions=positions, bpp=bpp, max_total_bytes=max_total_bytes)


def _fit_count(span: int, cell: int) -> tuple[int, int]:
    """Cells that fit in ``span`` with gaps of at least MIN_ICON_GAP; returns (count, gap)."""
    count = span // cell
    while True:
        if count < 0:
            raise ValueError(f"area of {span} pixels is too small for the grid")
        delta = span - cell * count
        if delta // (count + 1) < MIN_ICON_GAP:
            count -= 1
        else:
            return count, delta // (count + 1)


def dir_file_layout(xres: int, yres: int, bpp: int, menu: PageLayout) -> DirFileGrid:
    """Lay out the directory grid in the screen area the menu leaves free."""
    first = menu.positions[0]
    if xres < yres:
        left, right = 0, xres - 1
        top, bottom = first.bottom + 1, yres - 1
    else:
        left, right = first.right + 1, xres - 1
        top, bottom = 0, yres - 1

    per_row, delta_x = _fit_count(right - left + 1, DIR_FILE_NAME_WIDTH)
    per_col, delta_y = _fit_count(bottom - top + 1, DIR_FILE_NAME_WIDTH)

    positions: list[PicPos] = []
    y = top + delta_y
    for _ in range(per_col):
        x = left + delta_x
        for _ in range(per_row):
            icon_left = x + (DIR_FILE_NAME_WIDTH - DIR_FILE_ICON_WIDTH) // 2
            icon = PicPos(
                None, icon_left, y,
                icon_left + DIR_FILE_ICON_WIDTH - 1, y + DIR_FILE_ICON_HEIGHT - 1,
            )
            name_top = icon.bottom + 1
            label = PicPos(
                None, x, name_top,
                x + DIR_FILE_NAME_WIDTH - 1, name_top + DIR_FILE_NAME_HEIGHT - 1,
            )
            positions.extend((icon, label))
            x += DIR_FILE_ALL_WIDTH + delta_x
        y += DIR_FILE_ALL_HEIGHT + delta_y

    layout = PageLayout(
        positions=positions,
        left=left,
        top=top,
        right=right,
        bottom=bottom,
        bpp=bpp,
        max_total_bytes=DIR_FILE_ALL_WIDTH * DIR_FILE_ALL_HEIGHT * bpp // 8,
    )
    return DirFileGrid(layout, per_row, per_col)


def position_in_layout(positions: Sequence[PicPos], x: int, y: int) -> Optional[int]:
    """Index of the first rectangle containing (x, y), edges included.

    The search ends at the first rectangle whose bottom edge is 0.
    """
    for index, pos in enumerate(positions):
        if pos.bottom == 0:
            break
        if pos.left <= x <= pos.right and pos.top <= y <= pos.bottom:
            return index
    return None