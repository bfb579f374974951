"""Page registry, layouts, input events and generic page drawing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Iterator, Optional, Protocol, Sequence

from .pixels import PicState, PixelData, VideoMem, pic_merge, pic_zoom
from .render import COLOR_BACKGROUND, DEFAULT_DIR, Font, clear_rectangle


class InputType(IntEnum):
    STDIN = 0
    TOUCHSCREEN = 1


@dataclass
class InputEvent:
    """One event from an input device; ``time`` is in seconds."""

    type: InputType = InputType.TOUCHSCREEN
    x: int = 0
    y: int = 0
    pressure: int = 0
    key: int = 0
    value: int = -1
    time: float = 0.0


@dataclass
class PicPos:
    """A named rectangle on a page; corners are inclusive unless noted."""

    name: Optional[str] = None
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0


@dataclass
class PageLayout:
    """A page area split into several icon rectangles."""

    positions: list[PicPos] = field(default_factory=list)
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0
    bpp: int = 0
    max_total_bytes: int = 0


@dataclass
class PageConfig:
    """Settings shared between pages."""

    interval_second: int = 7
    selected_dir: str = DEFAULT_DIR


class Page(Protocol):
    def run(self) -> Any: ...


class PageRegistry:
    """Pages looked up by name."""

    def __init__(self) -> None:
        self._pages: dict[str, Page] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._pages

    def __iter__(self) -> Iterator[str]:
        return iter(self._pages)

    def register(self, name: str, page: Page) -> None:
        if name in self._pages:
            raise ValueError(f"page {name!r} is already registered")
        self._pages[name] = page

    def get(self, name: str) -> Page:
        try:
            return self._pages[name]
        except KeyError:
            raise KeyError(f"no page named {name!r}") from None


@dataclass
class PageContext:
    """Everything a page needs to draw itself and read input."""

    xres: int
    yres: int
    bpp: int
    next_event: Callable[[], InputEvent]
    get_video_mem: Callable[[int, bool], VideoMem]
    device_mem: VideoMem
    show_page: Callable[[VideoMem], None]
    icon_loader: Callable[[str], PixelData]
    picture_loader: Callable[[str], PixelData]
    font: Optional[Font] = None
    list_dir: Optional[Callable[[str], Sequence[Any]]] = None
    pages: PageRegistry = field(default_factory=PageRegistry)
    config: PageConfig = field(default_factory=PageConfig)


def page_id(name: str) -> int:
    """Video memory id of a page: the sum of its first four bytes."""
    return sum(name.encode()[:4])


def _named(positions: Sequence[PicPos]) -> Iterator[tuple[int, PicPos]]:
    for index, pos in enumerate(positions):
        if pos.name is None:
            return
        yield index, pos


def hit_test(positions: Sequence[PicPos], x: int, y: int) -> Optional[int]:
    """Index of the first named rectangle containing (x, y), edges included."""
    for index, pos in _named(positions):
        if pos.left <= x <= pos.right and pos.top <= y <= pos.bottom:
            return index
    return None


def hit_test_strict(positions: Sequence[PicPos], x: int, y: int) -> Optional[int]:
    """Index of the first named rectangle strictly containing (x, y)."""
    for index, pos in _named(positions):
        if pos.left < x < pos.right and pos.top < y < pos.bottom:
            return index
    return None


def generate_page(
    layout: PageLayout, video_mem: VideoMem, icon_loader: Callable[[str], PixelData]
) -> None:
    """Draw the layout's icons into ``video_mem`` unless already generated."""
    if video_mem.pic_state is PicState.GENERATED:
        return
    pixels = video_mem.pixels
    clear_rectangle(video_mem, 0, 0, pixels.width - 1, pixels.height - 1, COLOR_BACKGROUND)
    for _, pos in _named(layout.positions):
        icon = icon_loader(pos.name)
        zoomed = pic_zoom(icon, pos.right - pos.left + 1, pos.bottom - pos.top + 1)
        pic_merge(pos.left, pos.top, zoomed, pixels)
    video_mem.pic_state = PicState.GENERATED