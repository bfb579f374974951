"""The main menu, the settings menu and the slideshow interval page."""

from __future__ import annotations

from typing import Optional, Sequence

from .page_manager import (
    InputEvent,
    InputType,
    PageContext,
    PicPos,
    hit_test_strict,
    page_id,
)
from .pixels import PicState, VideoMem, pic_merge, pic_zoom
from .render import invert_rectangle, merge_string_centered

# A layout slot: where an icon goes and the size it is zoomed to.
Slot = tuple[PicPos, int, int]

_MAIN_ICONS = ("browse_mode.bmp", "continue_mod.bmp", "setting.bmp")
_SETTING_ICONS = ("select_fold.bmp", "interval.bmp", "return.bmp")


def _column_layout(xres: int, yres: int, names: Sequence[str]) -> list[Slot]:
    height = yres // 10 * 2
    width = height * 2
    x = (xres - width) // 2
    y = yres // 10
    slots: list[Slot] = []
    for name in names:
        slots.append((PicPos(name, x, y, x + width - 1, y + height - 1), width, height))
        y += yres // 10 * 3
    return slots


def layout_main_page(xres: int, yres: int) -> list[Slot]:
    """Three icons stacked in a centred column."""
    return _column_layout(xres, yres, _MAIN_ICONS)


def layout_setting_page(xres: int, yres: int) -> list[Slot]:
    """Like the main page, but the last ("return") icon is half as wide."""
    slots = _column_layout(xres, yres, _SETTING_ICONS)
    pos, width, height = slots[-1]
    half = width // 2
    pos.left = (xres - half) // 2
    pos.right = pos.left + half
    slots[-1] = (pos, half, height)
    return slots


def layout_interval_page(xres: int, yres: int) -> list[Slot]:
    """inc / time / dec in a column, then ok and cancel side by side."""
    height = int(yres // 10 * 1.5)
    width = height * 2
    half = width // 2

    inc = PicPos("inc.bmp", (xres - half) // 2 - 1, yres // 10 - 1)
    inc.right, inc.bottom = inc.left + half, inc.top + height

    time = PicPos("time.bmp", (xres - width) // 2 - 1, inc.bottom + 1)
    time.right, time.bottom = time.left + width, time.top + height

    dec = PicPos("dec.bmp", (xres - half) // 2 - 1, time.bottom + 1)
    dec.right, dec.bottom = dec.left + half, dec.top + height

    y = dec.bottom + height
    x = (xres - width) // 4 - 1
    ok = PicPos("ok.bmp", x, y, x + width, y + height)
    x = xres - 2 * x
    cancel = PicPos("cancel.bmp", x, y, x + width, y + height)

    return [
        (inc, half, height),
        (time, width, height),
        (dec, half, height),
        (ok, width, height),
        (cancel, width, height),
    ]


def step_interval(value: int, delta: int) -> int:
    """Move the interval by ``delta`` seconds, wrapping within 0..59."""
    value += delta
    if value >= 60:
        return 0
    if value < 0:
        return 59
    return value


def _milliseconds(seconds: float) -> int:
    return round(seconds * 1_000_000) // 1000


def is_out_of_500ms(previous: float, current: float) -> bool:
    """True when ``current`` is more than 500 ms after ``previous`` (seconds)."""
    return _milliseconds(current) > _milliseconds(previous) + 500


class _MenuPage:
    """Shared drawing and input handling for the fixed-layout menu pages."""

    name = ""
    _cache_page = True

    def __init__(self, context: PageContext) -> None:
        self.context = context
        self._slots: Optional[list[Slot]] = None

    def _layout(self, xres: int, yres: int) -> list[Slot]:
        raise NotImplementedError

    @property
    def slots(self) -> list[Slot]:
        if self._slots is None:
            self._slots = self._layout(self.context.xres, self.context.yres)
        return self._slots

    @property
    def positions(self) -> list[PicPos]:
        return [pos for pos, _, _ in self.slots]

    def _draw_icons(self, video_mem: VideoMem) -> None:
        for pos, width, height in self.slots:
            icon = self.context.icon_loader(pos.name)
            pic_merge(pos.left, pos.top, pic_zoom(icon, width, height), video_mem.pixels)

    def _show(self) -> None:
        ctx = self.context
        video_mem = ctx.get_video_mem(page_id(self.name), True)
        try:
            if video_mem.pic_state is not PicState.GENERATED:
                self._draw_icons(video_mem)
                if self._cache_page:
                    video_mem.pic_state = PicState.GENERATED
            if not video_mem.is_device_framebuffer:
                ctx.show_page(video_mem)
        finally:
            video_mem.release()

    def _poll(self, last: InputEvent) -> tuple[Optional[int], InputEvent]:
        """Read one event; only touches that land on an icon replace ``last``."""
        event = self.context.next_event()
        if event.type == InputType.STDIN:
            return None, last
        index = hit_test_strict(self.positions, event.x, event.y)
        if index is None:
            return None, last
        return index, event

    def _toggle(self, index: int) -> None:
        pos = self.positions[index]
        invert_rectangle(self.context.device_mem.pixels, pos.left, pos.top, pos.right, pos.bottom)


class _ButtonPage(_MenuPage):
    """A page whose icons act when released."""

    def _on_release(self, index: int) -> bool:
        """Act on a released icon; return True to leave the page."""
        raise NotImplementedError

    def _button_loop(self) -> None:
        self._show()
        pressed: Optional[int] = None
        last = InputEvent(pressure=0)
        while True:
            index, last = self._poll(last)
            if last.pressure == 0:
                if pressed is not None:
                    self._toggle(pressed)
                    released, pressed = pressed, None
                    if self._on_release(released):
                        return
            elif index is not None and pressed is None:
                pressed = index
                self._toggle(index)


class MainPage(_ButtonPage):
    """Entry menu: manual browsing, slideshow and settings."""

    name = "main"
    _targets = {0: "manul", 1: "auto", 2: "setting"}

    def _layout(self, xres: int, yres: int) -> list[Slot]:
        return layout_main_page(xres, yres)

    def _on_release(self, index: int) -> bool:
        target = self._targets.get(index)
        if target is not None:
            self.context.pages.get(target).run()
            self._show()
        return False

    def run(self) -> None:
        """Show the menu and dispatch touches until input runs out."""
        self._button_loop()


class SettingPage(_ButtonPage):
    """Settings menu: choose a directory, set the interval, or go back."""

    name = "setting"
    _targets = {0: "browse", 1: "interval"}

    def _layout(self, xres: int, yres: int) -> list[Slot]:
        return layout_setting_page(xres, yres)

    def _on_release(self, index: int) -> bool:
        if index == 2:
            return True
        target = self._targets.get(index)
        if target is not None:
            self.context.pages.get(target).run()
            self._show()
        return False

    def run(self) -> None:
        """Show the menu until the return icon is released."""
        self._button_loop()


class IntervalPage(_MenuPage):
    """Adjust the slideshow interval between 0 and 59 seconds."""

    name = "interval"
    _cache_page = False

    def _layout(self, xres: int, yres: int) -> list[Slot]:
        return layout_interval_page(xres, yres)

    def _draw_number(self, number: int) -> None:
        if number > 59:
            raise ValueError(f"interval {number} does not fit in two digits")
        font = self.context.font
        if font is None:
            raise RuntimeError("no font configured")
        pos = self.positions[1]
        set_size = getattr(font, "set_size", None)
        if callable(set_size):
            set_size(pos.bottom - pos.top)
        merge_string_centered(
            self.context.device_mem, pos.left, pos.top, pos.right, pos.bottom,
            f"{number:02d}", font,
        )

    def run(self) -> None:
        """Run until ok (saves the value) or cancel is released."""
        config = self.context.config
        number = config.interval_second
        self._show()
        self._draw_number(number)

        pressed: Optional[int] = None
        pressed_at = 0.0
        last = InputEvent(pressure=0)
        while True:
            index, last = self._poll(last)
            if last.pressure == 0:
                if pressed is None:
                    continue
                self._toggle(pressed)
                released, pressed = pressed, None
                if released == 0:
                    number = step_interval(number, 1)
                    self._draw_number(number)
                elif released == 2:
                    number = step_interval(number, -1)
                    self._draw_number(number)
                elif released == 3:
                    config.interval_second = number
                    return
                elif released == 4:
                    return
            elif index is not None:
                if pressed is None:
                    pressed = index
                    pressed_at = last.time
                    self._toggle(index)
                elif is_out_of_500ms(pressed_at, last.time):
                    pressed_at = last.time
                    number = step_interval(number, 5 if pressed == 0 else -5)
                    self._draw_number(number)