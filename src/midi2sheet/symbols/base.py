# src/midi2sheet/symbols/base.py
"""
Shared size constants and the MusicSymbol base.

Widths and heights are abstract units derived from the line spacing of the
staff.  Two size modes exist (small = 5, large = 7); a `NoteSize` is
passed to every symbol instead of living in a global.
"""
from __future__ import annotations
from dataclasses import dataclass

LINE_WIDTH = 1
LEFT_MARGIN = 4
PAGE_WIDTH = 800
UNBOUNDED_WIDTH = 2_000_000


@dataclass(frozen=True)
class NoteSize:
    line_space: int

    @property
    def staff_height(self) -> int:
        return self.line_space * 4 + LINE_WIDTH * 5

    @property
    def note_height(self) -> int:
        return self.line_space + LINE_WIDTH

    @property
    def note_width(self) -> int:
        return 3 * self.line_space // 2

    @staticmethod
    def for_mode(large: bool) -> "NoteSize":
        return LARGE if large else SMALL


SMALL = NoteSize(line_space=5)
LARGE = NoteSize(line_space=7)


class MusicSymbol:
    """
    Something drawn on a staff at a point in time.

    `width` starts at `min_width` and may only grow (alignment pads it).
    `above_staff` / `below_staff` are the vertical extents outside the
    five staff lines, used for staff height.
    """
    def __init__(self, start_time: int, size: NoteSize = SMALL):
        self.start_time = start_time
        self.size = size
        self._width = None

    @property
    def min_width(self) -> int:
        return 0

    @property
    def width(self) -> int:
        return self.min_width if self._width is None else self._width

    @width.setter
    def width(self, value: int):
        self._width = value

    @property
    def above_staff(self) -> int:
        return 0

    @property
    def below_staff(self) -> int:
        return 0

    @property
    def kind(self) -> str:
        return type(self).__name__.replace("Symbol", "")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(start={self.start_time}, width={self.width})"
