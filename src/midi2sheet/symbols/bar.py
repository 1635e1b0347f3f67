# src/midi2sheet/symbols/bar.py
from __future__ import annotations

from .base import MusicSymbol, NoteSize, SMALL


class BarSymbol(MusicSymbol):
    """Vertical line at the start of a measure."""

    @property
    def min_width(self) -> int:
        return 2 * self.size.line_space


class BlankSymbol(MusicSymbol):
    """Invisible placeholder so every track has a symbol at every start time."""

    def __init__(self, start_time: int, width: int = 0, size: NoteSize = SMALL):
        super().__init__(start_time, size)
        self._min = width

    @property
    def min_width(self) -> int:
        return self._min
