# src/midi2sheet/symbols/rest.py
from __future__ import annotations

from ..timesig import NoteDuration
from .base import MusicSymbol, NoteSize, SMALL


class RestSymbol(MusicSymbol):
    def __init__(self, start_time: int, duration: NoteDuration, size: NoteSize = SMALL):
        super().__init__(start_time, size)
        self.duration = duration

    @property
    def min_width(self) -> int:
        nh = self.size.note_height
        return 2 * nh + nh // 2

    def __repr__(self) -> str:
        return f"RestSymbol(start={self.start_time}, {self.duration.name}, width={self.width})"
