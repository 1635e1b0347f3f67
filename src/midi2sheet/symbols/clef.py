# src/midi2sheet/symbols/clef.py
from __future__ import annotations

from ..clefs import Clef
from .base import MusicSymbol, NoteSize, SMALL


class ClefSymbol(MusicSymbol):
    """
    Treble or bass clef.  The large form starts each staff, the small form
    marks a clef change just before a bar line.
    """
    def __init__(self, clef: Clef, start_time: int, small: bool, size: NoteSize = SMALL):
        super().__init__(start_time, size)
        self.clef = clef
        self.small = small

    @property
    def min_width(self) -> int:
        return self.size.note_width * (2 if self.small else 3)

    @property
    def above_staff(self) -> int:
        if self.clef == Clef.TREBLE and not self.small:
            return 2 * self.size.note_height
        return 0

    @property
    def below_staff(self) -> int:
        if self.clef != Clef.TREBLE:
            return 0
        return self.size.note_height if self.small else 2 * self.size.note_height

    def __repr__(self) -> str:
        return f"ClefSymbol({self.clef.value}, start={self.start_time}, small={self.small}, width={self.width})"
