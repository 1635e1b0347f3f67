# src/midi2sheet/symbols/timesig.py
from __future__ import annotations

from .base import MusicSymbol, NoteSize, SMALL

# numbers we have glyphs for
DRAWABLE = frozenset({2, 3, 4, 6, 8, 9, 12})


class TimeSigSymbol(MusicSymbol):
    """Numerator over denominator at the very start of a track (start time -1)."""

    def __init__(self, numerator: int, denominator: int, size: NoteSize = SMALL):
        super().__init__(-1, size)
        self.numerator = numerator
        self.denominator = denominator

    @property
    def can_draw(self) -> bool:
        return self.numerator in DRAWABLE and self.denominator in DRAWABLE

    @property
    def min_width(self) -> int:
        if not self.can_draw:
            return 0
        return 2 * self.size.note_height * 2 // 3

    def __repr__(self) -> str:
        return f"TimeSigSymbol({self.numerator}/{self.denominator}, width={self.width})"
