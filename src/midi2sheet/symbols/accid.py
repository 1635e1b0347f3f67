# src/midi2sheet/symbols/accid.py
from __future__ import annotations
from enum import Enum

from ..clefs import Clef, staff_top, staff_bottom
from ..whitenote import WhiteNote
from .base import MusicSymbol, NoteSize, SMALL


class Accid(Enum):
    NONE = "none"
    SHARP = "sharp"
    FLAT = "flat"
    NATURAL = "natural"


class AccidSymbol(MusicSymbol):
    """A sharp, flat or natural drawn left of a note (or in a key signature)."""

    def __init__(self, accid: Accid, whitenote: WhiteNote, clef: Clef, size: NoteSize = SMALL):
        super().__init__(-1, size)
        self.accid = accid
        self.whitenote = whitenote
        self.clef = clef

    @property
    def note(self) -> WhiteNote:
        return self.whitenote

    @property
    def min_width(self) -> int:
        return 3 * self.size.note_height // 2

    @property
    def above_staff(self) -> int:
        nh = self.size.note_height
        dist = staff_top(self.clef).dist(self.whitenote) * nh // 2
        if self.accid in (Accid.SHARP, Accid.NATURAL):
            dist -= nh
        elif self.accid == Accid.FLAT:
            dist -= 3 * nh // 2
        return -dist if dist < 0 else 0

    @property
    def below_staff(self) -> int:
        nh = self.size.note_height
        dist = staff_bottom(self.clef).dist(self.whitenote) * nh // 2 + nh
        return dist if dist > 0 else 0

    def __repr__(self) -> str:
        return f"AccidSymbol({self.accid.value} {self.whitenote}, width={self.width})"
