# src/midi2sheet/symbols/stem.py
from __future__ import annotations
from enum import Enum
from typing import Optional

from ..timesig import NoteDuration
from ..whitenote import WhiteNote


class StemDir(Enum):
    UP = "up"
    DOWN = "down"


class StemSide(Enum):
    LEFT = "left"
    RIGHT = "right"


class Stem:
    """
    Stem of a chord, from the note furthest from its end to `end`.

    A beamed group is linked by plain values: the first stem of the group
    stores `pair` (index of the last chord of the group in the staff's
    symbol list) and `width_to_pair`; the other stems are `receiver`s.
    """
    def __init__(self, bottom: WhiteNote, top: WhiteNote, duration: NoteDuration,
                 direction: StemDir, notes_overlap: bool):
        self.bottom = bottom
        self.top = top
        self.duration = duration
        self.notes_overlap = notes_overlap
        self.pair: Optional[int] = None
        self.width_to_pair = 0
        self.receiver = False
        self.direction = direction
        self.side = self._side()
        self.end = self.calculate_end()

    def _side(self) -> StemSide:
        if self.direction == StemDir.UP or self.notes_overlap:
            return StemSide.RIGHT
        return StemSide.LEFT

    def calculate_end(self) -> WhiteNote:
        """Default end: 6 steps past the extreme note, longer for flagged 16ths/32nds."""
        extra = 0
        if self.duration == NoteDuration.SIXTEENTH:
            extra = 2
        elif self.duration == NoteDuration.THIRTY_SECOND:
            extra = 4
        if self.direction == StemDir.UP:
            return self.top.add(6 + extra)
        return self.bottom.add(-6 - extra)

    def change_direction(self, direction: StemDir):
        self.direction = direction
        self.side = self._side()
        self.end = self.calculate_end()

    def set_pair(self, pair_index: int, width_to_pair: int):
        self.pair = pair_index
        self.width_to_pair = width_to_pair

    @property
    def is_beam(self) -> bool:
        return self.receiver or self.pair is not None

    def __repr__(self) -> str:
        return (f"Stem({self.duration.name} {self.direction.value} {self.bottom}-{self.top} "
                f"end={self.end} pair={self.pair} receiver={self.receiver})")
