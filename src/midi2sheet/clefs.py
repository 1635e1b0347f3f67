# src/midi2sheet/clefs.py
from __future__ import annotations
from enum import Enum
from typing import List, Sequence

from .whitenote import (
    WhiteNote, TOP_TREBLE, BOTTOM_TREBLE, TOP_BASS, BOTTOM_BASS, MIDDLE_C,
)


class Clef(Enum):
    TREBLE = "treble"
    BASS = "bass"


def staff_top(clef: Clef) -> WhiteNote:
    return TOP_TREBLE if clef == Clef.TREBLE else TOP_BASS


def staff_bottom(clef: Clef) -> WhiteNote:
    return BOTTOM_TREBLE if clef == Clef.TREBLE else BOTTOM_BASS


def main_clef(notes: Sequence) -> Clef:
    """Clef of the whole track: average note >= middle C -> treble."""
    if not notes:
        return Clef.TREBLE
    total = sum(n.number for n in notes)
    if total // len(notes) >= MIDDLE_C.number():
        return Clef.TREBLE
    return Clef.BASS


class ClefMeasures:
    """
    Clef (treble or bass) used by each measure of one track.

    Per measure the average note number decides:
      avg >= F4 (bottom of treble)  -> treble
      avg <= G3 (top of bass)       -> bass
      in between                    -> the track's main clef
      empty measure                 -> previous measure's clef
    """
    def __init__(self, notes: Sequence, measure: int):
        self.measure = measure
        self.main = main_clef(notes)
        self.clefs: List[Clef] = []

        treble_floor = BOTTOM_TREBLE.number()
        bass_ceiling = TOP_BASS.number()
        clef = self.main
        next_measure = measure
        pos = 0
        while pos < len(notes):
            total = 0
            count = 0
            while pos < len(notes) and notes[pos].start_time < next_measure:
                total += notes[pos].number
                count += 1
                pos += 1
            if count == 0:
                count = 1
            avg = total // count
            if avg == 0:
                pass   # no notes in this measure, keep the previous clef
            elif avg >= treble_floor:
                clef = Clef.TREBLE
            elif avg <= bass_ceiling:
                clef = Clef.BASS
            else:
                clef = self.main
            self.clefs.append(clef)
            next_measure += measure
        self.clefs.append(clef)

    def get_clef(self, start_time: int) -> Clef:
        index = start_time // self.measure
        if index >= len(self.clefs):
            return self.clefs[-1]
        return self.clefs[max(0, index)]
