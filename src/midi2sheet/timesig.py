# src/midi2sheet/timesig.py
"""
Time signature of a song plus the pulse -> note-duration quantizer.

All MIDI time is measured in pulses.  A note lasts some number of pulses
(120, 240, ...); the quantizer turns that into the duration drawn on the
staff (quarter, eighth, ...).  The bands are fractions of a whole note:

    1     = 32/32      3/16 =  6/32
    3/4   = 24/32      1/8  =  4/32 = 8/64
    1/2   = 16/32      triplet     ~ 5.33/64
    3/8   = 12/32      1/16 =  2/32 = 4/64
    1/4   =  8/32      1/32 =  1/32 = 2/64
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum

from .errors import InvalidTimeSignature
from .util.time import DEFAULT_TEMPO


class NoteDuration(IntEnum):
    THIRTY_SECOND = 0
    SIXTEENTH = 1
    TRIPLET = 2
    EIGHTH = 3
    DOTTED_EIGHTH = 4
    QUARTER = 5
    DOTTED_QUARTER = 6
    HALF = 7
    DOTTED_HALF = 8
    WHOLE = 9


# (numerator, denominator) of a whole note, checked top-down
_BANDS = (
    (28, 32, NoteDuration.WHOLE),
    (20, 32, NoteDuration.DOTTED_HALF),
    (14, 32, NoteDuration.HALF),
    (10, 32, NoteDuration.DOTTED_QUARTER),
    (7, 32, NoteDuration.QUARTER),
    (5, 32, NoteDuration.DOTTED_EIGHTH),
    (6, 64, NoteDuration.EIGHTH),
    (5, 64, NoteDuration.TRIPLET),
    (3, 64, NoteDuration.SIXTEENTH),
)


@dataclass(frozen=True)
class TimeSignature:
    numerator: int
    denominator: int
    quarter: int                  # pulses per quarter note
    tempo: int = DEFAULT_TEMPO    # µs per quarter note

    def __post_init__(self):
        if self.numerator <= 0 or self.denominator <= 0 or self.quarter <= 0:
            raise InvalidTimeSignature(
                f"Invalid time signature {self.numerator}/{self.denominator} (quarter={self.quarter})")
        # files regularly claim 5/x where 4/x was meant
        if self.numerator == 5:
            object.__setattr__(self, "numerator", 4)
        if self.measure <= 0:
            raise InvalidTimeSignature(
                f"Time signature {self.numerator}/{self.denominator} at quarter={self.quarter} "
                f"gives an empty measure")

    @property
    def measure(self) -> int:
        """Pulses per measure (truncated once, here)."""
        return self.numerator * self.quarter * 4 // self.denominator

    def get_measure(self, time: int) -> int:
        return time // self.measure

    def get_note_duration(self, duration: int) -> NoteDuration:
        """Quantize a pulse count; exact integer comparisons, no truncation."""
        whole = self.quarter * 4
        for num, den, result in _BANDS:
            if duration * den >= num * whole:
                return result
        return NoteDuration.THIRTY_SECOND

    def duration_to_time(self, dur: NoteDuration) -> int:
        """Canonical pulse length of a duration."""
        eighth = self.quarter // 2
        sixteenth = eighth // 2
        return {
            NoteDuration.WHOLE: self.quarter * 4,
            NoteDuration.DOTTED_HALF: self.quarter * 3,
            NoteDuration.HALF: self.quarter * 2,
            NoteDuration.DOTTED_QUARTER: 3 * eighth,
            NoteDuration.QUARTER: self.quarter,
            NoteDuration.DOTTED_EIGHTH: 3 * sixteenth,
            NoteDuration.EIGHTH: eighth,
            NoteDuration.TRIPLET: self.quarter // 3,
            NoteDuration.SIXTEENTH: sixteenth,
            NoteDuration.THIRTY_SECOND: sixteenth // 2,
        }[dur]

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator} quarter={self.quarter} tempo={self.tempo}"
