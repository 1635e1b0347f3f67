# src/midi2sheet/whitenote.py
"""
Chromatic scale helpers and the WhiteNote, i.e. a staff position.

A white note is a letter (A..G) plus an octave.  The octave number changes
between G and A, not between B and C:  ... F3 G3 A4 B4 C4 D4 ...  Middle C is C4.
"""
from __future__ import annotations
from dataclasses import dataclass


class NoteScale:
    """The 12 chromatic notes, counted from A."""
    A = 0
    A_SHARP = B_FLAT = 1
    B = 2
    C = 3
    C_SHARP = D_FLAT = 4
    D = 5
    D_SHARP = E_FLAT = 6
    E = 7
    F = 8
    F_SHARP = G_FLAT = 9
    G = 10
    G_SHARP = A_FLAT = 11

    BLACK_KEYS = frozenset({1, 4, 6, 9, 11})

    @staticmethod
    def to_number(notescale: int, octave: int) -> int:
        return 9 + notescale + octave * 12

    @staticmethod
    def from_number(number: int) -> int:
        return (number + 3) % 12

    @staticmethod
    def is_black_key(notescale: int) -> bool:
        return notescale in NoteScale.BLACK_KEYS


# letter -> chromatic offset from A
_LETTER_SCALE = (NoteScale.A, NoteScale.B, NoteScale.C, NoteScale.D,
                 NoteScale.E, NoteScale.F, NoteScale.G)
LETTER_NAMES = "ABCDEFG"


@dataclass(frozen=True, order=False)
class WhiteNote:
    letter: int   # 0=A .. 6=G
    octave: int

    A = 0
    B = 1
    C = 2
    D = 3
    E = 4
    F = 5
    G = 6

    def __post_init__(self):
        if not 0 <= self.letter <= 6:
            raise ValueError(f"Letter {self.letter} is incorrect")

    def dist(self, w: "WhiteNote") -> int:
        """Distance in staff steps, `self - w` (C4 - A4 == 2)."""
        return (self.octave - w.octave) * 7 + (self.letter - w.letter)

    def add(self, amount: int) -> "WhiteNote":
        num = self.octave * 7 + self.letter + amount
        if num < 0:
            num = 0
        return WhiteNote(num % 7, num // 7)

    def number(self) -> int:
        """MIDI number of the (unaltered) white key."""
        return NoteScale.to_number(_LETTER_SCALE[self.letter], self.octave)

    @staticmethod
    def max(x: "WhiteNote", y: "WhiteNote") -> "WhiteNote":
        return x if x.dist(y) > 0 else y

    @staticmethod
    def min(x: "WhiteNote", y: "WhiteNote") -> "WhiteNote":
        return x if x.dist(y) < 0 else y

    def __str__(self) -> str:
        return f"{LETTER_NAMES[self.letter]}{self.octave}"


TOP_TREBLE = WhiteNote(WhiteNote.E, 5)
BOTTOM_TREBLE = WhiteNote(WhiteNote.F, 4)
TOP_BASS = WhiteNote(WhiteNote.G, 3)
BOTTOM_BASS = WhiteNote(WhiteNote.A, 3)
MIDDLE_C = WhiteNote(WhiteNote.C, 4)
