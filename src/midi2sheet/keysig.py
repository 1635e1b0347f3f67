# src/midi2sheet/keysig.py
"""
Key signatures: which accidental a note needs, where the note sits on the
staff, and a best guess of the key from the notes of a song.

The accidental bookkeeping inside one measure lives in an explicit
`AccidentalState` that the caller owns and passes in.  A `KeySignature`
itself is an immutable value.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .clefs import Clef
from .errors import InvalidKeySignatureArgs
from .symbols.accid import Accid, AccidSymbol
from .symbols.base import NoteSize, SMALL
from .whitenote import NoteScale, WhiteNote

_N = Accid.NATURAL
_S = Accid.SHARP
_F = Accid.FLAT
_X = Accid.NONE

# ---------- per-key accidental tables (index = NoteScale, A .. G#) ----------
#            A   A#  B   C   C#  D   D#  E   F   F#  G   G#
SHARP_KEYS: Tuple[Tuple[Accid, ...], ...] = (
    (_X, _F, _X, _X, _S, _X, _S, _X, _X, _S, _X, _S),   # C
    (_X, _F, _X, _X, _S, _X, _S, _X, _N, _X, _X, _S),   # G
    (_X, _F, _X, _N, _X, _X, _S, _X, _N, _X, _X, _S),   # D
    (_X, _F, _X, _N, _X, _X, _S, _X, _N, _X, _N, _X),   # A
    (_X, _F, _X, _N, _X, _N, _X, _X, _N, _X, _N, _X),   # E
    (_N, _X, _X, _N, _X, _N, _X, _X, _N, _X, _N, _X),   # B
    (_N, _X, _X, _N, _X, _N, _X, _N, _X, _X, _N, _X),   # F#
)
FLAT_KEYS: Tuple[Tuple[Accid, ...], ...] = (
    (_X, _F, _X, _X, _S, _X, _F, _X, _X, _S, _X, _F),   # C
    (_X, _X, _N, _X, _F, _X, _F, _X, _X, _S, _X, _F),   # F
    (_X, _X, _N, _X, _F, _X, _X, _N, _X, _S, _X, _F),   # Bb
    (_N, _X, _N, _X, _F, _X, _X, _N, _X, _S, _X, _X),   # Eb
    (_N, _X, _N, _X, _X, _N, _X, _N, _X, _S, _X, _X),   # Ab
    (_N, _X, _N, _X, _X, _N, _X, _N, _X, _X, _N, _X),   # Db
    (_N, _X, _X, _N, _X, _N, _X, _N, _X, _X, _N, _X),   # Gb
)

SHARP_NAMES = ("C", "G", "D", "A", "E", "B", "F#")
FLAT_NAMES = ("C", "F", "Bb", "Eb", "Ab", "Db", "Gb")

# white note letter for each chromatic note, spelled with sharps / with flats
_WHOLE_SHARPS = (WhiteNote.A, WhiteNote.A, WhiteNote.B, WhiteNote.C, WhiteNote.C, WhiteNote.D,
                 WhiteNote.D, WhiteNote.E, WhiteNote.F, WhiteNote.F, WhiteNote.G, WhiteNote.G)
_WHOLE_FLATS = (WhiteNote.A, WhiteNote.B, WhiteNote.B, WhiteNote.C, WhiteNote.D, WhiteNote.D,
                WhiteNote.E, WhiteNote.E, WhiteNote.F, WhiteNote.G, WhiteNote.G, WhiteNote.A)

_SHARP_POSITIONS = {
    Clef.TREBLE: ((WhiteNote.F, 5), (WhiteNote.C, 5), (WhiteNote.G, 5),
                  (WhiteNote.D, 5), (WhiteNote.A, 6), (WhiteNote.E, 5)),
    Clef.BASS: ((WhiteNote.F, 3), (WhiteNote.C, 3), (WhiteNote.G, 3),
                (WhiteNote.D, 3), (WhiteNote.A, 4), (WhiteNote.E, 3)),
}
_FLAT_POSITIONS = {
    Clef.TREBLE: ((WhiteNote.B, 5), (WhiteNote.E, 5), (WhiteNote.A, 5),
                  (WhiteNote.D, 5), (WhiteNote.G, 4), (WhiteNote.C, 5)),
    Clef.BASS: ((WhiteNote.B, 3), (WhiteNote.E, 3), (WhiteNote.A, 3),
                (WhiteNote.D, 3), (WhiteNote.G, 2), (WhiteNote.C, 3)),
}


@dataclass
class AccidentalState:
    """Accidentals in force for each MIDI number during one measure."""
    keymap: List[Accid] = field(default_factory=lambda: [Accid.NONE] * 128)
    measure: int = -1


@dataclass(frozen=True)
class KeySignature:
    num_sharps: int = 0
    num_flats: int = 0

    def __post_init__(self):
        if self.num_sharps and self.num_flats:
            raise InvalidKeySignatureArgs(
                f"Bad KeySignature args: {self.num_sharps} sharps, {self.num_flats} flats")
        if not (0 <= self.num_sharps <= 6 and 0 <= self.num_flats <= 6):
            raise InvalidKeySignatureArgs(
                f"Bad KeySignature args: {self.num_sharps} sharps, {self.num_flats} flats")

    # ---------- construction ----------
    @classmethod
    def from_fifths(cls, fifths: int) -> "KeySignature":
        """Sharps as positive, flats as negative count (the MIDI key meta event convention)."""
        if fifths >= 0:
            return cls(num_sharps=fifths)
        return cls(num_flats=-fifths)

    @classmethod
    def from_name(cls, name: str) -> "KeySignature":
        """Major key by tonic name, e.g. "G", "Bb", "F#"."""
        text = name.strip()
        if text:
            text = text[0].upper() + text[1:].lower()
        if text in SHARP_NAMES:
            return cls(num_sharps=SHARP_NAMES.index(text))
        if text in FLAT_NAMES:
            return cls(num_flats=FLAT_NAMES.index(text))
        raise InvalidKeySignatureArgs(f"Unknown key name {name!r}")

    @property
    def name(self) -> str:
        if self.num_flats:
            return FLAT_NAMES[self.num_flats]
        return SHARP_NAMES[self.num_sharps]

    @property
    def table(self) -> Tuple[Accid, ...]:
        if self.num_flats:
            return FLAT_KEYS[self.num_flats]
        return SHARP_KEYS[self.num_sharps]

    # ---------- measure-scoped accidentals ----------
    def new_state(self) -> AccidentalState:
        state = AccidentalState()
        self._reset(state, -1)
        return state

    def _reset(self, state: AccidentalState, measure: int):
        table = self.table
        for number in range(128):
            state.keymap[number] = table[NoteScale.from_number(number)]
        state.measure = measure

    def enter_measure(self, state: AccidentalState, measure: int):
        """Restore the key's accidentals when `measure` differs from the state's."""
        if measure != state.measure:
            self._reset(state, measure)

    def get_accidental(self, number: int, measure: int, state: AccidentalState) -> Accid:
        """
        Accidental to draw for `number` in `measure`, updating `state`.

        Once a sharp/flat/natural is drawn it holds for the rest of the
        measure, so the neighbouring keys on the same staff line switch
        to needing a cancelling accidental.
        """
        self.enter_measure(state, measure)
        keymap = state.keymap
        result = keymap[number]

        if result == Accid.SHARP:
            keymap[number] = Accid.NONE
            if number > 0:
                keymap[number - 1] = Accid.NATURAL
        elif result == Accid.FLAT:
            keymap[number] = Accid.NONE
            if number < 127:
                keymap[number + 1] = Accid.NATURAL
        elif result == Accid.NATURAL:
            keymap[number] = Accid.NONE
            next_key = number + 1
            prev_key = number - 1
            next_black = next_key <= 127 and NoteScale.is_black_key(NoteScale.from_number(next_key))
            prev_black = prev_key >= 0 and NoteScale.is_black_key(NoteScale.from_number(prev_key))
            next_free = next_key <= 127 and keymap[next_key] == Accid.NONE
            prev_free = prev_key >= 0 and keymap[prev_key] == Accid.NONE

            if next_free and prev_free and next_black and prev_black:
                if self.num_flats == 0:
                    keymap[next_key] = Accid.SHARP
                else:
                    keymap[prev_key] = Accid.FLAT
            elif prev_free and prev_black:
                keymap[prev_key] = Accid.FLAT
            elif next_free and next_black:
                keymap[next_key] = Accid.SHARP
        return result

    def get_white_note(self, number: int, state: Optional[AccidentalState] = None) -> WhiteNote:
        """Staff position of `number`, spelled according to the accidentals in force."""
        notescale = NoteScale.from_number(number)
        octave = (number + 3) // 12 - 1
        accid = state.keymap[number] if state is not None else self.table[notescale]

        if accid == Accid.FLAT:
            letter = _WHOLE_FLATS[notescale]
        elif accid in (Accid.SHARP, Accid.NATURAL):
            letter = _WHOLE_SHARPS[notescale]
        elif NoteScale.is_black_key(notescale):
            letter = _WHOLE_FLATS[notescale] if self.num_flats else _WHOLE_SHARPS[notescale]
        else:
            letter = _WHOLE_SHARPS[notescale]

        # Cb in Gb major, E# in F# major
        if self.num_flats == 6 and notescale == NoteScale.B and accid == Accid.NONE:
            letter = WhiteNote.C
        if self.num_sharps == 6 and notescale == NoteScale.F and accid == Accid.NONE:
            letter = WhiteNote.E

        if notescale == NoteScale.G_SHARP and letter == WhiteNote.A:
            octave += 1
        return WhiteNote(letter, octave)

    # ---------- drawing ----------
    def get_symbols(self, clef: Clef, size: NoteSize = SMALL) -> List[AccidSymbol]:
        """Accidentals drawn at the start of each staff."""
        if self.num_sharps:
            positions = _SHARP_POSITIONS[clef][:self.num_sharps]
            accid = Accid.SHARP
        elif self.num_flats:
            positions = _FLAT_POSITIONS[clef][:self.num_flats]
            accid = Accid.FLAT
        else:
            return []
        return [AccidSymbol(accid, WhiteNote(letter, octave), clef, size)
                for letter, octave in positions]

    # ---------- guessing ----------
    @staticmethod
    def guess(numbers: Iterable[int]) -> "KeySignature":
        """Key needing the fewest accidentals for `numbers`; ties go to the simpler key."""
        scales = np.fromiter(((n + 3) % 12 for n in numbers), dtype=np.int64)
        counts = np.bincount(scales, minlength=12)
        needs_accid = np.array([[accid != Accid.NONE for accid in key.table] for key in _CANDIDATES],
                               dtype=np.int64)
        scores = needs_accid @ counts
        return _CANDIDATES[int(np.argmin(scores))]

    def __str__(self) -> str:
        if self.num_flats:
            return f"{self.name} major ({self.num_flats} flats)"
        return f"{self.name} major ({self.num_sharps} sharps)"


# simplest first: C, G, F, D, Bb, ...  (argmin keeps the first of equal scores)
_CANDIDATES: Sequence[KeySignature] = [KeySignature()] + [
    key
    for count in range(1, 7)
    for key in (KeySignature(num_sharps=count), KeySignature(num_flats=count))
]
