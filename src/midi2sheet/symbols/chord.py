# src/midi2sheet/symbols/chord.py
"""
A chord: all notes of one track that start at the same time.

Per note we keep its staff position, drawn duration, accidental and
whether the note head sits left or right of the stem.  Notes of different
drawn durations get two stems: the lower group down, the upper group up.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..clefs import Clef, staff_top, staff_bottom
from ..errors import InvalidChordOrder
from ..keysig import AccidentalState, KeySignature
from ..timesig import NoteDuration, TimeSignature
from ..whitenote import WhiteNote
from .accid import Accid, AccidSymbol
from .base import MusicSymbol, NoteSize, SMALL
from .stem import Stem, StemDir

# staff middle used to pick a stem direction
_TREBLE_MIDDLE = WhiteNote(WhiteNote.B, 5)
_BASS_MIDDLE = WhiteNote(WhiteNote.D, 3)


@dataclass
class NoteData:
    number: int
    whitenote: WhiteNote
    duration: NoteDuration
    leftside: bool
    accid: Accid


def stem_direction(bottom: WhiteNote, top: WhiteNote, clef: Clef) -> StemDir:
    middle = _TREBLE_MIDDLE if clef == Clef.TREBLE else _BASS_MIDDLE
    dist = middle.dist(bottom) + middle.dist(top)
    return StemDir.UP if dist >= 0 else StemDir.DOWN


def notes_overlap(notedata: Sequence[NoteData], start: int, end: int) -> bool:
    """True if any note in [start, end) is pushed to the right of the stem."""
    return any(not notedata[i].leftside for i in range(start, end))


def create_note_data(notes: Sequence, key: KeySignature, time: TimeSignature,
                     state: AccidentalState) -> List[NoteData]:
    result: List[NoteData] = []
    prev = None
    for note in notes:
        if prev is not None and note.number < prev.number:
            raise InvalidChordOrder("Chord notes not in increasing order by number")
        measure = note.start_time // time.measure
        key.enter_measure(state, measure)
        whitenote = key.get_white_note(note.number, state)
        data = NoteData(
            number=note.number,
            whitenote=whitenote,
            duration=time.get_note_duration(note.duration),
            leftside=True,
            accid=key.get_accidental(note.number, measure, state),
        )
        if result and whitenote.dist(result[-1].whitenote) == 1:
            data.leftside = not result[-1].leftside
        result.append(data)
        prev = note
    return result


class ChordSymbol(MusicSymbol):
    def __init__(self, notes: Sequence, key: KeySignature, time: TimeSignature, clef: Clef,
                 state: Optional[AccidentalState] = None, size: NoteSize = SMALL):
        if not notes:
            raise InvalidChordOrder("Chord needs at least one note")
        super().__init__(notes[0].start_time, size)
        if state is None:
            state = key.new_state()
        self.clef = clef
        self.end_time = max(n.start_time + n.duration for n in notes)
        self.notedata = create_note_data(notes, key, time, state)
        self.accid_symbols = [AccidSymbol(d.accid, d.whitenote, clef, size)
                              for d in self.notedata if d.accid != Accid.NONE]
        self.stem1: Optional[Stem] = None
        self.stem2: Optional[Stem] = None
        self.has_two_stems = False
        self._create_stems()

    def _create_stems(self):
        data = self.notedata
        dur1 = data[0].duration
        dur2 = dur1
        change = -1
        for i, d in enumerate(data):
            dur2 = d.duration
            if dur1 != dur2:
                change = i
                break

        if dur1 != dur2:
            self.has_two_stems = True
            self.stem1 = Stem(data[0].whitenote, data[change - 1].whitenote, dur1,
                              StemDir.DOWN, notes_overlap(data, 0, change))
            self.stem2 = Stem(data[change].whitenote, data[-1].whitenote, dur2,
                              StemDir.UP, notes_overlap(data, change, len(data)))
        else:
            direction = stem_direction(data[0].whitenote, data[-1].whitenote, self.clef)
            self.stem1 = Stem(data[0].whitenote, data[-1].whitenote, dur1,
                              direction, notes_overlap(data, 0, len(data)))

        if dur1 == NoteDuration.WHOLE:
            self.stem1 = None
        if dur2 == NoteDuration.WHOLE:
            self.stem2 = None

    @property
    def stem(self) -> Optional[Stem]:
        """The stem used for beaming; with two stems the shorter duration wins."""
        if self.stem1 is None:
            return self.stem2
        if self.stem2 is None:
            return self.stem1
        return self.stem1 if self.stem1.duration < self.stem2.duration else self.stem2

    @property
    def numbers(self) -> List[int]:
        return [d.number for d in self.notedata]

    @property
    def min_width(self) -> int:
        nh = self.size.note_height
        result = 2 * nh + nh * 3 // 4
        if self.accid_symbols:
            result += self.accid_symbols[0].min_width
            for prev, accid in zip(self.accid_symbols, self.accid_symbols[1:]):
                if prev.note.dist(accid.note) < 6:
                    result += accid.min_width
        return result

    @property
    def above_staff(self) -> int:
        topnote = self.notedata[-1].whitenote
        for stem in (self.stem1, self.stem2):
            if stem is not None:
                topnote = WhiteNote.max(topnote, stem.end)
        dist = topnote.dist(staff_top(self.clef)) * self.size.note_height // 2
        result = max(dist, 0)
        for accid in self.accid_symbols:
            result = max(result, accid.above_staff)
        return result

    @property
    def below_staff(self) -> int:
        bottomnote = self.notedata[0].whitenote
        for stem in (self.stem1, self.stem2):
            if stem is not None:
                bottomnote = WhiteNote.min(bottomnote, stem.end)
        dist = staff_bottom(self.clef).dist(bottomnote) * self.size.note_height // 2
        result = max(dist, 0)
        for accid in self.accid_symbols:
            result = max(result, accid.below_staff)
        return result

    def __repr__(self) -> str:
        notes = " ".join(f"{d.whitenote}{'' if d.accid == Accid.NONE else d.accid.value[0]}"
                         f":{d.duration.name}" for d in self.notedata)
        return f"ChordSymbol(start={self.start_time}, end={self.end_time}, [{notes}], width={self.width})"
