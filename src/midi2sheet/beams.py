# src/midi2sheet/beams.py
"""
Beam grouping.

Passes run in a fixed order and a chord that is already beamed is never
regrouped by a later pass:

    6 eighths     (3/4, 6/8 and 6/4 only)
    3 chords      (triplets, or eighths in 12/8)
    4 chords      (aligned to a beat that depends on the duration)
    2 chords      starting on a quarter beat
    2 chords      anywhere
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

from .symbols.bar import BlankSymbol
from .symbols.base import MusicSymbol
from .symbols.chord import ChordSymbol, stem_direction
from .symbols.stem import StemDir
from .timesig import NoteDuration, TimeSignature

log = logging.getLogger(__name__)

_NOT_BEAMABLE = frozenset({
    NoteDuration.WHOLE, NoteDuration.HALF, NoteDuration.DOTTED_HALF,
    NoteDuration.QUARTER, NoteDuration.DOTTED_QUARTER,
})


def _six_eight_like(time: TimeSignature) -> bool:
    return (time.numerator, time.denominator) in ((3, 4), (6, 8), (6, 4))


def _off_beat(start: int, beat: int, time: TimeSignature) -> bool:
    return beat > 0 and start % beat > time.quarter // 6


def find_consecutive_chords(symbols: Sequence[MusicSymbol], start_index: int,
                            num_chords: int) -> Optional[Tuple[List[int], int]]:
    """
    Indexes of the next `num_chords` chords with stems, separated only by
    blanks, plus the horizontal distance from the first chord to the last.
    None when there is no such run left.
    """
    i = start_index
    n = len(symbols)
    while True:
        while i + num_chords <= n:
            sym = symbols[i]
            if isinstance(sym, ChordSymbol) and sym.stem is not None:
                break
            i += 1
        if i + num_chords > n:
            return None

        indexes = [i]
        distance = 0
        found = True
        for _ in range(1, num_chords):
            i += 1
            while i < n and isinstance(symbols[i], BlankSymbol):
                distance += symbols[i].width
                i += 1
            if i >= n:
                return None
            if not isinstance(symbols[i], ChordSymbol):
                found = False
                break
            indexes.append(i)
            distance += symbols[i].width
        if found:
            return indexes, distance
        # search again from the symbol that broke the run


def _final_direction(chords: Sequence[ChordSymbol]) -> Optional[StemDir]:
    """Direction of the two-stem chords in the group; None if there are none."""
    for chord in chords:
        if chord.has_two_stems:
            return chord.stem.direction
    return None


def _natural_direction(chords: Sequence[ChordSymbol]) -> StemDir:
    first = chords[0].stem
    last = chords[-1].stem
    note1 = first.top if first.direction == StemDir.UP else first.bottom
    note2 = last.top if last.direction == StemDir.UP else last.bottom
    return stem_direction(note1, note2, chords[0].clef)


def can_create_beam(chords: Sequence[ChordSymbol], time: TimeSignature, start_beat: bool) -> bool:
    num_chords = len(chords)
    first = chords[0].stem
    last = chords[-1].stem
    if first is None or last is None:
        return False
    measure = chords[0].start_time // time.measure
    dur = first.duration
    dotted8_to_16 = (num_chords == 2 and dur == NoteDuration.DOTTED_EIGHTH
                     and last.duration == NoteDuration.SIXTEENTH)

    if dur in _NOT_BEAMABLE or (dur == NoteDuration.DOTTED_EIGHTH and not dotted8_to_16):
        return False

    start = chords[0].start_time
    if num_chords == 6:
        if dur != NoteDuration.EIGHTH or not _six_eight_like(time):
            return False
        if (time.numerator, time.denominator) == (6, 4) and _off_beat(start, time.quarter * 3, time):
            return False
    elif num_chords == 4:
        if (time.numerator, time.denominator) == (3, 8):
            return False
        if time.numerator not in (2, 4, 8) and dur != NoteDuration.SIXTEENTH:
            return False
        beat = time.quarter
        if dur == NoteDuration.EIGHTH:
            beat = time.quarter * 2
        elif dur == NoteDuration.THIRTY_SECOND:
            beat = time.quarter // 2
        if _off_beat(start, beat, time):
            return False
    elif num_chords == 3:
        twelve_eight = (time.numerator, time.denominator) == (12, 8)
        if not (dur == NoteDuration.TRIPLET or (dur == NoteDuration.EIGHTH and twelve_eight)):
            return False
        beat = time.quarter // 2 * 3 if twelve_eight else time.quarter
        if _off_beat(start, beat, time):
            return False
    elif num_chords == 2 and start_beat:
        if _off_beat(start, time.quarter, time):
            return False

    for chord in chords:
        stem = chord.stem
        if chord.start_time // time.measure != measure:
            return False
        if stem is None or stem.is_beam:
            return False
        if stem.duration != dur and not dotted8_to_16:
            return False

    # two-stem chords must agree on their direction
    direction = None
    for chord in chords:
        if chord.has_two_stems:
            if direction is not None and chord.stem.direction != direction:
                return False
            direction = chord.stem.direction
    if direction is None:
        direction = _natural_direction(chords)

    if direction == StemDir.UP:
        spread = abs(first.top.dist(last.top))
    else:
        spread = abs(first.bottom.dist(last.bottom))
    return spread < 11


def _bring_stems_closer(chords: Sequence[ChordSymbol]):
    first = chords[0].stem
    last = chords[1].stem
    if first.duration == NoteDuration.DOTTED_EIGHTH and last.duration == NoteDuration.SIXTEENTH:
        first.end = first.end.add(2 if first.direction == StemDir.UP else -2)

    distance = abs(first.end.dist(last.end))
    if first.direction == StemDir.UP:
        if first.end.dist(last.end) >= 0:
            last.end = last.end.add(distance // 2)
        else:
            first.end = first.end.add(distance // 2)
    else:
        if first.end.dist(last.end) <= 0:
            last.end = last.end.add(-(distance // 2))
        else:
            first.end = first.end.add(-(distance // 2))


def _line_up_stem_ends(chords: Sequence[ChordSymbol]):
    stems = [c.stem for c in chords]
    first, middle, last = stems[0], stems[1], stems[-1]
    last_i = len(stems) - 1

    if first.direction == StemDir.UP:
        # highest end; on ties the later stem counts
        top_i = 0
        for i, stem in enumerate(stems):
            if stem.end.dist(stems[top_i].end) >= 0:
                top_i = i
        top = stems[top_i].end
        if top_i == 0 and top.dist(last.end) >= 2:
            first.end, middle.end, last.end = top, top.add(-1), top.add(-2)
        elif top_i == last_i and top.dist(first.end) >= 2:
            first.end, middle.end, last.end = top.add(-2), top.add(-1), top
        else:
            first.end = middle.end = last.end = top
    else:
        bottom_i = 0
        for i, stem in enumerate(stems):
            if stem.end.dist(stems[bottom_i].end) <= 0:
                bottom_i = i
        bottom = stems[bottom_i].end
        if bottom_i == 0 and last.end.dist(bottom) >= 2:
            middle.end, last.end = bottom.add(1), bottom.add(2)
        elif bottom_i == last_i and first.end.dist(bottom) >= 2:
            middle.end, first.end = bottom.add(1), bottom.add(2)
        else:
            first.end = middle.end = last.end = bottom

    for stem in stems[1:-1]:
        stem.end = middle.end


def create_beam(symbols: Sequence[MusicSymbol], indexes: Sequence[int], spacing: int):
    """Join the chords at `indexes` (positions in `symbols`) with one beam."""
    chords = [symbols[i] for i in indexes]
    direction = _final_direction(chords)
    if direction is None:
        direction = _natural_direction(chords)
    for chord in chords:
        chord.stem.change_direction(direction)

    if len(chords) == 2:
        _bring_stems_closer(chords)
    else:
        _line_up_stem_ends(chords)

    chords[0].stem.set_pair(indexes[-1], spacing)
    for chord in chords[1:]:
        chord.stem.receiver = True


def create_beamed_chords(symbols: Sequence[MusicSymbol], time: TimeSignature,
                         num_chords: int, start_beat: bool) -> int:
    created = 0
    start_index = 0
    while True:
        found = find_consecutive_chords(symbols, start_index, num_chords)
        if found is None:
            break
        indexes, distance = found
        chords = [symbols[i] for i in indexes]
        if can_create_beam(chords, time, start_beat):
            create_beam(symbols, indexes, distance)
            created += 1
            start_index = indexes[-1] + 1
        else:
            start_index = indexes[0] + 1
    return created


def create_all_beamed_chords(symbols: Sequence[MusicSymbol], time: TimeSignature) -> int:
    """Run every beam pass over one symbol list; returns the number of beams."""
    created = 0
    if _six_eight_like(time):
        created += create_beamed_chords(symbols, time, 6, True)
    created += create_beamed_chords(symbols, time, 3, True)
    created += create_beamed_chords(symbols, time, 4, True)
    created += create_beamed_chords(symbols, time, 2, True)
    created += create_beamed_chords(symbols, time, 2, False)
    if created:
        log.debug("created %d beams", created)
    return created
