# src/midi2sheet/sheet.py
"""
Full layout of a song: notes -> chords, bars, rests and clef changes per
track, aligned across tracks, cut into staffs and beamed.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from .align import SymbolWidths, align_symbols
from .beams import create_all_beamed_chords
from .clefs import ClefMeasures
from .keysig import KeySignature
from .options import SheetOptions
from .process import apply_options
from .staff import Staff, create_staffs
from .symbols.bar import BarSymbol
from .symbols.base import MusicSymbol, NoteSize, SMALL
from .symbols.chord import ChordSymbol
from .symbols.clef import ClefSymbol
from .symbols.lyric import LyricSymbol
from .symbols.rest import RestSymbol
from .symbols.timesig import TimeSigSymbol
from .timeline import MidiSong, Note, Track
from .timesig import NoteDuration, TimeSignature

log = logging.getLogger(__name__)

# ---------- per-track symbols ----------

def create_chords(notes: Sequence[Note], key: KeySignature, time: TimeSignature,
                  clefs: ClefMeasures, size: NoteSize = SMALL) -> List[ChordSymbol]:
    """One chord per distinct start time; notes inside a chord are ordered by number."""
    state = key.new_state()
    chords: List[ChordSymbol] = []
    i = 0
    while i < len(notes):
        start = notes[i].start_time
        group = []
        while i < len(notes) and notes[i].start_time == start:
            group.append(notes[i])
            i += 1
        group.sort(key=lambda n: n.number)
        chords.append(ChordSymbol(group, key, time, clefs.get_clef(start), state, size))
    return chords


def add_bars(chords: Sequence[ChordSymbol], time: TimeSignature, last_start: int,
             size: NoteSize = SMALL) -> List[MusicSymbol]:
    """Time signature first, then a bar at every measure start up to and past `last_start`."""
    symbols: List[MusicSymbol] = [TimeSigSymbol(time.numerator, time.denominator, size)]
    measure_time = 0
    i = 0
    while i < len(chords):
        if measure_time <= chords[i].start_time:
            symbols.append(BarSymbol(measure_time, size))
            measure_time += time.measure
        else:
            symbols.append(chords[i])
            i += 1
    while measure_time < last_start:
        symbols.append(BarSymbol(measure_time, size))
        measure_time += time.measure
    symbols.append(BarSymbol(measure_time, size))
    return symbols


def get_rests(time: TimeSignature, start: int, end: int, size: NoteSize = SMALL) -> List[RestSymbol]:
    """Rests filling [start, end); dotted gaps become two rests."""
    if end - start < 0:
        return []
    dur = time.get_note_duration(end - start)
    if dur in (NoteDuration.WHOLE, NoteDuration.HALF, NoteDuration.QUARTER, NoteDuration.EIGHTH):
        return [RestSymbol(start, dur, size)]
    if dur == NoteDuration.DOTTED_HALF:
        return [RestSymbol(start, NoteDuration.HALF, size),
                RestSymbol(start + time.quarter * 2, NoteDuration.QUARTER, size)]
    if dur == NoteDuration.DOTTED_QUARTER:
        return [RestSymbol(start, NoteDuration.QUARTER, size),
                RestSymbol(start + time.quarter, NoteDuration.EIGHTH, size)]
    if dur == NoteDuration.DOTTED_EIGHTH:
        return [RestSymbol(start, NoteDuration.EIGHTH, size),
                RestSymbol(start + time.quarter // 2, NoteDuration.SIXTEENTH, size)]
    return []


def add_rests(symbols: Sequence[MusicSymbol], time: TimeSignature) -> List[MusicSymbol]:
    result: List[MusicSymbol] = []
    prev_time = 0
    for sym in symbols:
        result.extend(get_rests(time, prev_time, sym.start_time, sym.size))
        result.append(sym)
        if isinstance(sym, ChordSymbol):
            prev_time = max(sym.end_time, prev_time)
        else:
            prev_time = max(sym.start_time, prev_time)
    return result


def add_clef_changes(symbols: Sequence[MusicSymbol], clefs: ClefMeasures) -> List[MusicSymbol]:
    """A small clef just before every bar whose measure changes clef."""
    result: List[MusicSymbol] = []
    prev = clefs.get_clef(0)
    for sym in symbols:
        if isinstance(sym, BarSymbol):
            clef = clefs.get_clef(sym.start_time)
            if clef != prev:
                result.append(ClefSymbol(clef, sym.start_time - 1, True, sym.size))
            prev = clef
        result.append(sym)
    return result


def create_symbols(track: Track, key: KeySignature, time: TimeSignature, last_start: int,
                   size: NoteSize = SMALL) -> List[MusicSymbol]:
    clefs = ClefMeasures(track.notes, time.measure)
    chords = create_chords(track.notes, key, time, clefs, size)
    symbols = add_bars(chords, time, last_start, size)
    symbols = add_rests(symbols, time)
    return add_clef_changes(symbols, clefs)


def get_lyrics(tracks: Sequence[Track]) -> Optional[List[Optional[List[LyricSymbol]]]]:
    """Lyric symbols per track, or None when no track has any."""
    result: List[Optional[List[LyricSymbol]]] = []
    found = False
    for track in tracks:
        if not track.lyrics:
            result.append(None)
            continue
        found = True
        result.append([LyricSymbol(ly.start_time, ly.text.replace("\0", "")) for ly in track.lyrics])
    return result if found else None

# ---------- the whole sheet ----------

class SheetMusic:
    """
    Laid-out score of a song.

    `staffs` is ordered for vertical stacking: staff 0 of every track,
    then staff 1 of every track, and so on.
    """
    def __init__(self, song: MidiSong, options: Optional[SheetOptions] = None):
        if options is None:
            options = SheetOptions.default(song)
        self.song = song
        self.options = options
        self.size = options.note_size

        tracks = apply_options(song, options)
        if not tracks:
            # nothing selected still yields one empty staff
            tracks = [Track(number=0)]
        self.tracks = tracks
        self.time = options.time if options.time is not None else song.time
        if options.key is not None:
            self.key = options.key
        else:
            self.key = KeySignature.guess(n.number for t in tracks for n in t.notes)

        last_start = song.end_time() + options.shift_time
        symbols = [create_symbols(t, self.key, self.time, last_start, self.size) for t in tracks]

        self.lyrics = get_lyrics(tracks) if options.show_lyrics else None
        widths = SymbolWidths(symbols, self.lyrics)
        symbols = align_symbols(symbols, widths)
        self.symbols = symbols

        self.staffs: List[Staff] = create_staffs(symbols, self.key, self.time.measure,
                                                 options.scroll_vert, options.show_measures, self.size)
        beams = sum(create_all_beamed_chords(staff.symbols, self.time) for staff in self.staffs)
        if self.lyrics is not None:
            for staff in self.staffs:
                staff.add_lyrics(self.lyrics[staff.track])
        # beaming moves stem ends, which changes the heights
        for staff in self.staffs:
            staff.calculate_height()

        log.debug("sheet %s: key %s, %s, %d tracks, %d staffs, %d beams",
                  song.filename or "<bytes>", self.key, self.time, len(tracks), len(self.staffs), beams)

    @property
    def chords(self) -> List[ChordSymbol]:
        return [s for staff in self.staffs for s in staff.symbols if isinstance(s, ChordSymbol)]

    def __repr__(self) -> str:
        return f"SheetMusic(key={self.key}, time={self.time}, staffs={len(self.staffs)})"
