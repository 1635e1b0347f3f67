from __future__ import annotations
import logging
from dataclasses import replace
from typing import List, Sequence, Tuple

from .timeline import LyricEvent, MidiSong, Note, Track, check_start_times
from .timesig import TimeSignature
from .util.time import ms_to_pulses

log = logging.getLogger(__name__)

# starting points of the two-staff split: top of treble, bottom of bass
_PREV_HIGH = 76          # E5
_PREV_LOW = 45           # A3
_OCTAVE = 12

def _sorted_notes(notes: Sequence[Note]) -> List[Note]:
    return sorted(notes, key=lambda n: n.start_time)

# ---------- start times / durations ----------

def round_start_times(tracks: List[Track], combine_ms: int, time: TimeSignature) -> List[Track]:
    """
    Snap start times that are within `combine_ms` of an earlier start time
    to it, so notes played nearly together become one chord.
    """
    starts = sorted(n.start_time for t in tracks for n in t.notes)
    interval = ms_to_pulses(combine_ms, time.quarter, time.tempo)

    for i in range(len(starts) - 1):
        if starts[i + 1] - starts[i] <= interval:
            starts[i + 1] = starts[i]
    check_start_times(tracks)

    result = []
    for track in tracks:
        i = 0
        notes = []
        for note in track.notes:
            while i < len(starts) and note.start_time - interval > starts[i]:
                i += 1
            if i < len(starts) and starts[i] < note.start_time <= starts[i] + interval:
                note = replace(note, start_time=starts[i])
            notes.append(note)
        result.append(track.copy(_sorted_notes(notes)))
    return result

def round_durations(tracks: List[Track], quarter: int) -> List[Track]:
    """
    Lengthen each note to a quarter, eighth, triplet or sixteenth if that
    fits before the next start time.  Never shortens.  A note following a
    note of equal length that ends exactly at its start keeps its length,
    so the two can still be beamed as a pair.
    """
    result = []
    for track in tracks:
        notes = list(track.notes)
        prev = None
        for i in range(len(notes) - 1):
            note1 = notes[i]
            if prev is None:
                prev = note1

            note2 = note1
            for j in range(i + 1, len(notes)):
                note2 = notes[j]
                if note1.start_time < note2.start_time:
                    break
            max_duration = note2.start_time - note1.start_time

            dur = 0
            for candidate in (quarter, quarter // 2, quarter // 3, quarter // 4):
                if candidate <= max_duration:
                    dur = candidate
                    break
            dur = max(dur, note1.duration)

            if prev.end_time == note1.start_time and prev.duration == note1.duration:
                dur = note1.duration

            note1 = replace(note1, duration=dur)
            notes[i] = note1
            if notes[i + 1].start_time != note1.start_time:
                prev = note1
        result.append(track.copy(notes))
    return result

# ---------- two staffs ----------

def combine_to_single_track(tracks: List[Track]) -> Track:
    """All notes in (start, number) order, dropping exact duplicates."""
    if not tracks:
        return Track(number=0)
    if len(tracks) == 1:
        return Track(number=0, notes=list(tracks[0].notes), instrument=tracks[0].instrument)

    merged = sorted((n for t in tracks for n in t.notes),
                    key=lambda n: (n.start_time, n.number))
    notes: List[Note] = []
    for note in merged:
        if notes and notes[-1].start_time == note.start_time and notes[-1].number == note.number:
            continue
        notes.append(note)
    return Track(number=0, notes=notes, instrument=tracks[0].instrument)

def _high_low(notes: Sequence[Note], measure: int, startindex: int,
              start: int, end: int, high: int, low: int) -> Tuple[int, int]:
    """Highest/lowest note sounding within [start, end), looking at most one measure ahead."""
    if start + measure < end:
        end = start + measure
    i = startindex
    while i < len(notes) and notes[i].start_time < end:
        n = notes[i]
        i += 1
        if n.end_time < start or n.start_time + measure < start:
            continue
        high = max(high, n.number)
        low = min(low, n.number)
    return high, low

def _exact_high_low(notes: Sequence[Note], startindex: int, start: int,
                    high: int, low: int) -> Tuple[int, int]:
    """Highest/lowest note starting exactly at `start`."""
    i = startindex
    while i < len(notes) and notes[i].start_time < start:
        i += 1
    while i < len(notes) and notes[i].start_time == start:
        high = max(high, notes[i].number)
        low = min(low, notes[i].number)
        i += 1
    return high, low

def split_track(track: Track, measure: int) -> List[Track]:
    """
    Split one track into a treble (top) and bass (bottom) track.

    A note goes to the side whose reference note is closer.  The
    references, in order of preference: the notes starting with it, the
    notes overlapping it, then the last high/low pair that was more than
    an octave apart.
    """
    notes = track.notes
    top = Track(number=1, instrument=track.instrument)
    bottom = Track(number=2, instrument=track.instrument)
    if not notes:
        return [top, bottom]

    prevhigh, prevlow = _PREV_HIGH, _PREV_LOW
    startindex = 0
    for note in notes:
        number = note.number
        while notes[startindex].end_time < note.start_time:
            startindex += 1

        high, low = _high_low(notes, measure, startindex, note.start_time, note.end_time, number, number)
        high_exact, low_exact = _exact_high_low(notes, startindex, note.start_time, number, number)

        if high_exact - number > _OCTAVE or number - low_exact > _OCTAVE:
            upper = high_exact - number <= number - low_exact
        elif high - number > _OCTAVE or number - low > _OCTAVE:
            upper = high - number <= number - low
        elif high_exact - low_exact > _OCTAVE:
            upper = high_exact - number <= number - low_exact
        elif high - low > _OCTAVE:
            upper = high - number <= number - low
        else:
            upper = prevhigh - number <= number - prevlow
        (top if upper else bottom).notes.append(note)

        if high - low > _OCTAVE:
            prevhigh, prevlow = high, low

    top.notes = _sorted_notes(top.notes)
    bottom.notes = _sorted_notes(bottom.notes)
    return [top, bottom]

def combine_to_two_tracks(tracks: List[Track], measure: int) -> List[Track]:
    single = combine_to_single_track(tracks)
    result = split_track(single, measure)
    lyrics: List[LyricEvent] = sorted((ly for t in tracks for ly in t.lyrics),
                                      key=lambda ly: ly.start_time)
    if lyrics:
        result[0].lyrics = lyrics
    return result

# ---------- shift / transpose ----------

def shift_time(tracks: List[Track], amount: int) -> List[Track]:
    return [t.copy([replace(n, start_time=n.start_time + amount) for n in t.notes]) for t in tracks]

def transpose(tracks: List[Track], amount: int) -> List[Track]:
    return [t.copy([replace(n, number=max(0, min(127, n.number + amount))) for n in t.notes])
            for t in tracks]

# ---------- Pipeline ----------

def apply_options(song: MidiSong, options) -> List[Track]:
    """
    Tracks to lay out: the selected tracks with start times and durations
    rounded, optionally merged into two staffs, shifted and transposed.
    The song itself is left untouched.
    """
    tracks = [t.copy() for t, keep in zip(song.tracks, options.tracks) if keep]
    time = options.time if options.time is not None else song.time

    tracks = round_start_times(tracks, options.combine_interval_ms, song.time)
    tracks = round_durations(tracks, time.quarter)
    if options.two_staffs:
        tracks = combine_to_two_tracks(tracks, song.time.measure)
    if options.shift_time:
        tracks = shift_time(tracks, options.shift_time)
    if options.transpose:
        tracks = transpose(tracks, options.transpose)

    log.debug("apply_options: %d of %d tracks, %d notes", len(tracks), len(song.tracks),
              sum(len(t.notes) for t in tracks))
    return tracks
