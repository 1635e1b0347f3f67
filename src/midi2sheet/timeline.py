from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import MidiFileError
from .events import (
    EventKind, RawEvent, META_LYRIC, PERCUSSION, PERCUSSION_CHANNEL, instrument_name,
)
from .timesig import TimeSignature
from .util.time import DEFAULT_TEMPO

log = logging.getLogger(__name__)

# --- Pass 1: decoded file ---

@dataclass
class TrackIssue:
    """A recoverable problem found while decoding one track."""
    track_index: int
    offset: int
    tick: int
    detail: str

@dataclass
class DecodedMidi:
    track_mode: int
    quarter: int                                     # pulses per quarter note
    events: List[List[RawEvent]] = field(default_factory=list)
    issues: List[TrackIssue] = field(default_factory=list)

# --- Pass 2: notes per track ---

@dataclass(frozen=True)
class Note:
    start_time: int
    channel: int
    number: int
    duration: int

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

@dataclass(frozen=True)
class LyricEvent:
    start_time: int
    text: str

@dataclass
class Track:
    number: int                                      # index of the MTrk chunk it came from
    notes: List[Note] = field(default_factory=list)
    instrument: int = 0
    lyrics: List[LyricEvent] = field(default_factory=list)

    @property
    def instrument_name(self) -> str:
        return instrument_name(self.instrument)

    @property
    def channels(self) -> List[int]:
        return sorted({n.channel for n in self.notes})

    def copy(self, notes: Optional[List[Note]] = None) -> "Track":
        return replace(self, notes=list(self.notes if notes is None else notes),
                       lyrics=list(self.lyrics))


def build_track(events: Sequence[RawEvent], number: int) -> Track:
    """
    Pair NoteOn/NoteOff events into Notes.

    Pending NoteOns are kept on a stack per (channel, number); a NoteOff
    (or NoteOn with velocity 0) closes the most recent one.  NoteOns that
    are never closed and zero-length notes are dropped.
    """
    pending: Dict[Tuple[int, int], List[int]] = {}
    raw: List[list] = []                             # [start, channel, number, duration]
    instrument = 0
    lyrics: List[LyricEvent] = []

    for ev in events:
        if ev.is_note_on:
            pending.setdefault((ev.channel, ev.note_number), []).append(len(raw))
            raw.append([ev.start_time, ev.channel, ev.note_number, None])
        elif ev.is_note_off:
            stack = pending.get((ev.channel, ev.note_number))
            if stack:
                idx = stack.pop()
                raw[idx][3] = ev.start_time - raw[idx][0]
        elif ev.kind == EventKind.PROGRAM_CHANGE:
            instrument = ev.instrument
        elif ev.is_meta(META_LYRIC):
            lyrics.append(LyricEvent(ev.start_time, ev.text))

    notes = [Note(start, ch, num, dur) for start, ch, num, dur in raw if dur]
    notes.sort(key=lambda n: n.start_time)
    if notes and notes[0].channel == PERCUSSION_CHANNEL:
        instrument = PERCUSSION
    return Track(number=number, notes=notes, instrument=instrument, lyrics=lyrics)


def has_multiple_channels(track: Track) -> bool:
    if not track.notes:
        return False
    first = track.notes[0].channel
    return any(n.channel != first for n in track.notes)


def split_channels(track: Track, events: Sequence[RawEvent]) -> List[Track]:
    """
    One Track per channel of `track`, in order of first appearance.
    The instrument of each comes from the channel's program change;
    channel 9 is always percussion.  Lyrics stay with the first track.
    """
    channel_instruments = [0] * 16
    for ev in events:
        if ev.kind == EventKind.PROGRAM_CHANGE:
            channel_instruments[ev.channel] = ev.instrument
    channel_instruments[PERCUSSION_CHANNEL] = PERCUSSION

    by_channel: Dict[int, Track] = {}
    result: List[Track] = []
    for note in track.notes:
        sub = by_channel.get(note.channel)
        if sub is None:
            sub = Track(number=track.number, instrument=channel_instruments[note.channel])
            by_channel[note.channel] = sub
            result.append(sub)
        sub.notes.append(note)
    if result:
        result[0].lyrics = list(track.lyrics)
    return result


def check_start_times(tracks: Sequence[Track]) -> None:
    for track in tracks:
        prev = -1
        for note in track.notes:
            if note.start_time < prev:
                raise MidiFileError(f"Track {track.number}: start times not in increasing order")
            prev = note.start_time

# --- Pass 3: the song ---

@dataclass
class MidiSong:
    filename: str
    track_mode: int
    time: TimeSignature
    tracks: List[Track]
    events: List[List[RawEvent]]
    track_per_channel: bool = False
    issues: List[TrackIssue] = field(default_factory=list)

    @property
    def quarter(self) -> int:
        return self.time.quarter

    @property
    def total_pulses(self) -> int:
        return max((n.end_time for t in self.tracks for n in t.notes), default=0)

    def end_time(self) -> int:
        """Start time of the last note of any track."""
        return max((t.notes[-1].start_time for t in self.tracks if t.notes), default=0)

    @classmethod
    def from_decoded(cls, decoded: DecodedMidi, filename: str = "") -> "MidiSong":
        tracks: List[Track] = []
        for number, events in enumerate(decoded.events):
            track = build_track(events, number)
            if track.notes:
                tracks.append(track)

        track_per_channel = False
        if len(tracks) == 1 and has_multiple_channels(tracks[0]):
            only = tracks[0]
            tracks = split_channels(only, decoded.events[only.number])
            track_per_channel = True
            log.debug("split track %d into %d channel tracks", only.number, len(tracks))
        check_start_times(tracks)

        tempo = 0
        numerator, denominator = 0, 0
        for events in decoded.events:
            for ev in events:
                if tempo == 0 and ev.tempo is not None:
                    tempo = ev.tempo
                sig = ev.time_signature
                if numerator == 0 and sig is not None:
                    numerator, denominator = sig
        if tempo == 0:
            tempo = DEFAULT_TEMPO
        if numerator == 0:
            numerator, denominator = 4, 4

        time = TimeSignature(numerator, denominator, decoded.quarter, tempo)
        log.debug("song %s: %d tracks, %s", filename or "<bytes>", len(tracks), time)
        return cls(filename=filename, track_mode=decoded.track_mode, time=time, tracks=tracks,
                   events=decoded.events, track_per_channel=track_per_channel,
                   issues=list(decoded.issues))
