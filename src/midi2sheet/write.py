from __future__ import annotations
import io
import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Sequence, Union

import mido

from .events import EventKind, RawEvent, tempo_event
from .timeline import MidiSong
from .util.binary import MidiWriter

log = logging.getLogger(__name__)

# ---------- internal helpers ----------

def _write_event_data(w: MidiWriter, ev: RawEvent):
    kind = ev.kind
    if kind in (EventKind.NOTE_ON, EventKind.NOTE_OFF):
        w.write_byte(ev.note_number)
        w.write_byte(ev.velocity)
    elif kind == EventKind.KEY_PRESSURE:
        w.write_byte(ev.note_number)
        w.write_byte(ev.pressure)
    elif kind == EventKind.CONTROL_CHANGE:
        w.write_byte(ev.control_num)
        w.write_byte(ev.control_value)
    elif kind == EventKind.PROGRAM_CHANGE:
        w.write_byte(ev.instrument)
    elif kind == EventKind.CHANNEL_PRESSURE:
        w.write_byte(ev.pressure)
    elif kind == EventKind.PITCH_BEND:
        w.write_short(ev.pitch_bend)
    elif kind == EventKind.META:
        w.write_byte(ev.meta_type)
        w.write_varlen(len(ev.data))
        w.write_bytes(ev.data)
    else:                                            # sysex
        w.write_varlen(len(ev.data))
        w.write_bytes(ev.data)

def _encode_track(events: Sequence[RawEvent]) -> bytes:
    """Track body.  Running status is kept where the source event used it."""
    w = MidiWriter()
    status = 0
    for ev in events:
        w.write_varlen(ev.delta_time)
        if ev.kind.is_channel and not ev.has_status and ev.status == status:
            pass
        else:
            w.write_byte(ev.status)
        status = ev.status if ev.kind.is_channel else 0
        _write_event_data(w, ev)
    return w.getvalue()

def _clamp_note(number: int) -> int:
    return max(0, min(127, number))

def _with_delta_times(events: List[RawEvent]) -> List[RawEvent]:
    """Recompute delta times from start times (after inserting or dropping events)."""
    out = []
    prev = 0
    for ev in events:
        out.append(replace(ev, delta_time=ev.start_time - prev))
        prev = ev.start_time
    return out

# ---------- public writer APIs ----------

def encode_midi(events: Sequence[Sequence[RawEvent]], track_mode: int, quarter: int) -> bytes:
    """Serialize per-track event lists to Standard MIDI File bytes."""
    w = MidiWriter()
    w.write_ascii("MThd")
    w.write_int(6)
    w.write_short(track_mode)
    w.write_short(len(events))
    w.write_short(quarter)
    for track in events:
        body = _encode_track(track)
        w.write_ascii("MTrk")
        w.write_int(len(body))
        w.write_bytes(body)
    return w.getvalue()

def write_midi_file(path: Union[str, Path], events: Sequence[Sequence[RawEvent]],
                    track_mode: int, quarter: int):
    Path(path).write_bytes(encode_midi(events, track_mode, quarter))

def to_mido(events: Sequence[Sequence[RawEvent]], track_mode: int, quarter: int) -> mido.MidiFile:
    """The same stream as a mido.MidiFile (for saving or sending to a port)."""
    data = encode_midi(events, track_mode, quarter)
    return mido.MidiFile(file=io.BytesIO(data))

def apply_options_to_events(song: MidiSong, options) -> List[List[RawEvent]]:
    """
    Copy of the song's events for playback with the chosen options:
      - a tempo event at the head of every track, every tempo set to `options.tempo`
      - note numbers transposed (clamped to 0..127)
      - program changes replaced unless default instruments are used
      - muted tracks dropped (muted channels' notes, when the song was split per channel)
    `options.mute` / `options.instruments` are indexed like `song.tracks`.
    """
    if song.track_per_channel:
        return _apply_options_per_channel(song, options)

    track_of_chunk: Dict[int, int] = {t.number: i for i, t in enumerate(song.tracks)}
    result: List[List[RawEvent]] = []
    for chunk, events in enumerate(song.events):
        index = track_of_chunk.get(chunk)
        if index is not None and options.mute[index]:
            continue
        instrument = None
        if index is not None and not options.use_default_instruments:
            instrument = options.instruments[index]
        result.append(_transform_events(events, options, lambda ev: instrument))
    log.debug("playback: %d of %d tracks kept", len(result), len(song.events))
    return result

def _apply_options_per_channel(song: MidiSong, options) -> List[List[RawEvent]]:
    keep_channel = [False] * 16
    channel_instrument: Dict[int, int] = {}
    for i, track in enumerate(song.tracks):
        channel = track.notes[0].channel
        if not options.mute[i]:
            keep_channel[channel] = True
        channel_instrument[channel] = options.instruments[i]

    def instrument_for(ev: RawEvent):
        if options.use_default_instruments:
            return None
        return channel_instrument.get(ev.channel)

    result = []
    for events in song.events:
        kept = [ev for ev in events
                if not (ev.kind in (EventKind.NOTE_ON, EventKind.NOTE_OFF) and not keep_channel[ev.channel])]
        result.append(_transform_events(kept, options, instrument_for))
    return result

def _transform_events(events: Sequence[RawEvent], options, instrument_for) -> List[RawEvent]:
    out: List[RawEvent] = [tempo_event(options.tempo)]
    for ev in events:
        if ev.tempo is not None:
            ev = replace(ev, data=int(options.tempo).to_bytes(3, "big"))
        elif ev.kind in (EventKind.NOTE_ON, EventKind.NOTE_OFF, EventKind.KEY_PRESSURE):
            ev = replace(ev, note_number=_clamp_note(ev.note_number + options.transpose))
        elif ev.kind == EventKind.PROGRAM_CHANGE:
            instrument = instrument_for(ev)
            if instrument is not None and instrument < 128:
                ev = replace(ev, instrument=instrument)
        out.append(ev)
    return _with_delta_times(out)
