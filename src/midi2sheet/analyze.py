# src/midi2sheet/analyze.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .errors import BadHeader, TruncatedFile, UnknownEventCode
from .events import EventKind, RawEvent, kind_from_status
from .timeline import DecodedMidi, MidiSong, TrackIssue
from .util.binary import MidiReader

log = logging.getLogger(__name__)


def decode_midi(data: bytes) -> DecodedMidi:
    """
    Parse Standard MIDI File bytes into per-track event lists.

    Header problems are fatal (BadHeader / TruncatedFile).  A track that
    ends in the middle of an event keeps the events read so far and the
    problem is recorded in `issues`.
    """
    reader = MidiReader(data)

    if reader.read_ascii(4) != "MThd":
        raise BadHeader("Doesn't start with MThd", 0)
    if reader.read_int() != 6:
        raise BadHeader("Bad MThd header", 4)
    track_mode = reader.read_short()
    num_tracks = reader.read_short()
    quarter = reader.read_short()

    decoded = DecodedMidi(track_mode=track_mode, quarter=quarter)
    for index in range(num_tracks):
        events, issue = _read_track(reader, index)
        decoded.events.append(events)
        if issue is not None:
            log.warning("track %d truncated at offset %d (tick %d): %s",
                        issue.track_index, issue.offset, issue.tick, issue.detail)
            decoded.issues.append(issue)

    log.debug("decoded %d tracks, mode %d, %d pulses/quarter", num_tracks, track_mode, quarter)
    return decoded


def _read_track(reader: MidiReader, index: int) -> Tuple[List[RawEvent], Optional[TrackIssue]]:
    header_offset = reader.offset
    if reader.read_ascii(4) != "MTrk":
        raise BadHeader("Bad MTrk header", header_offset)
    track_len = reader.read_int()
    track_end = reader.offset + track_len

    events: List[RawEvent] = []
    start_time = 0
    status = 0                                       # running status (channel messages only)

    while reader.offset < track_end:
        try:
            delta = reader.read_varlen()
            start_time += delta
            has_status = reader.peek() >= 0x80
            if has_status:
                status = reader.read_byte()
            elif status == 0:
                raise UnknownEventCode(f"Unknown event {reader.peek():#04x}", reader.offset)
            event = _read_event(reader, status, delta, start_time, has_status)
        except TruncatedFile as e:
            return events, TrackIssue(index, e.offset, start_time, e.message)
        events.append(event)
        if not event.kind.is_channel:
            # running status is not carried across meta / sysex events
            status = 0
    return events, None


def _read_event(reader: MidiReader, status: int, delta: int, start_time: int,
                has_status: bool) -> RawEvent:
    kind = kind_from_status(status)
    if kind is None:
        raise UnknownEventCode(f"Unknown event {status:#04x}", reader.offset - 1)

    common = dict(delta_time=delta, start_time=start_time, kind=kind, has_status=has_status)
    if kind.is_channel:
        channel = status & 0x0F
        if kind in (EventKind.NOTE_ON, EventKind.NOTE_OFF):
            return RawEvent(channel=channel, note_number=reader.read_byte(),
                            velocity=reader.read_byte(), **common)
        if kind == EventKind.KEY_PRESSURE:
            return RawEvent(channel=channel, note_number=reader.read_byte(),
                            pressure=reader.read_byte(), **common)
        if kind == EventKind.CONTROL_CHANGE:
            return RawEvent(channel=channel, control_num=reader.read_byte(),
                            control_value=reader.read_byte(), **common)
        if kind == EventKind.PROGRAM_CHANGE:
            return RawEvent(channel=channel, instrument=reader.read_byte(), **common)
        if kind == EventKind.CHANNEL_PRESSURE:
            return RawEvent(channel=channel, pressure=reader.read_byte(), **common)
        return RawEvent(channel=channel, pitch_bend=reader.read_short(), **common)

    if kind == EventKind.META:
        meta_type = reader.read_byte()
        length = reader.read_varlen()
        return RawEvent(meta_type=meta_type, data=reader.read_bytes(length), **common)

    # sysex: varlen length + payload
    length = reader.read_varlen()
    return RawEvent(data=reader.read_bytes(length), **common)


def read_midi_file(path: Union[str, Path]) -> MidiSong:
    """Decode a .mid file and pair its notes."""
    p = Path(path)
    decoded = decode_midi(p.read_bytes())
    return MidiSong.from_decoded(decoded, filename=p.name)
