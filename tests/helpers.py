"""Byte-level builders for small Standard MIDI Files."""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from midi2sheet.analyze import decode_midi
from midi2sheet.timeline import MidiSong


def varlen(n: int) -> bytes:
    out = [n & 0x7F]
    n >>= 7
    while n:
        out.append(0x80 | (n & 0x7F))
        n >>= 7
    return bytes(reversed(out))


def header(mode: int = 1, ntracks: int = 1, quarter: int = 480) -> bytes:
    return (b"MThd" + (6).to_bytes(4, "big") + mode.to_bytes(2, "big")
            + ntracks.to_bytes(2, "big") + quarter.to_bytes(2, "big"))


def chunk(body: bytes, declared_len: int = -1) -> bytes:
    length = len(body) if declared_len < 0 else declared_len
    return b"MTrk" + length.to_bytes(4, "big") + body


def midi_file(*bodies: bytes, mode: int = 1, quarter: int = 480) -> bytes:
    return header(mode, len(bodies), quarter) + b"".join(chunk(b) for b in bodies)


def note_on(delta: int, number: int, velocity: int = 64, channel: int = 0) -> bytes:
    return varlen(delta) + bytes([0x90 | channel, number, velocity])


def note_off(delta: int, number: int, channel: int = 0) -> bytes:
    return varlen(delta) + bytes([0x80 | channel, number, 0])


def program(delta: int, instrument: int, channel: int = 0) -> bytes:
    return varlen(delta) + bytes([0xC0 | channel, instrument])


def meta(delta: int, meta_type: int, data: bytes) -> bytes:
    return varlen(delta) + bytes([0xFF, meta_type]) + varlen(len(data)) + data


def tempo(delta: int, micros: int) -> bytes:
    return meta(delta, 0x51, micros.to_bytes(3, "big"))


def time_signature(delta: int, numerator: int, denominator: int) -> bytes:
    return meta(delta, 0x58, bytes([numerator, denominator.bit_length() - 1, 24, 8]))


def lyric(delta: int, text: str) -> bytes:
    return meta(delta, 0x05, text.encode("latin-1"))


def end_of_track(delta: int = 0) -> bytes:
    return meta(delta, 0x2F, b"")


def meta_raw(meta_type: int, data: bytes) -> bytes:
    """A meta event without its delta time, for `notes_body(extra=...)`."""
    return bytes([0xFF, meta_type]) + varlen(len(data)) + data


def notes_body(notes: Iterable[Tuple[int, int, int]], channel: int = 0, head: bytes = b"",
               extra: Sequence[Tuple[int, bytes]] = ()) -> bytes:
    """
    Track body: `head` (complete events at time 0), then the
    (start, duration, number) notes and the (time, event without delta)
    `extra` entries in time order, note-offs first at equal times.
    """
    timed: List[Tuple[int, int, bytes]] = []
    for start, duration, number in notes:
        timed.append((start, 1, bytes([0x90 | channel, number, 64])))
        timed.append((start + duration, 0, bytes([0x80 | channel, number, 0])))
    for time, raw in extra:
        timed.append((time, -1, raw))
    timed.sort(key=lambda t: (t[0], t[1]))

    out = head
    now = 0
    for time, _, raw in timed:
        out += varlen(time - now) + raw
        now = time
    return out + end_of_track()


def sequence(numbers: Sequence[int], duration: int, start: int = 0) -> List[Tuple[int, int, int]]:
    """One note after the other, each `duration` pulses long."""
    return [(start + i * duration, duration, n) for i, n in enumerate(numbers)]


def song_from(data: bytes) -> MidiSong:
    return MidiSong.from_decoded(decode_midi(data), filename="test.mid")
