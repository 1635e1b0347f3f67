# src/midi2sheet/events.py
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class EventKind(IntEnum):
    """Status byte high nibble for channel messages, full byte for the rest."""
    NOTE_OFF = 0x80
    NOTE_ON = 0x90
    KEY_PRESSURE = 0xA0
    CONTROL_CHANGE = 0xB0
    PROGRAM_CHANGE = 0xC0
    CHANNEL_PRESSURE = 0xD0
    PITCH_BEND = 0xE0
    SYSEX1 = 0xF0
    SYSEX2 = 0xF7
    META = 0xFF

    @property
    def is_channel(self) -> bool:
        return self < 0xF0

    @property
    def data_length(self) -> int:
        """Number of data bytes after the status byte (channel messages only)."""
        if self in (EventKind.PROGRAM_CHANGE, EventKind.CHANNEL_PRESSURE):
            return 1
        return 2 if self.is_channel else 0


# --- Meta events ---
META_LYRIC = 0x05
META_TEMPO = 0x51
META_TIME_SIGNATURE = 0x58

PERCUSSION_CHANNEL = 9
PERCUSSION = 128


def kind_from_status(status: int) -> Optional[EventKind]:
    """Map a status byte (>= 0x80) to its kind, None for undefined codes (0xF1..0xFE)."""
    if status < 0x80:
        return None
    if status < 0xF0:
        return EventKind(status & 0xF0)
    if status in (0xF0, 0xF7, 0xFF):
        return EventKind(status)
    return None


@dataclass(frozen=True)
class RawEvent:
    """
    One parsed MIDI event.  Only the payload fields of its `kind` are meaningful:
      NOTE_ON/NOTE_OFF/KEY_PRESSURE -> note_number, velocity (pressure for KEY_PRESSURE)
      CONTROL_CHANGE                -> control_num, control_value
      PROGRAM_CHANGE                -> instrument
      CHANNEL_PRESSURE              -> pressure
      PITCH_BEND                    -> pitch_bend (raw 14-bit, as two bytes big endian)
      META                          -> meta_type, data
      SYSEX1/SYSEX2                 -> data
    """
    delta_time: int
    start_time: int
    kind: EventKind
    channel: int = 0
    has_status: bool = True       # False if the event used running status
    note_number: int = 0
    velocity: int = 0
    control_num: int = 0
    control_value: int = 0
    instrument: int = 0
    pressure: int = 0
    pitch_bend: int = 0
    meta_type: int = -1
    data: bytes = b""

    @property
    def is_note_on(self) -> bool:
        return self.kind == EventKind.NOTE_ON and self.velocity > 0

    @property
    def is_note_off(self) -> bool:
        return self.kind == EventKind.NOTE_OFF or (self.kind == EventKind.NOTE_ON and self.velocity == 0)

    @property
    def status(self) -> int:
        """The status byte this event is (re-)encoded with."""
        if self.kind.is_channel:
            return int(self.kind) | (self.channel & 0x0F)
        return int(self.kind)

    def is_meta(self, meta_type: int) -> bool:
        return self.kind == EventKind.META and self.meta_type == meta_type

    @property
    def tempo(self) -> Optional[int]:
        """µs per quarter note of a tempo meta event (None if malformed)."""
        if not self.is_meta(META_TEMPO) or len(self.data) != 3:
            return None
        return int.from_bytes(self.data, "big")

    @property
    def time_signature(self) -> Optional[tuple[int, int]]:
        """(numerator, denominator); a payload shorter than 2 bytes reads as (0, 4)."""
        if not self.is_meta(META_TIME_SIGNATURE):
            return None
        if len(self.data) < 2:
            return 0, 4
        return self.data[0], 2 ** self.data[1]

    @property
    def text(self) -> str:
        return self.data.decode("latin-1")


def tempo_event(tempo: int) -> RawEvent:
    """A tempo meta event at time 0."""
    return RawEvent(delta_time=0, start_time=0, kind=EventKind.META,
                    meta_type=META_TEMPO, data=int(tempo).to_bytes(3, "big"))


INSTRUMENTS = [
    "Acoustic Grand Piano", "Bright Acoustic Piano", "Electric Grand Piano", "Honky-tonk Piano",
    "Electric Piano 1", "Electric Piano 2", "Harpsichord", "Clavi",
    "Celesta", "Glockenspiel", "Music Box", "Vibraphone",
    "Marimba", "Xylophone", "Tubular Bells", "Dulcimer",
    "Drawbar Organ", "Percussive Organ", "Rock Organ", "Church Organ",
    "Reed Organ", "Accordion", "Harmonica", "Tango Accordion",
    "Acoustic Guitar (nylon)", "Acoustic Guitar (steel)", "Electric Guitar (jazz)", "Electric Guitar (clean)",
    "Electric Guitar (muted)", "Overdriven Guitar", "Distortion Guitar", "Guitar harmonics",
    "Acoustic Bass", "Electric Bass (finger)", "Electric Bass (pick)", "Fretless Bass",
    "Slap Bass 1", "Slap Bass 2", "Synth Bass 1", "Synth Bass 2",
    "Violin", "Viola", "Cello", "Contrabass",
    "Tremolo Strings", "Pizzicato Strings", "Orchestral Harp", "Timpani",
    "String Ensemble 1", "String Ensemble 2", "SynthStrings 1", "SynthStrings 2",
    "Choir Aahs", "Voice Oohs", "Synth Voice", "Orchestra Hit",
    "Trumpet", "Trombone", "Tuba", "Muted Trumpet",
    "French Horn", "Brass Section", "SynthBrass 1", "SynthBrass 2",
    "Soprano Sax", "Alto Sax", "Tenor Sax", "Baritone Sax",
    "Oboe", "English Horn", "Bassoon", "Clarinet",
    "Piccolo", "Flute", "Recorder", "Pan Flute",
    "Blown Bottle", "Shakuhachi", "Whistle", "Ocarina",
    "Lead 1 (square)", "Lead 2 (sawtooth)", "Lead 3 (calliope)", "Lead 4 (chiff)",
    "Lead 5 (charang)", "Lead 6 (voice)", "Lead 7 (fifths)", "Lead 8 (bass + lead)",
    "Pad 1 (new age)", "Pad 2 (warm)", "Pad 3 (polysynth)", "Pad 4 (choir)",
    "Pad 5 (bowed)", "Pad 6 (metallic)", "Pad 7 (halo)", "Pad 8 (sweep)",
    "FX 1 (rain)", "FX 2 (soundtrack)", "FX 3 (crystal)", "FX 4 (atmosphere)",
    "FX 5 (brightness)", "FX 6 (goblins)", "FX 7 (echoes)", "FX 8 (sci-fi)",
    "Sitar", "Banjo", "Shamisen", "Koto",
    "Kalimba", "Bag pipe", "Fiddle", "Shanai",
    "Tinkle Bell", "Agogo", "Steel Drums", "Woodblock",
    "Taiko Drum", "Melodic Tom", "Synth Drum", "Reverse Cymbal",
    "Guitar Fret Noise", "Breath Noise", "Seashore", "Bird Tweet",
    "Telephone Ring", "Helicopter", "Applause", "Gunshot",
    "Percussion",
]


def instrument_name(program: int) -> str:
    if 0 <= program < len(INSTRUMENTS):
        return INSTRUMENTS[program]
    return f"Program {program}"
