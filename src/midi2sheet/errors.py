# src/midi2sheet/errors.py
from __future__ import annotations


class MidiFileError(Exception):
    """
    Base error for everything the decoder / layout refuses to handle.
    `offset` is the byte offset where the problem was detected
    (-1 when the problem has no byte location, e.g. a layout contract).
    """
    def __init__(self, message: str, offset: int = -1):
        super().__init__(message)
        self.message = message
        self.offset = int(offset)

    def __str__(self) -> str:
        if self.offset >= 0:
            return f"{self.message} (offset {self.offset})"
        return self.message


class BadHeader(MidiFileError):
    """Wrong MThd/MTrk magic or wrong declared header length."""


class TruncatedFile(MidiFileError):
    """The file ended while reading the outer header or a chunk header."""


class UnknownEventCode(MidiFileError):
    """A status byte outside all recognized ranges; the track cannot resync."""


class InvalidChordOrder(MidiFileError):
    """Chord notes were not supplied in non-decreasing MIDI number order."""


class InvalidKeySignatureArgs(MidiFileError):
    """Both sharps and flats were nonzero, or an unknown key name was given."""


class InvalidTimeSignature(MidiFileError):
    """Numerator, denominator or pulses-per-quarter not positive."""


class ConfigError(MidiFileError):
    """A configuration value could not be resolved."""
