# src/midi2sheet/util/binary.py
"""
Byte-level cursor over an in-memory MIDI buffer and its mirror-image writer.

Variable-length quantities ("varlen") are big-endian base-128: every byte
except the last has the high bit set.  MIDI caps them at four bytes, so the
largest encodable value is 0x0FFFFFFF.
"""
from __future__ import annotations

from ..errors import TruncatedFile

VARLEN_MAX = 0x0FFFFFFF


def varlen_to_bytes(num: int) -> bytes:
    """Encode `num` using the minimal number of varlen bytes (1..4)."""
    if num < 0 or num > VARLEN_MAX:
        raise ValueError(f"varlen out of range: {num}")
    out = [num & 0x7F]
    num >>= 7
    while num:
        out.append((num & 0x7F) | 0x80)
        num >>= 7
    return bytes(reversed(out))


class MidiReader:
    """Stateful read cursor; every read is bounds-checked and raises TruncatedFile."""

    __slots__ = ("_data", "_offset")

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._offset = 0

    def __len__(self) -> int:
        return len(self._data)

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _check(self, amount: int) -> None:
        if self._offset + amount > len(self._data):
            raise TruncatedFile("File is truncated", self._offset)

    def peek(self) -> int:
        self._check(1)
        return self._data[self._offset]

    def read_byte(self) -> int:
        self._check(1)
        b = self._data[self._offset]
        self._offset += 1
        return b

    def read_bytes(self, amount: int) -> bytes:
        if amount < 0:
            raise ValueError("amount must be non-negative")
        self._check(amount)
        out = self._data[self._offset:self._offset + amount]
        self._offset += amount
        return out

    def read_short(self) -> int:
        return int.from_bytes(self.read_bytes(2), "big")

    def read_int(self) -> int:
        return int.from_bytes(self.read_bytes(4), "big")

    def read_ascii(self, length: int) -> str:
        return self.read_bytes(length).decode("ascii", errors="replace")

    def read_varlen(self) -> int:
        # at most four bytes, like every SMF reader out there
        b = self.read_byte()
        result = b & 0x7F
        for _ in range(3):
            if not (b & 0x80):
                break
            b = self.read_byte()
            result = (result << 7) | (b & 0x7F)
        return result


class MidiWriter:
    """Append-only byte buffer with the same primitives as MidiReader."""

    def __init__(self):
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def write_byte(self, value: int) -> None:
        self._buf.append(value & 0xFF)

    def write_bytes(self, data: bytes) -> None:
        self._buf.extend(data)

    def write_short(self, value: int) -> None:
        self._buf.extend((value & 0xFFFF).to_bytes(2, "big"))

    def write_int(self, value: int) -> None:
        self._buf.extend((value & 0xFFFFFFFF).to_bytes(4, "big"))

    def write_ascii(self, text: str) -> None:
        self._buf.extend(text.encode("ascii"))

    def write_varlen(self, value: int) -> None:
        self._buf.extend(varlen_to_bytes(value))

    def getvalue(self) -> bytes:
        return bytes(self._buf)
