# src/midi2sheet/symbols/lyric.py
from __future__ import annotations

_CHAR_WIDTH = 20 / 3
_NARROW = frozenset("ijlt'.,:;!|")


class LyricSymbol:
    """
    A syllable shown under the staff.  Not a MusicSymbol: it takes part in
    alignment only through its start time and width, and `x` is filled in
    once the staff it belongs to is known.
    """
    def __init__(self, start_time: int, text: str):
        self.start_time = start_time
        self.text = text
        self.x = 0

    @property
    def min_width(self) -> int:
        width = 0.0
        for ch in self.text:
            width += _CHAR_WIDTH / 2 if ch in _NARROW else _CHAR_WIDTH
        return int(width)

    def __repr__(self) -> str:
        return f"LyricSymbol({self.text!r}, start={self.start_time}, x={self.x})"
