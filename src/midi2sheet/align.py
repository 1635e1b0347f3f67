# src/midi2sheet/align.py
"""
Cross-track alignment: every start time gets the same total width in
every track, so notes played together line up vertically.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence

from .symbols.bar import BarSymbol, BlankSymbol
from .symbols.base import MusicSymbol, SMALL
from .symbols.lyric import LyricSymbol


def _track_widths(symbols: Sequence[MusicSymbol]) -> Dict[int, int]:
    widths: Dict[int, int] = {}
    for sym in symbols:
        if isinstance(sym, BarSymbol):
            continue
        widths[sym.start_time] = widths.get(sym.start_time, 0) + sym.min_width
    return widths


class SymbolWidths:
    """Summed minimum width per start time, per track and the maximum over tracks."""

    def __init__(self, tracks: Sequence[Sequence[MusicSymbol]],
                 lyrics: Optional[Sequence[Optional[Sequence[LyricSymbol]]]] = None):
        self.widths: List[Dict[int, int]] = [_track_widths(t) for t in tracks]
        self.max_widths: Dict[int, int] = {}
        for widths in self.widths:
            for start, width in widths.items():
                if self.max_widths.get(start, -1) < width:
                    self.max_widths[start] = width
        for track_lyrics in lyrics or ():
            for lyric in track_lyrics or ():
                if self.max_widths.get(lyric.start_time, -1) < lyric.min_width:
                    self.max_widths[lyric.start_time] = lyric.min_width
        self.start_times: List[int] = sorted(self.max_widths)

    def extra_width(self, track: int, start: int) -> int:
        return self.max_widths[start] - self.widths[track].get(start, 0)


def align_symbols(tracks: List[List[MusicSymbol]], widths: SymbolWidths) -> List[List[MusicSymbol]]:
    """
    Give every track a symbol at every start time (a zero-width blank where
    it has none) and pad the first symbol at each start time so all tracks
    have the same width there.  Bars are carried along but not matched.
    """
    result: List[List[MusicSymbol]] = []
    for track, symbols in enumerate(tracks):
        aligned: List[MusicSymbol] = []
        i = 0
        n = len(symbols)
        for start in widths.start_times:
            while i < n and isinstance(symbols[i], BarSymbol) and symbols[i].start_time <= start:
                aligned.append(symbols[i])
                i += 1
            if i < n and symbols[i].start_time == start:
                while i < n and symbols[i].start_time == start:
                    aligned.append(symbols[i])
                    i += 1
            else:
                aligned.append(BlankSymbol(start, 0, symbols[0].size if symbols else SMALL))
        aligned.extend(symbols[i:])

        i = 0
        while i < len(aligned):
            sym = aligned[i]
            if isinstance(sym, BarSymbol):
                i += 1
                continue
            start = sym.start_time
            sym.width = sym.width + widths.extra_width(track, start)
            while i < len(aligned) and aligned[i].start_time == start:
                i += 1
        result.append(aligned)
    return result
