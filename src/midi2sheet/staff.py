# src/midi2sheet/staff.py
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from .clefs import Clef
from .keysig import KeySignature
from .symbols.accid import AccidSymbol
from .symbols.bar import BarSymbol
from .symbols.base import LEFT_MARGIN, PAGE_WIDTH, UNBOUNDED_WIDTH, MusicSymbol, NoteSize, SMALL
from .symbols.chord import ChordSymbol
from .symbols.clef import ClefSymbol
from .symbols.lyric import LyricSymbol

log = logging.getLogger(__name__)

LYRICS_HEIGHT = 12


def key_signature_width(key: KeySignature, size: NoteSize = SMALL) -> int:
    """Width of the clef plus key signature at the start of every staff."""
    result = ClefSymbol(Clef.TREBLE, 0, False, size).min_width
    for accid in key.get_symbols(Clef.TREBLE, size):
        result += accid.min_width
    return result + LEFT_MARGIN + 5


def _measure_of(start: int, measure: int) -> int:
    # the time signature sits at -1 but belongs to the first measure
    return max(start, 0) // measure


class Staff:
    """
    One row of one track: its symbols, clef, key signature and extents.
    """
    def __init__(self, symbols: List[MusicSymbol], key: KeySignature, track: int,
                 total_tracks: int, scroll_vert: bool = True, show_measures: bool = False,
                 size: NoteSize = SMALL):
        self.symbols = symbols
        self.track = track
        self.total_tracks = total_tracks
        self.size = size
        self.scroll_vert = scroll_vert
        self.show_measures = show_measures and track == 0
        self.keysig_width = key_signature_width(key, size)
        self.clef = self._find_clef()
        self.clef_symbol = ClefSymbol(self.clef, 0, False, size)
        self.keys: List[AccidSymbol] = key.get_symbols(self.clef, size)
        self.lyrics: Optional[List[LyricSymbol]] = None
        self.ytop = 0
        self.height = 0
        self.width = 0
        self.start_time = 0
        self.end_time = 0
        self.calculate_width()
        self.calculate_height()
        self.calculate_start_end_time()
        self.full_justify()

    def _find_clef(self) -> Clef:
        for sym in self.symbols:
            if isinstance(sym, ChordSymbol):
                return sym.clef
        return Clef.TREBLE

    def calculate_height(self):
        nh = self.size.note_height
        above = max([s.above_staff for s in self.symbols] + [self.clef_symbol.above_staff])
        below = max([s.below_staff for s in self.symbols] + [self.clef_symbol.below_staff])
        if self.show_measures:
            above = max(above, nh * 3)
        self.ytop = above + nh
        self.height = nh * 5 + self.ytop + below
        if self.lyrics:
            self.height += LYRICS_HEIGHT
        # gap between the last track and the next group of staffs
        if self.track == self.total_tracks - 1:
            self.height += nh * 3

    def calculate_width(self):
        if self.scroll_vert:
            self.width = PAGE_WIDTH
            return
        self.width = self.keysig_width + sum(s.width for s in self.symbols)

    def calculate_start_end_time(self):
        self.start_time = self.end_time = 0
        if not self.symbols:
            return
        self.start_time = self.symbols[0].start_time
        for sym in self.symbols:
            self.end_time = max(self.end_time, sym.start_time)
            if isinstance(sym, ChordSymbol):
                self.end_time = max(self.end_time, sym.end_time)

    def full_justify(self):
        """Spread the spare page width evenly over the start times of the staff."""
        if not self.scroll_vert or not self.symbols:
            return
        total_width = self.keysig_width
        groups: List[int] = []
        i = 0
        while i < len(self.symbols):
            start = self.symbols[i].start_time
            groups.append(i)
            while i < len(self.symbols) and self.symbols[i].start_time == start:
                total_width += self.symbols[i].width
                i += 1

        extra = (PAGE_WIDTH - total_width - 1) // len(groups)
        extra = max(0, min(extra, self.size.note_height * 2))
        for index in groups:
            sym = self.symbols[index]
            sym.width = sym.width + extra

    def add_lyrics(self, track_lyrics: Optional[Sequence[LyricSymbol]]):
        """Lyrics of this staff's time range, with x offsets from the staff start."""
        if not track_lyrics:
            return
        lyrics: List[LyricSymbol] = []
        xpos = 0
        index = 0
        for lyric in track_lyrics:
            if lyric.start_time < self.start_time:
                continue
            if lyric.start_time > self.end_time:
                break
            while index < len(self.symbols) and self.symbols[index].start_time < lyric.start_time:
                xpos += self.symbols[index].width
                index += 1
            placed = LyricSymbol(lyric.start_time, lyric.text)
            placed.x = xpos
            if index < len(self.symbols) and isinstance(self.symbols[index], BarSymbol):
                placed.x += self.size.note_width
            lyrics.append(placed)
        self.lyrics = lyrics or None

    def __repr__(self) -> str:
        return (f"Staff(track={self.track}, clef={self.clef.value}, {self.start_time}-{self.end_time}, "
                f"width={self.width}, height={self.height}, symbols={len(self.symbols)})")


def _staffs_for_track(symbols: List[MusicSymbol], measure: int, key: KeySignature, track: int,
                      total_tracks: int, scroll_vert: bool, show_measures: bool,
                      size: NoteSize) -> List[Staff]:
    keysig_width = key_signature_width(key, size)
    max_width = PAGE_WIDTH if scroll_vert else UNBOUNDED_WIDTH
    staffs: List[Staff] = []
    start_index = 0
    n = len(symbols)

    while start_index < n:
        end_index = start_index
        width = keysig_width
        while end_index < n and width + symbols[end_index].width < max_width:
            width += symbols[end_index].width
            end_index += 1
        end_index -= 1
        if end_index < start_index:
            # a single symbol wider than the page still gets its own staff
            end_index = start_index

        if end_index == n - 1:
            pass
        elif _measure_of(symbols[start_index].start_time, measure) == \
                _measure_of(symbols[end_index].start_time, measure):
            pass
        else:
            # never split a measure: back up to where the cut measure begins
            end_measure = _measure_of(symbols[end_index + 1].start_time, measure)
            while end_index > start_index and \
                    _measure_of(symbols[end_index].start_time, measure) == end_measure:
                end_index -= 1

        staffs.append(Staff(symbols[start_index:end_index + 1], key, track, total_tracks,
                            scroll_vert, show_measures, size))
        start_index = end_index + 1
    return staffs


def create_staffs(tracks: Sequence[List[MusicSymbol]], key: KeySignature, measure: int,
                  scroll_vert: bool = True, show_measures: bool = False,
                  size: NoteSize = SMALL) -> List[Staff]:
    """
    Cut every track into staffs no wider than the page and interleave them:
    track 0 staff 0, track 1 staff 0, ..., track 0 staff 1, ...
    """
    per_track = [
        _staffs_for_track(symbols, measure, key, track, len(tracks), scroll_vert, show_measures, size)
        for track, symbols in enumerate(tracks)
    ]
    for staffs in per_track:
        for cur, nxt in zip(staffs, staffs[1:]):
            cur.end_time = nxt.start_time

    result: List[Staff] = []
    for i in range(max((len(s) for s in per_track), default=0)):
        for staffs in per_track:
            if i < len(staffs):
                result.append(staffs[i])
    log.debug("created %d staffs for %d tracks", len(result), len(tracks))
    return result
