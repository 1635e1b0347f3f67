from __future__ import annotations

from midi2sheet.clefs import Clef, ClefMeasures, main_clef
from midi2sheet.timeline import Note


def _notes(*pairs):
    return [Note(start, 0, number, 100) for start, number in pairs]


def test_main_clef():
    assert main_clef(_notes((0, 60), (0, 64))) == Clef.TREBLE
    assert main_clef(_notes((0, 48), (0, 59))) == Clef.BASS
    assert main_clef([]) == Clef.TREBLE


def test_clef_per_measure():
    notes = _notes((0, 72), (960, 74), (1920, 40), (2400, 43), (5760, 41))
    clefs = ClefMeasures(notes, 1920)
    assert clefs.main == Clef.BASS
    assert clefs.get_clef(0) == Clef.TREBLE
    assert clefs.get_clef(1920) == Clef.BASS
    # empty measure keeps the clef before it
    assert clefs.get_clef(3840) == Clef.BASS
    assert clefs.get_clef(5760) == Clef.BASS


def test_middle_range_uses_main_clef():
    # 60 is between G3 (55) and F4 (65)
    notes = _notes((0, 60), (1920, 80), (1920, 82))
    clefs = ClefMeasures(notes, 1920)
    assert clefs.main == Clef.TREBLE
    assert clefs.get_clef(0) == Clef.TREBLE

    low = _notes((0, 60), (1920, 30))
    assert ClefMeasures(low, 1920).get_clef(0) == Clef.BASS


def test_times_past_the_end_use_the_last_clef():
    clefs = ClefMeasures(_notes((0, 72), (1920, 36)), 1920)
    assert clefs.get_clef(100_000) == Clef.BASS
    assert clefs.get_clef(-1) == Clef.TREBLE


def test_no_notes():
    clefs = ClefMeasures([], 1920)
    assert clefs.get_clef(0) == Clef.TREBLE
    assert clefs.get_clef(5000) == Clef.TREBLE
