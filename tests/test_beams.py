from __future__ import annotations

from midi2sheet.beams import can_create_beam, create_all_beamed_chords, find_consecutive_chords
from midi2sheet.clefs import Clef
from midi2sheet.keysig import KeySignature
from midi2sheet.sheet import SheetMusic
from midi2sheet.symbols.bar import BarSymbol, BlankSymbol
from midi2sheet.symbols.chord import ChordSymbol
from midi2sheet.timeline import Note
from midi2sheet.timesig import TimeSignature

from helpers import midi_file, notes_body, sequence, song_from, time_signature

KEY = KeySignature()


def _chords(time, starts, duration, number=72):
    return [ChordSymbol([Note(s, 0, number, duration)], KEY, time, Clef.TREBLE) for s in starts]


def _beams(symbols):
    """(index of first chord, index of the chord it is paired with) for each beam."""
    return [(i, s.stem.pair) for i, s in enumerate(symbols)
            if isinstance(s, ChordSymbol) and s.stem is not None and s.stem.pair is not None]


def test_six_eighths_in_six_eight_form_one_beam():
    head = time_signature(0, 6, 8)
    song = song_from(midi_file(notes_body(sequence([72] * 6, 240), head=head)))
    sheet = SheetMusic(song)
    [staff] = sheet.staffs
    chords = [s for s in staff.symbols if isinstance(s, ChordSymbol)]
    assert len(chords) == 6
    first = chords[0].stem
    assert first.pair == staff.symbols.index(chords[-1])
    assert first.width_to_pair > 0
    assert all(c.stem.receiver for c in chords[1:])
    assert len({c.stem.direction for c in chords}) == 1


def test_six_eighths_in_four_four_form_a_four_and_a_two():
    time = TimeSignature(4, 4, 480)
    symbols = _chords(time, range(0, 1440, 240), 240)
    assert create_all_beamed_chords(symbols, time) == 2
    assert _beams(symbols) == [(0, 3), (4, 5)]


def test_eighths_off_the_beat_pair_up_anywhere():
    time = TimeSignature(4, 4, 480)
    symbols = _chords(time, [240, 480, 720], 240)
    create_all_beamed_chords(symbols, time)
    # 480/720 sit on a quarter beat; 240 is left alone
    assert _beams(symbols) == [(1, 2)]


def test_quarters_are_never_beamed():
    time = TimeSignature(4, 4, 480)
    symbols = _chords(time, [0, 480, 960, 1440], 480)
    assert create_all_beamed_chords(symbols, time) == 0
    assert not any(c.stem.is_beam for c in symbols)


def test_beam_stays_inside_the_measure():
    time = TimeSignature(4, 4, 480)
    symbols = _chords(time, [1680, 1920], 240)
    assert not can_create_beam(symbols, time, False)


def test_triplets_group_in_threes():
    time = TimeSignature(4, 4, 480)
    symbols = _chords(time, [0, 160, 320], 160)
    assert create_all_beamed_chords(symbols, time) == 1
    assert _beams(symbols) == [(0, 2)]


def test_consecutive_chords_skip_blanks_only():
    time = TimeSignature(4, 4, 480)
    a, b, c = _chords(time, [0, 240, 480], 240)
    blank = BlankSymbol(120, 7)
    found = find_consecutive_chords([a, blank, b], 0, 2)
    assert found is not None
    indexes, distance = found
    assert indexes == [0, 2]
    assert distance == 7 + b.width

    assert find_consecutive_chords([a, BarSymbol(240), b], 0, 2) is None
    assert find_consecutive_chords([a, BarSymbol(240), b, c], 0, 2) == ([2, 3], c.width)


def test_later_passes_keep_earlier_beams():
    time = TimeSignature(6, 8, 480)
    symbols = _chords(time, range(0, 1440, 240), 240)
    assert create_all_beamed_chords(symbols, time) == 1
    assert _beams(symbols) == [(0, 5)]
