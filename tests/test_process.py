from __future__ import annotations

from midi2sheet.options import SheetOptions
from midi2sheet.process import (
    apply_options, combine_to_single_track, combine_to_two_tracks, round_durations,
    round_start_times, shift_time, split_track, transpose,
)
from midi2sheet.timeline import LyricEvent, Note, Track
from midi2sheet.timesig import TimeSignature

from helpers import midi_file, notes_body, sequence, song_from

TIME = TimeSignature(4, 4, 480)   # 120 bpm: 40 ms is 38 pulses


def _track(*notes, number=0):
    return Track(number=number, notes=[Note(s, 0, n, d) for s, n, d in notes])


def _starts(track):
    return [n.start_time for n in track.notes]


def test_nearby_starts_snap_together():
    [track] = round_start_times([_track((0, 60, 480), (10, 64, 480), (480, 67, 480))], 40, TIME)
    assert _starts(track) == [0, 0, 480]


def test_starts_snap_across_tracks():
    a = _track((0, 60, 480))
    b = _track((20, 48, 480), (100, 50, 480), number=1)
    _, rounded = round_start_times([a, b], 40, TIME)
    assert _starts(rounded) == [0, 100]


def test_snapping_leaves_input_alone():
    track = _track((0, 60, 480), (10, 64, 480))
    round_start_times([track], 40, TIME)
    assert _starts(track) == [0, 10]


def test_durations_grow_to_the_next_start():
    [track] = round_durations([_track((0, 60, 100), (480, 62, 100), (720, 64, 100))], 480)
    assert [n.duration for n in track.notes] == [480, 240, 100]


def test_durations_never_shrink():
    [track] = round_durations([_track((0, 60, 960), (480, 62, 480))], 480)
    assert track.notes[0].duration == 960


def test_repeated_lengths_are_kept():
    # equal-length notes ending exactly where the next begins stay as they are
    [track] = round_durations([_track((0, 60, 200), (200, 62, 200), (400, 64, 200), (960, 65, 100))], 480)
    assert [n.duration for n in track.notes][:2] == [200, 200]


def test_combine_drops_duplicates():
    a = _track((0, 60, 480), (480, 62, 480))
    b = _track((0, 60, 480), (0, 64, 480), number=1)
    single = combine_to_single_track([a, b])
    assert [(n.start_time, n.number) for n in single.notes] == [(0, 60), (0, 64), (480, 62)]
    assert combine_to_single_track([]).notes == []


def test_split_wide_chord():
    top, bottom = split_track(_track((0, 48, 480), (0, 84, 480)), TIME.measure)
    assert [n.number for n in top.notes] == [84]
    assert [n.number for n in bottom.notes] == [48]


def test_split_lone_notes_use_previous_range():
    top, bottom = split_track(_track((0, 72, 480), (480, 50, 480)), TIME.measure)
    assert [n.number for n in top.notes] == [72]
    assert [n.number for n in bottom.notes] == [50]


def test_two_tracks_keep_lyrics_on_top():
    a = _track((0, 84, 480))
    b = _track((0, 40, 480), number=1)
    b.lyrics = [LyricEvent(0, "la")]
    top, bottom = combine_to_two_tracks([a, b], TIME.measure)
    assert [ly.text for ly in top.lyrics] == ["la"]
    assert bottom.lyrics == []


def test_shift_and_transpose():
    [shifted] = shift_time([_track((0, 60, 480))], 960)
    assert _starts(shifted) == [960]
    [moved] = transpose([_track((0, 120, 480), (480, 5, 480))], 12)
    assert [n.number for n in moved.notes] == [127, 17]
    [moved] = transpose([_track((0, 5, 480))], -12)
    assert moved.notes[0].number == 0


def test_apply_options_selects_tracks():
    song = song_from(midi_file(notes_body(sequence([72, 74], 480)),
                               notes_body(sequence([48, 50], 480), channel=1)))
    options = SheetOptions.default(song)
    options.tracks = [False, True]
    options.transpose = 2
    [track] = apply_options(song, options)
    assert [n.number for n in track.notes] == [50, 52]
    assert [n.number for n in song.tracks[1].notes] == [48, 50]


def test_apply_options_two_staffs():
    song = song_from(midi_file(notes_body(sequence([84, 86], 480)),
                               notes_body(sequence([36, 38], 480), channel=1)))
    options = SheetOptions.default(song)
    options.two_staffs = True
    top, bottom = apply_options(song, options)
    assert [n.number for n in top.notes] == [84, 86]
    assert [n.number for n in bottom.notes] == [36, 38]
