from __future__ import annotations

import pytest

from midi2sheet.analyze import decode_midi
from midi2sheet.errors import InvalidTimeSignature, MidiFileError
from midi2sheet.events import PERCUSSION
from midi2sheet.timeline import MidiSong, Note, Track, build_track, check_start_times, split_channels

from helpers import (
    end_of_track, lyric, meta, meta_raw, midi_file, note_off, note_on, notes_body, program, sequence,
    song_from, time_signature,
)


def _events(body: bytes):
    return decode_midi(midi_file(body)).events[0]


def test_note_on_off_pair():
    track = build_track(_events(note_on(0, 60) + note_off(480, 60) + end_of_track()), 0)
    assert track.notes == [Note(start_time=0, channel=0, number=60, duration=480)]


def test_velocity_zero_closes_note():
    track = build_track(_events(note_on(0, 60) + note_on(480, 60, velocity=0) + end_of_track()), 0)
    assert track.notes == [Note(0, 0, 60, 480)]


def test_same_key_pairs_most_recent_first():
    body = note_on(0, 60) + note_on(100, 60) + note_off(100, 60) + note_off(100, 60) + end_of_track()
    track = build_track(_events(body), 0)
    assert track.notes == [Note(0, 0, 60, 300), Note(100, 0, 60, 100)]


def test_channels_pair_separately():
    body = (note_on(0, 60, channel=0) + note_on(0, 60, channel=1)
            + note_off(240, 60, channel=1) + note_off(240, 60, channel=0) + end_of_track())
    track = build_track(_events(body), 0)
    assert [(n.channel, n.duration) for n in track.notes] == [(0, 480), (1, 240)]


def test_unmatched_and_zero_length_notes_are_dropped():
    body = note_on(0, 60) + note_on(0, 62) + note_off(0, 62) + note_on(10, 64) + note_off(10, 64) \
        + end_of_track()
    track = build_track(_events(body), 0)
    assert [n.number for n in track.notes] == [64]


def test_program_change_and_percussion():
    track = build_track(_events(program(0, 19) + note_on(0, 60) + note_off(10, 60) + end_of_track()), 3)
    assert track.number == 3
    assert track.instrument == 19
    assert track.instrument_name == "Church Organ"

    drums = build_track(_events(note_on(0, 36, channel=9) + note_off(10, 36, channel=9)
                                + end_of_track()), 0)
    assert drums.instrument == PERCUSSION
    assert drums.instrument_name == "Percussion"


def test_lyrics_collected():
    body = notes_body(sequence([60, 62], 480),
                      extra=[(0, meta_raw(0x05, b"Hel")), (480, meta_raw(0x05, b"lo"))])
    track = build_track(_events(body), 0)
    assert [(ly.start_time, ly.text) for ly in track.lyrics] == [(0, "Hel"), (480, "lo")]


def test_single_multichannel_track_is_split():
    body = (program(0, 0) + program(0, 42, channel=2)
            + note_on(0, 40, channel=2) + note_on(0, 72) + lyric(0, "la")
            + note_off(480, 72) + note_off(0, 40, channel=2) + end_of_track())
    song = song_from(midi_file(body, mode=0))
    assert song.track_per_channel
    assert [t.channels for t in song.tracks] == [[2], [0]]
    assert [t.instrument for t in song.tracks] == [42, 0]
    assert [t.number for t in song.tracks] == [0, 0]
    assert [ly.text for ly in song.tracks[0].lyrics] == ["la"]
    assert song.tracks[1].lyrics == []


def test_several_tracks_are_not_split():
    a = notes_body(sequence([60], 480), channel=0)
    b = notes_body(sequence([48], 480), channel=1)
    song = song_from(midi_file(end_of_track(), a, b))
    assert not song.track_per_channel
    assert [t.number for t in song.tracks] == [1, 2]


def test_split_channels_percussion_instrument():
    track = Track(number=0, notes=[Note(0, 9, 36, 10), Note(0, 0, 60, 10)])
    parts = split_channels(track, [])
    assert [p.instrument for p in parts] == [PERCUSSION, 0]


def test_song_times():
    song = song_from(midi_file(notes_body([(0, 480, 60), (960, 1000, 62)])))
    assert song.end_time() == 960
    assert song.total_pulses == 1960
    assert song.quarter == 480


def test_track_copy_is_independent():
    track = Track(number=1, notes=[Note(0, 0, 60, 10)])
    clone = track.copy()
    clone.notes.append(Note(10, 0, 62, 10))
    assert len(track.notes) == 1


def test_check_start_times_rejects_unsorted():
    with pytest.raises(MidiFileError):
        check_start_times([Track(number=0, notes=[Note(10, 0, 60, 1), Note(0, 0, 60, 1)])])


def test_empty_file_has_no_tracks():
    song = MidiSong.from_decoded(decode_midi(midi_file(end_of_track())))
    assert song.tracks == []
    assert song.end_time() == 0


def test_time_signature_with_empty_measure_is_rejected():
    tiny = midi_file(notes_body(sequence([60, 62], 4), head=time_signature(0, 1, 32)), quarter=4)
    with pytest.raises(InvalidTimeSignature):
        song_from(tiny)

    # denominator exponent byte 0xFF
    huge = midi_file(notes_body(sequence([60, 62], 480), head=meta(0, 0x58, bytes([4, 0xFF, 24, 8]))))
    with pytest.raises(InvalidTimeSignature):
        song_from(huge)
