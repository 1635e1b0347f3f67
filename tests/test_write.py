from __future__ import annotations

import mido

from midi2sheet.analyze import decode_midi
from midi2sheet.events import EventKind, META_TEMPO
from midi2sheet.options import SheetOptions
from midi2sheet.write import apply_options_to_events, encode_midi, to_mido, write_midi_file

from helpers import (
    end_of_track, midi_file, note_on, notes_body, program, sequence, song_from, tempo,
    time_signature, varlen,
)


def _two_part_file() -> bytes:
    conductor = time_signature(0, 4, 4) + tempo(0, 500_000) + end_of_track()
    melody = notes_body(sequence([72, 74, 76], 480), head=program(0, 73))
    bass = notes_body(sequence([48, 43], 960), channel=1, head=program(0, 32, channel=1))
    return midi_file(conductor, melody, bass)


def test_encode_is_byte_identical_with_running_status():
    body = note_on(0, 60) + varlen(480) + bytes([60, 0]) + tempo(0, 400_000) + end_of_track()
    data = midi_file(body)
    decoded = decode_midi(data)
    assert encode_midi(decoded.events, decoded.track_mode, decoded.quarter) == data


def test_encode_round_trips_multi_track_file():
    data = _two_part_file()
    decoded = decode_midi(data)
    assert encode_midi(decoded.events, decoded.track_mode, decoded.quarter) == data


def test_write_midi_file(tmp_path):
    data = _two_part_file()
    decoded = decode_midi(data)
    path = tmp_path / "out.mid"
    write_midi_file(path, decoded.events, decoded.track_mode, decoded.quarter)
    assert path.read_bytes() == data


def test_to_mido_matches_stream():
    decoded = decode_midi(_two_part_file())
    mf = to_mido(decoded.events, decoded.track_mode, decoded.quarter)
    assert isinstance(mf, mido.MidiFile)
    assert mf.ticks_per_beat == 480
    assert len(mf.tracks) == 3
    notes = [m.note for m in mf.tracks[1] if m.type == "note_on"]
    assert notes == [72, 74, 76]


def test_playback_inserts_scaled_tempo_and_transposes():
    song = song_from(_two_part_file())
    options = SheetOptions.default(song)
    options.transpose = 2
    options.tempo = 250_000

    events = apply_options_to_events(song, options)
    assert len(events) == 3
    for track in events:
        assert track[0].is_meta(META_TEMPO)
        assert track[0].tempo == 250_000
        assert all(e.tempo == 250_000 for e in track if e.is_meta(META_TEMPO))
    melody = [e.note_number for e in events[1] if e.kind == EventKind.NOTE_ON]
    assert melody == [74, 76, 78]
    # input stream untouched
    assert [e.note_number for e in song.events[1] if e.kind == EventKind.NOTE_ON] == [72, 74, 76]


def test_playback_delta_times_follow_start_times():
    song = song_from(_two_part_file())
    events = apply_options_to_events(song, SheetOptions.default(song))
    for track in events:
        now = 0
        for e in track:
            now += e.delta_time
            assert now == e.start_time


def test_playback_transpose_clamps():
    song = song_from(_two_part_file())
    options = SheetOptions.default(song)
    options.transpose = 100
    events = apply_options_to_events(song, options)
    assert {e.note_number for e in events[1] if e.kind == EventKind.NOTE_ON} == {127}


def test_playback_drops_muted_track():
    song = song_from(_two_part_file())
    options = SheetOptions.default(song)
    options.mute[0] = True                  # the melody, chunk 1

    events = apply_options_to_events(song, options)
    assert len(events) == 2
    numbers = [e.note_number for t in events for e in t if e.kind == EventKind.NOTE_ON]
    assert numbers == [48, 43]


def test_playback_replaces_instruments():
    song = song_from(_two_part_file())
    options = SheetOptions.default(song)
    options.instruments[1] = 0
    options.use_default_instruments = False

    events = apply_options_to_events(song, options)
    programs = [e.instrument for t in events for e in t if e.kind == EventKind.PROGRAM_CHANGE]
    assert programs == [73, 0]


def test_playback_mutes_channel_of_split_track():
    # melody on channel 0, a held bass note on channel 1
    head = program(0, 0) + program(0, 33, channel=1)
    body = head + note_on(0, 60) + note_on(0, 40, channel=1) + varlen(480) + bytes([0x80, 60, 0]) \
        + note_on(0, 62) + varlen(480) + bytes([0x80, 62, 0]) + varlen(0) + bytes([0x81, 40, 0]) \
        + end_of_track()
    song = song_from(midi_file(body, mode=0))
    assert song.track_per_channel
    assert [t.instrument for t in song.tracks] == [0, 33]

    options = SheetOptions.default(song)
    options.mute[1] = True
    [track] = apply_options_to_events(song, options)
    channels = {e.channel for e in track if e.kind in (EventKind.NOTE_ON, EventKind.NOTE_OFF)}
    assert channels == {0}
    # program changes stay, only notes of the muted channel go
    assert sum(1 for e in track if e.kind == EventKind.PROGRAM_CHANGE) == 2
