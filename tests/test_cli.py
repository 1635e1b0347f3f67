from __future__ import annotations

import json
from pathlib import Path

import mido
import pytest

from midi2sheet.cli import main


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text("sheet:\n  transpose: 12\nplayback:\n  tempo_percent: 200\n", encoding="utf-8")
    return path


def test_writes_layout_and_playback(midi_path, config_path, tmp_path, capsys):
    json_out = tmp_path / "layout.json"
    playback = tmp_path / "playback.mid"
    main(["--in", str(midi_path), "--config", str(config_path),
          "--json", str(json_out), "--playback-out", str(playback)])

    printed = capsys.readouterr().out
    assert "[cli] Done. tracks=1 notes=4 key=C time=4/4 staffs=1" in printed

    layout = json.loads(json_out.read_text(encoding="utf-8"))
    chords = [s for s in layout["staffs"][0]["symbols"] if s["kind"] == "chord"]
    assert [c["notes"][0]["number"] for c in chords] == [72] * 4

    mid = mido.MidiFile(str(playback))
    numbers = [m.note for m in mid.tracks[0] if m.type == "note_on" and m.velocity > 0]
    assert numbers == [72] * 4
    tempos = [m.tempo for m in mid.tracks[0] if m.type == "set_tempo"]
    assert tempos and set(tempos) == {250_000}


def test_missing_input_exits_1(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--in", str(tmp_path / "nope.mid")])
    assert exc.value.code == 1
    assert "Input not found" in capsys.readouterr().err


def test_bad_file_exits_2(tmp_path, config_path, capsys):
    bad = tmp_path / "bad.mid"
    bad.write_bytes(b"RIFF" + bytes(20))
    with pytest.raises(SystemExit) as exc:
        main(["--in", str(bad), "--config", str(config_path)])
    assert exc.value.code == 2
    assert "[cli] ERROR:" in capsys.readouterr().err


def test_bad_config_exits_2(midi_path, tmp_path, capsys):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("tracks:\n  mute: [3]\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["--in", str(midi_path), "--config", str(cfg)])
    assert exc.value.code == 2
    assert "tracks.mute" in capsys.readouterr().err
