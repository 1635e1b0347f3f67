from __future__ import annotations

from pathlib import Path

import pytest

from helpers import midi_file, notes_body, sequence, tempo, time_signature


@pytest.fixture
def four_quarters() -> bytes:
    """One 4/4 track: four quarter-note middle Cs."""
    head = time_signature(0, 4, 4) + tempo(0, 500_000)
    return midi_file(notes_body(sequence([60, 60, 60, 60], 480), head=head))


@pytest.fixture
def midi_path(tmp_path: Path, four_quarters: bytes) -> Path:
    path = tmp_path / "song.mid"
    path.write_bytes(four_quarters)
    return path


@pytest.fixture
def no_user_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user config at a file that does not exist."""
    missing = tmp_path / "missing.yaml"
    monkeypatch.setattr("midi2sheet.config.USER_CFG_PATH", missing)
    return missing
