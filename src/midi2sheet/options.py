# src/midi2sheet/options.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import ConfigError, MidiFileError
from .keysig import KeySignature
from .symbols.base import NoteSize
from .timeline import MidiSong
from .timesig import TimeSignature
from .util.time import DEFAULT_TEMPO, scale_tempo


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name}: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name}: expected an integer, got {value!r}") from None


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(f"{name}: expected true/false, got {value!r}")


def _track_indices(value: Any, name: str, count: int) -> List[int]:
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"{name}: expected a list of track indices, got {value!r}")
    out = []
    for v in value:
        i = _as_int(v, name)
        if not 0 <= i < count:
            raise ConfigError(f"{name}: no track {i} (song has {count})")
        out.append(i)
    return out


def _resolve_key(value: Any) -> Optional[KeySignature]:
    if value is None:
        return None
    try:
        if isinstance(value, str):
            return KeySignature.from_name(value)
        return KeySignature.from_fifths(_as_int(value, "sheet.key"))
    except MidiFileError as e:
        raise ConfigError(f"sheet.key: {e.message}") from e


def _resolve_time(value: Any, song: MidiSong) -> Optional[TimeSignature]:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ConfigError(f"sheet.time: expected [numerator, denominator], got {value!r}")
    num = _as_int(value[0], "sheet.time")
    den = _as_int(value[1], "sheet.time")
    try:
        return TimeSignature(num, den, song.quarter, song.time.tempo)
    except MidiFileError as e:
        raise ConfigError(f"sheet.time: {e.message}") from e


@dataclass
class SheetOptions:
    """
    Resolved options for one layout/playback run.  Per-track lists are
    indexed like `MidiSong.tracks`.
    """
    tracks: List[bool]
    mute: List[bool]
    instruments: List[int]
    use_default_instruments: bool = True
    transpose: int = 0
    key: Optional[KeySignature] = None
    time: Optional[TimeSignature] = None
    shift_time: int = 0
    combine_interval_ms: int = 40
    two_staffs: bool = False
    large_note_size: bool = False
    show_measures: bool = False
    show_lyrics: bool = True
    scroll_vert: bool = True
    tempo_percent: int = 100
    tempo: int = DEFAULT_TEMPO                   # µs per quarter for playback

    @property
    def note_size(self) -> NoteSize:
        return NoteSize.for_mode(self.large_note_size)

    @classmethod
    def default(cls, song: MidiSong) -> "SheetOptions":
        n = len(song.tracks)
        return cls(tracks=[True] * n, mute=[False] * n,
                   instruments=[t.instrument for t in song.tracks], tempo=song.time.tempo)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], song: MidiSong) -> "SheetOptions":
        sheet = cfg.get("sheet") or {}
        tracks_cfg = cfg.get("tracks") or {}
        playback = cfg.get("playback") or {}
        opts = cls.default(song)
        n = len(song.tracks)

        select = tracks_cfg.get("select")
        if select is not None:
            chosen = set(_track_indices(select, "tracks.select", n))
            opts.tracks = [i in chosen for i in range(n)]
        muted = set(_track_indices(tracks_cfg.get("mute") or [], "tracks.mute", n))
        opts.mute = [i in muted for i in range(n)]

        instruments = tracks_cfg.get("instruments") or {}
        if not isinstance(instruments, dict):
            raise ConfigError(f"tracks.instruments: expected a mapping, got {instruments!r}")
        for k, v in instruments.items():
            i = _as_int(k, "tracks.instruments")
            if not 0 <= i < n:
                raise ConfigError(f"tracks.instruments: no track {i} (song has {n})")
            program = _as_int(v, "tracks.instruments")
            if not 0 <= program <= 128:
                raise ConfigError(f"tracks.instruments: program {program} out of range")
            opts.instruments[i] = program
        opts.use_default_instruments = all(
            opts.instruments[i] == t.instrument for i, t in enumerate(song.tracks))

        opts.transpose = _as_int(sheet.get("transpose", 0), "sheet.transpose")
        opts.shift_time = _as_int(sheet.get("shift_time", 0), "sheet.shift_time")
        opts.combine_interval_ms = _as_int(sheet.get("combine_interval_ms", 40), "sheet.combine_interval_ms")
        opts.key = _resolve_key(sheet.get("key"))
        opts.time = _resolve_time(sheet.get("time"), song)
        for name in ("two_staffs", "large_note_size", "show_measures", "show_lyrics", "scroll_vert"):
            if name in sheet:
                setattr(opts, name, _as_bool(sheet[name], f"sheet.{name}"))

        opts.tempo_percent = _as_int(playback.get("tempo_percent", 100), "playback.tempo_percent")
        if opts.tempo_percent <= 0:
            raise ConfigError(f"playback.tempo_percent: must be positive, got {opts.tempo_percent}")
        opts.tempo = scale_tempo(song.time.tempo, opts.tempo_percent)
        return opts
