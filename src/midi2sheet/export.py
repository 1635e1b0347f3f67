# src/midi2sheet/export.py
"""Layout -> plain dicts, for renderers living outside Python (or in a test)."""
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .staff import Staff
from .symbols.accid import AccidSymbol
from .symbols.base import MusicSymbol
from .symbols.chord import ChordSymbol
from .symbols.clef import ClefSymbol
from .symbols.lyric import LyricSymbol
from .symbols.rest import RestSymbol
from .symbols.stem import Stem
from .symbols.timesig import TimeSigSymbol


def _stem_to_dict(stem: Optional[Stem]) -> Optional[Dict[str, Any]]:
    if stem is None:
        return None
    return {
        "duration": stem.duration.name.lower(),
        "direction": stem.direction.value,
        "side": stem.side.value,
        "top": str(stem.top),
        "bottom": str(stem.bottom),
        "end": str(stem.end),
        "pair": stem.pair,
        "width_to_pair": stem.width_to_pair,
        "receiver": stem.receiver,
    }


def _accid_to_dict(accid: AccidSymbol) -> Dict[str, Any]:
    return {"accid": accid.accid.value, "note": str(accid.note), "width": accid.width}


def symbol_to_dict(sym: MusicSymbol) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "kind": sym.kind.lower(),
        "start": sym.start_time,
        "width": sym.width,
        "above": sym.above_staff,
        "below": sym.below_staff,
    }
    if isinstance(sym, ChordSymbol):
        out["end"] = sym.end_time
        out["clef"] = sym.clef.value
        out["notes"] = [
            {"number": d.number, "note": str(d.whitenote), "duration": d.duration.name.lower(),
             "accid": d.accid.value, "leftside": d.leftside}
            for d in sym.notedata
        ]
        out["accids"] = [_accid_to_dict(a) for a in sym.accid_symbols]
        out["stem1"] = _stem_to_dict(sym.stem1)
        out["stem2"] = _stem_to_dict(sym.stem2)
    elif isinstance(sym, RestSymbol):
        out["duration"] = sym.duration.name.lower()
    elif isinstance(sym, ClefSymbol):
        out["clef"] = sym.clef.value
        out["small"] = sym.small
    elif isinstance(sym, TimeSigSymbol):
        out["numerator"] = sym.numerator
        out["denominator"] = sym.denominator
    return out


def _lyric_to_dict(lyric: LyricSymbol) -> Dict[str, Any]:
    return {"start": lyric.start_time, "text": lyric.text, "x": lyric.x, "width": lyric.min_width}


def staff_to_dict(staff: Staff) -> Dict[str, Any]:
    return {
        "track": staff.track,
        "clef": staff.clef.value,
        "keys": [_accid_to_dict(a) for a in staff.keys],
        "keysig_width": staff.keysig_width,
        "start": staff.start_time,
        "end": staff.end_time,
        "width": staff.width,
        "height": staff.height,
        "ytop": staff.ytop,
        "symbols": [symbol_to_dict(s) for s in staff.symbols],
        "lyrics": [_lyric_to_dict(ly) for ly in staff.lyrics or ()],
    }


def sheet_to_dict(sheet) -> Dict[str, Any]:
    """Everything a renderer needs: key, time, sizes and the ordered staffs."""
    staffs: List[Staff] = sheet.staffs
    return {
        "filename": sheet.song.filename,
        "key": {"name": sheet.key.name, "sharps": sheet.key.num_sharps, "flats": sheet.key.num_flats},
        "time": {"numerator": sheet.time.numerator, "denominator": sheet.time.denominator,
                 "quarter": sheet.time.quarter, "tempo": sheet.time.tempo,
                 "measure": sheet.time.measure},
        "note_size": {"line_space": sheet.size.line_space, "note_height": sheet.size.note_height,
                      "note_width": sheet.size.note_width, "staff_height": sheet.size.staff_height},
        "pulses": sheet.song.total_pulses,
        "tracks": [{"number": t.number, "instrument": t.instrument, "channels": t.channels}
                   for t in sheet.tracks],
        "staffs": [staff_to_dict(s) for s in staffs],
    }


def write_json(sheet, path: Union[str, Path]):
    Path(path).write_text(json.dumps(sheet_to_dict(sheet), indent=2), encoding="utf-8")
