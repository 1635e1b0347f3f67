from __future__ import annotations
import argparse, logging, pathlib, sys
from . import analyze, export, write
from .config import load_config
from .errors import MidiFileError
from .options import SheetOptions
from .sheet import SheetMusic

def main(argv=None):
    p = argparse.ArgumentParser(description="MIDI -> sheet music layout")
    p.add_argument("--in", dest="infile", required=True, help="Input MIDI file (.mid)")
    p.add_argument("--config", dest="config", default=None, help="YAML config (defaults applied if omitted)")
    p.add_argument("--json", dest="json_out", default=None, help="Write the staff layout as JSON")
    p.add_argument("--playback-out", dest="playback_out", default=None,
                   help="Write the MIDI file with the options applied (transpose, tempo, mute)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = p.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    in_path = pathlib.Path(args.infile).expanduser().resolve()
    if not in_path.exists():
        print(f"[cli] ERROR: Input not found: {in_path}", file=sys.stderr)
        sys.exit(1)

    cfg = load_config(args.config)
    print(f"[cli] infile = {in_path}")

    try:
        song = analyze.read_midi_file(in_path)
        options = SheetOptions.from_config(cfg, song)
        sheet = SheetMusic(song, options)
    except MidiFileError as e:
        print(f"[cli] ERROR: {e}", file=sys.stderr)
        sys.exit(2)

    for issue in song.issues:
        print(f"[cli] WARNING: track {issue.track_index} cut short at byte {issue.offset}: {issue.detail}")

    if args.json_out:
        json_path = pathlib.Path(args.json_out).expanduser().resolve()
        export.write_json(sheet, json_path)
        print(f"[cli] layout    -> {json_path}")

    if args.playback_out:
        out_path = pathlib.Path(args.playback_out).expanduser().resolve()
        events = write.apply_options_to_events(song, options)
        # type 0 holds exactly one track; muting can leave none
        mode = song.track_mode if len(events) == 1 else max(song.track_mode, 1)
        write.to_mido(events, mode, song.quarter).save(str(out_path))
        print(f"[cli] playback  -> {out_path}")

    total_notes = sum(len(t.notes) for t in song.tracks)
    print(f"[cli] Done. tracks={len(song.tracks)} notes={total_notes} key={sheet.key.name} "
          f"time={sheet.time.numerator}/{sheet.time.denominator} staffs={len(sheet.staffs)}")

if __name__ == "__main__":
    main()
