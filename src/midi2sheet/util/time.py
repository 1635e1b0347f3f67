from __future__ import annotations

DEFAULT_TEMPO = 500_000   # µs per quarter note (120 bpm)


def ms_to_pulses(ms: int, quarter: int, tempo: int) -> int:
    """Milliseconds -> pulses at `tempo` µs per quarter, truncated."""
    if tempo <= 0:
        tempo = DEFAULT_TEMPO
    return int(quarter * ms * 1000 // tempo)


def scale_tempo(tempo: int, percent: float) -> int:
    """tempo_percent 200 plays twice as fast, i.e. halves µs per quarter."""
    if percent <= 0:
        return tempo
    return max(1, min(0xFFFFFF, int(round(tempo * 100.0 / float(percent)))))
