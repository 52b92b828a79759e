"""The fixed ambient chord progression: I - IV - V - vi in C."""
from dataclasses import dataclass
from typing import Tuple

import mingus.core.chords as chords
from mingus.containers import Note


@dataclass(frozen=True)
class Chord:
    numeral: str
    name: str
    frequencies: Tuple[float, ...]


def voice_chord(shorthand: str, octave: int) -> Tuple[float, ...]:
    """Spell a chord with mingus and voice it ascending from ``octave``.

    Args:
        shorthand: mingus chord shorthand (e.g. "CM7", "Am7")
        octave: Octave of the root note

    Returns:
        Frequencies in Hz, rounded to 0.01 Hz.
    """
    voiced = []
    for name in chords.from_shorthand(shorthand):
        note = Note(name, octave)
        if voiced and int(note) <= int(voiced[-1]):
            octave += 1
            note = Note(name, octave)
        voiced.append(note)
    return tuple(round(n.to_hertz(), 2) for n in voiced)


# (numeral, mingus shorthand, root octave)
_CHORD_CHART = [
    ("I", "CM7", 4),    # hopeful start
    ("IV", "FM7", 3),   # longing
    ("V", "G7", 3),     # tension
    ("vi", "Am7", 3),   # melancholy
]

PROGRESSION: Tuple[Chord, ...] = tuple(
    Chord(numeral, shorthand, voice_chord(shorthand, octave))
    for numeral, shorthand, octave in _CHORD_CHART
)
