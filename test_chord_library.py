#!/usr/bin/env python3
"""ABOUTME: Chord progression tests - mingus voicings match the ambient chord table.
ABOUTME: Verifies I-IV-V-vi frequencies, numerals and ascending voicing."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from music.chord_library import PROGRESSION, voice_chord


EXPECTED = [
    ("I", [261.63, 329.63, 392.00, 493.88]),
    ("IV", [174.61, 220.00, 261.63, 329.63]),
    ("V", [196.00, 246.94, 293.66, 349.23]),
    ("vi", [220.00, 261.63, 329.63, 392.00]),
]


def test_progression_has_four_four_note_chords():
    assert len(PROGRESSION) == 4
    for chord in PROGRESSION:
        assert len(chord.frequencies) == 4


@pytest.mark.parametrize("index", range(4))
def test_progression_frequencies(index):
    numeral, frequencies = EXPECTED[index]
    chord = PROGRESSION[index]
    assert chord.numeral == numeral
    assert list(chord.frequencies) == pytest.approx(frequencies, abs=0.005)


def test_voicings_ascend():
    for chord in PROGRESSION:
        assert list(chord.frequencies) == sorted(chord.frequencies)


def test_voice_chord_wraps_octave():
    # F major 7th from F3: C and E land in octave 4
    assert voice_chord("FM7", 3) == pytest.approx((174.61, 220.0, 261.63, 329.63), abs=0.005)


def test_progression_is_immutable():
    assert isinstance(PROGRESSION, tuple)
    with pytest.raises(AttributeError):
        PROGRESSION[0].numeral = "ii"


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
