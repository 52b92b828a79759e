"""Two-oscillator electric-piano voice with soft attack and long release."""
from dataclasses import dataclass
from typing import Optional, Tuple

from music.audio_graph import AudioGraph, AudioParam

# Second oscillator is detuned slightly for a chorus-like beating
DETUNE_RATIO = 1.001
ATTACK = 0.8
RELEASE = 4.0
# Exponential ramps cannot reach zero, so decays end here
ENVELOPE_FLOOR = 0.001


@dataclass(frozen=True)
class OscillatorSpec:
    kind: str
    frequency: float


@dataclass(frozen=True)
class EnvelopeSpec:
    attack: float
    hold: float
    release: float
    peak: float
    floor: float = ENVELOPE_FLOOR

    @property
    def end_offset(self) -> float:
        """Seconds from note start until the decay reaches the floor."""
        return self.hold + self.release

    def apply(self, param: AudioParam, start_time: float):
        """Program ``param``: rise to the peak, then one long decay to the floor."""
        param.set_value_at_time(0.0, start_time)
        param.linear_ramp_to_value_at_time(self.peak, start_time + self.attack)
        param.exponential_ramp_to_value_at_time(self.floor, start_time + self.end_offset)


@dataclass(frozen=True)
class Voice:
    """One note: paired oscillators, each with its own envelope."""
    frequency: float
    hold_duration: float
    oscillators: Tuple[OscillatorSpec, ...]
    envelopes: Tuple[EnvelopeSpec, ...]

    @property
    def lifetime(self) -> float:
        return max(e.end_offset for e in self.envelopes)


def build_voice(frequency: float, hold_duration: float) -> Voice:
    return Voice(
        frequency=frequency,
        hold_duration=hold_duration,
        oscillators=(
            OscillatorSpec("sine", frequency),                   # fundamental
            OscillatorSpec("triangle", frequency * DETUNE_RATIO),  # warmth
        ),
        envelopes=(
            EnvelopeSpec(ATTACK, hold_duration, RELEASE, 0.05),
            EnvelopeSpec(ATTACK, hold_duration, RELEASE, 0.02),  # quieter harmonics
        ),
    )


def play_note(graph: Optional[AudioGraph], frequency: float, start_time: float, hold_duration: float):
    """Schedule one voice on ``graph``. No-op when the graph is unavailable."""
    if graph is None or graph.is_closed:
        return
    voice = build_voice(frequency, hold_duration)
    end_time = start_time + voice.lifetime
    for osc_spec, envelope in zip(voice.oscillators, voice.envelopes):
        osc = graph.create_oscillator(osc_spec.kind, osc_spec.frequency)
        gain = graph.create_gain(0.0)
        envelope.apply(gain.gain, start_time)
        osc.connect(gain)
        gain.connect(graph.destination)
        osc.start(start_time)
        osc.stop(end_time)
