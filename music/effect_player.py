"""One-shot UI feedback tones, played immediately and bypassing the scheduler.

Holds no mute state: callers check mute before calling in.
"""
from dataclasses import dataclass
from typing import Callable, Optional

from music.audio_graph import AudioGraph
from music.tick_source import TickSource
from music.voice import ENVELOPE_FLOOR

# Short rise so tones start without a click
TONE_ATTACK = 0.005


@dataclass(frozen=True)
class ToneSpec:
    frequency: float
    waveform: str
    duration: float
    volume: float = 0.1


HOVER = ToneSpec(800.0, "sine", 0.05, 0.03)
CLICK = ToneSpec(300.0, "triangle", 0.1, 0.08)

# (delay seconds, tone): C5 - E5 - G5 major triad
SUCCESS_ARPEGGIO = (
    (0.0, ToneSpec(523.25, "sine", 0.6, 0.05)),
    (0.1, ToneSpec(659.25, "sine", 0.6, 0.05)),
    (0.2, ToneSpec(783.99, "sine", 1.0, 0.05)),
)


def play_tone(graph: Optional[AudioGraph], frequency: float, waveform: str,
              duration: float, volume: float = 0.1):
    """Play a single enveloped oscillator starting now."""
    if graph is None or graph.is_closed:
        return
    now = graph.current_time
    attack = min(TONE_ATTACK, duration / 2.0)
    osc = graph.create_oscillator(waveform, frequency)
    gain = graph.create_gain(0.0)
    gain.gain.set_value_at_time(0.0, now)
    gain.gain.linear_ramp_to_value_at_time(volume, now + attack)
    gain.gain.exponential_ramp_to_value_at_time(ENVELOPE_FLOOR, now + duration)
    osc.connect(gain)
    gain.connect(graph.destination)
    osc.start(now)
    osc.stop(now + duration)


def play_preset(graph: Optional[AudioGraph], tone: ToneSpec):
    play_tone(graph, tone.frequency, tone.waveform, tone.duration, tone.volume)


def play_hover(graph: Optional[AudioGraph]):
    play_preset(graph, HOVER)


def play_click(graph: Optional[AudioGraph]):
    play_preset(graph, CLICK)


def play_success(graph_provider: Callable[[], Optional[AudioGraph]], tick_source: TickSource):
    """Fire the success arpeggio as independent deferred tones.

    Each tone looks the graph up when it fires, so a graph released in the
    meantime just drops the remaining notes.
    """
    for delay, tone in SUCCESS_ARPEGGIO:
        tick_source.call_later(delay, lambda tone=tone: play_preset(graph_provider(), tone))
