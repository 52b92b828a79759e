"""Audio processing graph: oscillators, gain automation and the output stream."""
import queue
import threading
from typing import List, Optional

import numpy as np

# Check for PyAudio availability
try:
    import pyaudio
    AUDIO_AVAILABLE = True
except ImportError:
    AUDIO_AVAILABLE = False
    pyaudio = None


WAVEFORMS = ("sine", "triangle", "square", "sawtooth")


class AudioUnavailableError(RuntimeError):
    """Raised when no audio output device can be opened."""


class AudioParam:
    """Automation timeline for a single value.

    Events are applied in time order. Before the first event the default
    value holds; a ramp runs from the previous event's (time, value) to its
    own; after the last event its value holds.
    """

    def __init__(self, default_value: float = 1.0):
        self.default_value = float(default_value)
        self._events: List[tuple] = []  # (time, value, kind)
        self._lock = threading.Lock()

    def _add(self, time: float, value: float, kind: str):
        with self._lock:
            self._events.append((float(time), float(value), kind))
            # Stable sort keeps insertion order for events sharing a time
            self._events.sort(key=lambda e: e[0])

    def set_value_at_time(self, value: float, time: float):
        self._add(time, value, "set")

    def linear_ramp_to_value_at_time(self, value: float, end_time: float):
        self._add(end_time, value, "linear")

    def exponential_ramp_to_value_at_time(self, value: float, end_time: float):
        if value <= 0:
            raise ValueError(f"exponential ramp target must be > 0, got {value}")
        self._add(end_time, value, "exponential")

    def values(self, times: np.ndarray) -> np.ndarray:
        times = np.asarray(times, dtype=np.float64)
        out = np.full(times.shape, self.default_value, dtype=np.float64)
        with self._lock:
            events = list(self._events)

        prev_time: Optional[float] = None
        prev_value = self.default_value
        for ev_time, ev_value, kind in events:
            if kind == "set" or prev_time is None or ev_time <= prev_time:
                out[times >= ev_time] = ev_value
            else:
                span = ev_time - prev_time
                mask = (times >= prev_time) & (times < ev_time)
                p = (times[mask] - prev_time) / span
                if kind == "linear":
                    out[mask] = prev_value + (ev_value - prev_value) * p
                elif prev_value > 0:
                    out[mask] = prev_value * (ev_value / prev_value) ** p
                else:
                    # Exponential ramps cannot leave zero: hold until the end
                    out[mask] = prev_value
                out[times >= ev_time] = ev_value
            prev_time, prev_value = ev_time, ev_value
        return out

    def value_at(self, time: float) -> float:
        return float(self.values(np.array([time]))[0])


class _Destination:
    """Terminal node: everything connected here is summed into the output."""


class GainNode:
    def __init__(self, graph: "AudioGraph", gain: float = 1.0):
        self.graph = graph
        self.gain = AudioParam(gain)
        self.output = None

    def connect(self, node):
        self.output = node
        return node


class OscillatorNode:
    """Band-limited periodic source with a scheduled start and stop."""

    def __init__(self, graph: "AudioGraph", kind: str = "sine", frequency: float = 440.0):
        if kind not in WAVEFORMS:
            raise ValueError(f"unknown waveform {kind!r}")
        self.graph = graph
        self.kind = kind
        self.frequency = float(frequency)
        self.start_time: Optional[float] = None
        self.stop_time = float("inf")
        self.output = None

    def connect(self, node):
        self.output = node
        return node

    def start(self, time: float = 0.0):
        if self.start_time is not None:
            return
        self.start_time = max(float(time), self.graph.current_time)
        self.graph._enqueue(self)

    def stop(self, time: float):
        self.stop_time = float(time)

    def render(self, times: np.ndarray) -> np.ndarray:
        """Render this source through its gain chain at absolute device times."""
        active = (times >= self.start_time) & (times < self.stop_time)
        samples = np.zeros(times.shape, dtype=np.float64)
        if not active.any():
            return samples

        t = times[active]
        # Phase from absolute time keeps blocks seamless without state
        cycles = self.frequency * (t - self.start_time)
        t_norm = cycles % 1.0
        if self.kind == "sine":
            wave = np.sin(2 * np.pi * cycles)
        elif self.kind == "triangle":
            wave = 4.0 * np.abs(t_norm - 0.5) - 1.0
        elif self.kind == "square":
            wave = np.where(t_norm < 0.5, 1.0, -1.0)
        else:
            wave = 2.0 * t_norm - 1.0

        node = self.output
        while isinstance(node, GainNode):
            wave = wave * node.gain.values(t)
            node = node.output
        if not isinstance(node, _Destination):
            # Not routed to the output: inaudible
            return samples
        samples[active] = wave
        return samples


class AudioGraph:
    """Shared synthesis context with a device clock.

    The clock counts rendered frames and only advances while the graph is
    running. With ``output=True`` a PyAudio callback stream pulls blocks;
    otherwise the caller drives rendering through ``render``/``advance``.
    """

    def __init__(self, sample_rate: int = 48000, buffer_size: int = 256,
                 master_volume: float = 0.8, output: bool = False):
        self.sample_rate = int(sample_rate)
        self.buffer_size = int(buffer_size)
        self.master_volume = max(0.0, min(1.0, float(master_volume)))
        self.destination = _Destination()
        self.state = "suspended"

        self._frame_position = 0
        self._sources: List[OscillatorNode] = []
        self._pending: queue.Queue = queue.Queue()
        self._render_lock = threading.Lock()

        self.audio = None
        self.stream = None
        if output:
            self._open_stream()

    @classmethod
    def open_default(cls, sample_rate: int = 48000, buffer_size: int = 256,
                     master_volume: float = 0.8) -> "AudioGraph":
        if not AUDIO_AVAILABLE or pyaudio is None:
            raise AudioUnavailableError("PyAudio is not installed")
        return cls(sample_rate, buffer_size, master_volume, output=True)

    def _open_stream(self):
        try:
            self.audio = pyaudio.PyAudio()
            default_output = self.audio.get_default_output_device_info()
            self.stream = self.audio.open(
                format=pyaudio.paInt16, channels=2, rate=self.sample_rate,
                output=True, output_device_index=default_output['index'],
                frames_per_buffer=self.buffer_size, stream_callback=self._audio_callback, start=False
            )
        except Exception as e:
            if self.audio:
                self.audio.terminate()
                self.audio = None
            raise AudioUnavailableError(f"Audio initialization failed: {e}") from e

    @property
    def current_time(self) -> float:
        return self._frame_position / self.sample_rate

    @property
    def is_closed(self) -> bool:
        return self.state == "closed"

    @property
    def active_sources(self) -> int:
        return len(self._sources) + self._pending.qsize()

    def create_oscillator(self, kind: str = "sine", frequency: float = 440.0) -> OscillatorNode:
        return OscillatorNode(self, kind, frequency)

    def create_gain(self, gain: float = 1.0) -> GainNode:
        return GainNode(self, gain)

    def _enqueue(self, source: OscillatorNode):
        if self.is_closed:
            return
        self._pending.put(source)

    def _drain_pending(self):
        while True:
            try:
                self._sources.append(self._pending.get_nowait())
            except queue.Empty:
                break

    def render(self, frame_count: int) -> np.ndarray:
        """Render one block of the mono mix and advance the clock."""
        with self._render_lock:
            self._drain_pending()
            if self.state != "running":
                return np.zeros(frame_count, dtype=np.float32)

            start = self._frame_position
            times = (start + np.arange(frame_count)) / self.sample_rate
            mix = np.zeros(frame_count, dtype=np.float64)
            for source in self._sources:
                mix += source.render(times)

            self._frame_position = start + frame_count
            end_time = self._frame_position / self.sample_rate
            self._sources = [s for s in self._sources if s.stop_time > end_time]
            return mix.astype(np.float32)

    def advance(self, seconds: float) -> np.ndarray:
        """Render ``seconds`` of audio offline in buffer-sized blocks."""
        remaining = int(round(seconds * self.sample_rate))
        blocks = []
        while remaining > 0:
            n = min(self.buffer_size, remaining)
            blocks.append(self.render(n))
            remaining -= n
        if not blocks:
            return np.zeros(0, dtype=np.float32)
        return np.concatenate(blocks)

    def _audio_callback(self, in_data, frame_count, time_info, status):
        try:
            mono = np.tanh(self.render(frame_count)) * self.master_volume
            out = np.empty(frame_count * 2, dtype=np.int16)
            pcm = np.clip(mono * 32767, -32767, 32767)
            out[0::2] = pcm
            out[1::2] = pcm
            return (out.tobytes(), pyaudio.paContinue)
        except Exception as e:
            print(f"[AudioGraph] render failed: {e}")
            return (np.zeros(frame_count * 2, dtype=np.int16).tobytes(), pyaudio.paContinue)

    def resume(self):
        if self.state != "suspended":
            return
        if self.stream:
            self.stream.start_stream()
        self.state = "running"

    def suspend(self):
        if self.state != "running":
            return
        if self.stream:
            self.stream.stop_stream()
        self.state = "suspended"

    def close(self):
        if self.is_closed:
            return
        self.state = "closed"
        if self.stream:
            self.stream.stop_stream()
            self.stream.close()
            self.stream = None
        if self.audio:
            self.audio.terminate()
            self.audio = None
        with self._render_lock:
            self._drain_pending()
            self._sources.clear()
