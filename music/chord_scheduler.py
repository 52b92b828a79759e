"""Lookahead scheduler looping the ambient chord progression.

Note start times come from the audio graph's own clock, never from tick
arrival times, so jittery ticks cannot make the progression drift.
"""
import math
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from music.audio_graph import AudioGraph
from music.chord_library import PROGRESSION, Chord
from music.tick_source import TickSource
from music.voice import play_note

NotePlayer = Callable[[AudioGraph, float, float, float], None]


@dataclass
class ScheduleState:
    next_chord_time: float = 0.0
    chord_index: int = 0
    is_running: bool = False


class ChordScheduler:
    """
    Plays one chord per measure, strummed, for as long as it runs.

    Features:
    - Lookahead window: a chord is scheduled once its start comes within
      ``lookahead`` seconds of the device clock
    - Absolute-time grid: chord k starts at ``initial + k * measure_duration``
    - Idempotent start/stop; stale ticks from a previous run self-terminate
    - Thread-safe against tick sources that call back from a worker thread
    """

    def __init__(self, graph_provider: Callable[[], Optional[AudioGraph]], tick_source: TickSource,
                 progression: Sequence[Chord] = PROGRESSION, tempo_bpm: float = 30.0,
                 lookahead: float = 0.1, strum_offset: float = 0.15, hold_duration: float = 3.0,
                 tick_interval: float = 1.0 / 60.0, note_player: NotePlayer = play_note):
        """
        Initialize the chord scheduler.

        Args:
            graph_provider: Returns the live audio graph or None; never creates one
            tick_source: Facility used to re-arm the periodic tick
            progression: Chords to loop
            tempo_bpm: Beats per minute; one chord lasts four beats
            lookahead: Seconds ahead of the device clock to schedule
            strum_offset: Per-note stagger within a chord in seconds
            hold_duration: Hold time passed to each voice in seconds
            tick_interval: Delay between ticks in seconds
            note_player: Function(graph, frequency, start_time, hold_duration)
        """
        if not progression:
            raise ValueError("progression must contain at least one chord")
        self.graph_provider = graph_provider
        self.tick_source = tick_source
        self.progression = tuple(progression)
        self.tempo_bpm = float(tempo_bpm)
        self.lookahead = float(lookahead)
        self.strum_offset = float(strum_offset)
        self.hold_duration = float(hold_duration)
        self.tick_interval = float(tick_interval)
        self.note_player = note_player

        self.state = ScheduleState()
        self._lock = threading.RLock()
        self._tick_handle = None
        self._generation = 0

    @property
    def measure_duration(self) -> float:
        """Seconds per chord: four beats at the current tempo."""
        return (60.0 / self.tempo_bpm) * 4

    @property
    def is_running(self) -> bool:
        return self.state.is_running

    def start(self):
        """Start looping from the first chord at the current device time."""
        with self._lock:
            if self.state.is_running:
                return
            graph = self.graph_provider()
            if graph is None:
                return
            self._generation += 1
            self.state.is_running = True
            self.state.chord_index = 0
            self.state.next_chord_time = graph.current_time
            self._tick(self._generation)

    def stop(self):
        """Stop looping. Already-scheduled voices ring out on their own."""
        with self._lock:
            if not self.state.is_running:
                return
            self.state.is_running = False
            handle, self._tick_handle = self._tick_handle, None
            if handle is not None:
                self.tick_source.cancel(handle)

    def _tick(self, generation: int):
        with self._lock:
            # A tick dispatched before stop() (or before a restart) ends here
            if not self.state.is_running or generation != self._generation:
                return
            graph = self.graph_provider()
            if graph is not None:
                self._schedule_due(graph)
            self._tick_handle = self.tick_source.call_later(
                self.tick_interval, lambda: self._tick(generation))

    def _schedule_due(self, graph: AudioGraph):
        now = graph.current_time
        state = self.state
        if now - state.next_chord_time > self.lookahead:
            # Ticks stalled past the window: skip whole measures, keep the grid
            missed = math.ceil((now - state.next_chord_time) / self.measure_duration)
            state.next_chord_time += missed * self.measure_duration
            state.chord_index = (state.chord_index + missed) % len(self.progression)
            print(f"[ChordScheduler] fell behind, skipped {missed} chord(s)")

        while state.next_chord_time < now + self.lookahead:
            try:
                # Slightly late chords start now rather than in the past
                self._play_chord(graph, state.chord_index, max(state.next_chord_time, now))
            except Exception as e:
                print(f"[ChordScheduler] chord {state.chord_index} failed: {e}")
            state.next_chord_time += self.measure_duration
            state.chord_index = (state.chord_index + 1) % len(self.progression)

    def _play_chord(self, graph: AudioGraph, index: int, start_time: float):
        assert 0 <= index < len(self.progression), f"chord index {index} out of range"
        chord = self.progression[index % len(self.progression)]
        for i, frequency in enumerate(chord.frequencies):
            self.note_player(graph, frequency, start_time + i * self.strum_offset, self.hold_duration)
