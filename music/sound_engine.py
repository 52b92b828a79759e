"""Sound engine: mute state, ambient loop lifecycle and UI effect triggers.

Audio is an enhancement only, so nothing here raises to the caller. When
the host has no audio output every operation quietly does nothing.
"""
from typing import Optional

from config_manager import ConfigManager
from music import effect_player
from music.chord_scheduler import ChordScheduler, NotePlayer
from music.graph_manager import SignalGraphManager
from music.tick_source import ThreadTickSource, TickSource
from music.voice import play_note


class SoundEngine:
    """Owns the audio graph and keeps the ambient loop in step with mute."""

    def __init__(self, config_manager: Optional[ConfigManager] = None,
                 graph_manager: Optional[SignalGraphManager] = None,
                 tick_source: Optional[TickSource] = None,
                 note_player: NotePlayer = play_note):
        self.config_manager = config_manager or ConfigManager()
        cfg = self.config_manager
        self.graph_manager = graph_manager or SignalGraphManager(
            cfg.get_sample_rate(), cfg.get_buffer_size(), cfg.get_master_volume())

        # Only shut down a tick source we created ourselves
        self._owns_tick_source = tick_source is None
        self.tick_source = tick_source or ThreadTickSource()

        self.scheduler = ChordScheduler(
            self.graph_manager.current, self.tick_source,
            tempo_bpm=cfg.get_tempo_bpm(), lookahead=cfg.get_lookahead(),
            tick_interval=cfg.get_tick_interval(), note_player=note_player,
        )
        self._muted = cfg.get_start_muted()
        self._shut_down = False

    @property
    def is_muted(self) -> bool:
        return self._muted

    @property
    def is_playing(self) -> bool:
        """True while the ambient loop is running."""
        return self.scheduler.is_running

    def set_muted(self, muted: bool):
        """Apply a mute state and converge the ambient loop to it."""
        if self._shut_down:
            return
        self._muted = bool(muted)
        try:
            if self._muted:
                self.scheduler.stop()
            else:
                self._start_ambient()
        except Exception as e:
            print(f"[SoundEngine] mute transition failed: {e}")

    def toggle_mute(self):
        self.set_muted(not self._muted)

    def play_ambient(self):
        """Hint that ambient music may start now; ignored while muted."""
        if self._muted or self._shut_down:
            return
        try:
            self._start_ambient()
        except Exception as e:
            print(f"[SoundEngine] ambient start failed: {e}")

    def _start_ambient(self):
        if self.graph_manager.acquire() is None:
            return
        self.graph_manager.resume_if_suspended()
        self.scheduler.start()

    # ── UI effects ──────────────────────────────────────────────

    def _effect_graph(self):
        """Graph for an effect, or None when effects must stay silent."""
        if self._muted or self._shut_down:
            return None
        graph = self.graph_manager.acquire()
        if graph is not None:
            self.graph_manager.resume_if_suspended()
        return graph

    def play_hover(self):
        try:
            graph = self._effect_graph()
            if graph is not None:
                effect_player.play_hover(graph)
        except Exception as e:
            print(f"[SoundEngine] hover tone failed: {e}")

    def play_click(self):
        try:
            graph = self._effect_graph()
            if graph is not None:
                effect_player.play_click(graph)
        except Exception as e:
            print(f"[SoundEngine] click tone failed: {e}")

    def play_success(self):
        try:
            if self._effect_graph() is not None:
                effect_player.play_success(self.graph_manager.current, self.tick_source)
        except Exception as e:
            print(f"[SoundEngine] success tones failed: {e}")

    def shutdown(self):
        """Stop the loop and release the audio device. Safe to call repeatedly."""
        if self._shut_down:
            return
        self._shut_down = True
        try:
            self.scheduler.stop()
        except Exception as e:
            print(f"[SoundEngine] scheduler stop failed: {e}")
        try:
            self.graph_manager.release()
        except Exception as e:
            print(f"[SoundEngine] graph release failed: {e}")
        if self._owns_tick_source:
            self.tick_source.shutdown()
