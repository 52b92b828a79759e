"""Ownership of the process-wide audio graph."""
import concurrent.futures
from typing import Callable, Optional

from music.audio_graph import AudioGraph, AudioUnavailableError


class SignalGraphManager:
    """Lazily creates, resumes and releases the shared AudioGraph.

    Args:
        sample_rate: Output sample rate in Hz
        buffer_size: Frames per render block
        master_volume: Output gain applied after soft clipping (0.0-1.0)
        graph_factory: Optional callable building the graph; defaults to
            opening the system output device
    """

    def __init__(self, sample_rate: int = 48000, buffer_size: int = 256,
                 master_volume: float = 0.8,
                 graph_factory: Optional[Callable[[], AudioGraph]] = None):
        if graph_factory is None:
            def graph_factory():
                return AudioGraph.open_default(sample_rate, buffer_size, master_volume)
        self._graph_factory = graph_factory
        self._graph: Optional[AudioGraph] = None
        self._unavailable = False
        self._executor: Optional[concurrent.futures.ThreadPoolExecutor] = None

    def current(self) -> Optional[AudioGraph]:
        """The live graph, without creating one."""
        graph = self._graph
        if graph is None or graph.is_closed:
            return None
        return graph

    def acquire(self) -> Optional[AudioGraph]:
        """Return the shared graph, creating it on first use.

        Returns None when the host has no usable audio output; the failure
        is remembered so later calls stay cheap.
        """
        if self.current() is not None:
            return self._graph
        if self._unavailable:
            return None
        try:
            self._graph = self._graph_factory()
        except AudioUnavailableError as e:
            print(f"[SignalGraphManager] audio disabled: {e}")
            self._unavailable = True
            return None
        except Exception as e:
            print(f"[SignalGraphManager] unexpected audio error, disabling: {e}")
            self._unavailable = True
            return None
        return self._graph

    def resume_if_suspended(self) -> Optional[concurrent.futures.Future]:
        """Start a suspended graph in the background.

        Fire-and-forget: callers keep scheduling without waiting. The
        returned future is only useful to callers that want to wait.
        """
        graph = self.current()
        if graph is None or graph.state != "suspended":
            return None
        if self._executor is None:
            self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)

        def _resume():
            try:
                graph.resume()
            except Exception as e:
                print(f"[SignalGraphManager] resume failed: {e}")

        return self._executor.submit(_resume)

    def release(self):
        """Close the graph. Safe to call repeatedly."""
        graph, self._graph = self._graph, None
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if graph is not None:
            try:
                graph.close()
            except Exception as e:
                print(f"[SignalGraphManager] close failed: {e}")
