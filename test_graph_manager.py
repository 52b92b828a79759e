#!/usr/bin/env python3
"""ABOUTME: Signal graph manager tests - lazy creation, resume and release.
ABOUTME: Uses graph factories so no audio device is touched."""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from music.audio_graph import AudioGraph, AudioUnavailableError
from music.graph_manager import SignalGraphManager


def counting_factory():
    graphs = []

    def factory():
        graph = AudioGraph(sample_rate=4000, buffer_size=200)
        graphs.append(graph)
        return graph

    return factory, graphs


def test_acquire_creates_once():
    factory, graphs = counting_factory()
    manager = SignalGraphManager(graph_factory=factory)
    assert manager.current() is None

    first = manager.acquire()
    second = manager.acquire()
    assert first is second
    assert len(graphs) == 1
    assert manager.current() is first


def test_acquire_returns_none_when_unavailable():
    calls = []

    def factory():
        calls.append(1)
        raise AudioUnavailableError("no device")

    manager = SignalGraphManager(graph_factory=factory)
    assert manager.acquire() is None
    assert manager.acquire() is None
    assert len(calls) == 1


def test_unexpected_factory_error_disables_audio():
    def factory():
        raise OSError("device busy")

    manager = SignalGraphManager(graph_factory=factory)
    assert manager.acquire() is None


def test_resume_if_suspended():
    factory, _ = counting_factory()
    manager = SignalGraphManager(graph_factory=factory)
    assert manager.resume_if_suspended() is None

    graph = manager.acquire()
    assert graph.state == "suspended"
    future = manager.resume_if_suspended()
    future.result(timeout=2.0)
    assert graph.state == "running"
    # Already running: nothing to do
    assert manager.resume_if_suspended() is None


def test_release_is_idempotent():
    factory, graphs = counting_factory()
    manager = SignalGraphManager(graph_factory=factory)
    graph = manager.acquire()
    manager.release()
    manager.release()
    assert graph.is_closed
    assert manager.current() is None

    # A later acquire opens a fresh graph
    assert manager.acquire() is not graph
    assert len(graphs) == 2


if __name__ == "__main__":
    import pytest
    sys.exit(pytest.main([__file__, "-v"]))
