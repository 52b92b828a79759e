#!/usr/bin/env python3
"""ABOUTME: App shell tests - quitting releases the sound engine.
ABOUTME: Runs the Textual app headless and drives it with key presses."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from main import AmbientApp


def run_headless(*keys):
    async def scenario():
        app = AmbientApp()
        async with app.run_test() as pilot:
            for key in keys:
                await pilot.press(key)
            await pilot.pause()
        return app

    return asyncio.run(scenario())


def test_quit_shuts_down_engine():
    app = run_headless("escape")
    assert app.sound_engine._shut_down
    assert not app.sound_engine.is_playing


def test_shutdown_after_quit_is_harmless():
    app = run_headless("escape")
    app.sound_engine.shutdown()
    assert app.sound_engine._shut_down


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
