#!/usr/bin/env python3
"""Memory Globe ambient sound demo - Main Entry Point."""
import sys

from textual.app import App
from textual.binding import Binding
from textual.widgets import Header, Footer

from components.sound_controls import SoundControls
from config_manager import ConfigManager
from music.sound_engine import SoundEngine
from music.tick_source import TextualTickSource


class AmbientApp(App):
    """Hosts the sound engine and the controls that drive it."""

    VERSION = "1.0.0"
    # Seconds before the ambient hint fires, standing in for the intro sequence
    INTRO_SECONDS = 2.0

    CSS = """
    Screen {
        align: center middle;
    }
    """

    BINDINGS = [
        Binding("m", "toggle_mute", "Mute", show=True),
        Binding("s", "success", "Success", show=True),
        Binding("escape", "quit", "Quit", show=True),
    ]

    def __init__(self):
        super().__init__()
        self.title = f"Memory Globe v{self.VERSION}"
        self.config_manager = ConfigManager()
        self.sound_engine = SoundEngine(self.config_manager, tick_source=TextualTickSource(self))

    def compose(self):
        yield Header()
        yield SoundControls(self.sound_engine, id="sound-controls")
        yield Footer()

    def on_mount(self):
        self.set_timer(self.INTRO_SECONDS, self._end_intro)

    def _end_intro(self):
        self.sub_title = "Press M to toggle sound"
        self.sound_engine.play_ambient()

    def action_toggle_mute(self):
        self.sound_engine.toggle_mute()
        self.query_one(SoundControls).refresh_status()

    def action_success(self):
        self.sound_engine.play_success()

    async def action_quit(self):
        # Cancel pending timers while the event loop is still alive
        self.sound_engine.shutdown()
        self.exit()


def main() -> int:
    app = AmbientApp()
    try:
        app.run()
    finally:
        app.sound_engine.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
