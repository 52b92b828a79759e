"""Sound controls panel: mute toggle plus buttons that exercise UI feedback tones."""
from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Static

from music.sound_engine import SoundEngine


class SoundButton(Button):
    """Button that ticks on hover and thuds on press."""

    def __init__(self, label: str, engine: SoundEngine, **kwargs):
        super().__init__(label, **kwargs)
        self.engine = engine

    def on_enter(self, event: events.Enter) -> None:
        self.engine.play_hover()


class SoundControls(Vertical):
    """Stand-in for the app's sound-aware UI: mute control and feedback buttons."""

    DEFAULT_CSS = """
    SoundControls {
        width: 100%;
        height: auto;
        align: center middle;
        padding: 1;
    }

    #sound-status {
        width: 100%;
        text-align: center;
        color: $text-muted;
        margin-bottom: 1;
    }

    #sound-buttons {
        width: auto;
        height: auto;
    }

    #sound-buttons > SoundButton {
        margin: 0 1;
    }
    """

    def __init__(self, engine: SoundEngine, **kwargs):
        super().__init__(**kwargs)
        self.engine = engine

    def compose(self) -> ComposeResult:
        yield Static(self._status_text(), id="sound-status")
        with Horizontal(id="sound-buttons"):
            yield SoundButton(self._mute_label(), self.engine, id="mute-toggle", variant="primary")
            yield SoundButton("Save memory", self.engine, id="save-memory", variant="success")
            yield SoundButton("Open memory", self.engine, id="open-memory")

    def on_mount(self):
        # Poll engine state for the status line
        self.set_interval(0.25, self.refresh_status)

    def _mute_label(self) -> str:
        return "🔇 Unmute" if self.engine.is_muted else "🔊 Mute"

    def _status_text(self) -> str:
        if self.engine.is_muted:
            return "Sound muted"
        if self.engine.is_playing:
            return "Ambient playing"
        return "Sound on (ambient waiting)"

    def refresh_status(self):
        self.query_one("#sound-status", Static).update(self._status_text())
        self.query_one("#mute-toggle", Button).label = self._mute_label()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "mute-toggle":
            self.engine.toggle_mute()
        elif button_id == "save-memory":
            self.engine.play_success()
        else:
            self.engine.play_click()
        self.refresh_status()
