"""Configuration file management."""
import json
from pathlib import Path
from typing import Optional


class ConfigManager:
    """Manages audio engine configuration."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else Path(__file__).parent / "config.json"
        self.config = self._load_config()

    def _load_config(self) -> dict:
        """Load configuration from file."""
        config = self._default_config()
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    config.update(json.load(f))
            except Exception:
                return self._default_config()
        return config

    def _default_config(self) -> dict:
        """Return default configuration."""
        return {
            "sample_rate": 48000,
            "buffer_size": 256,
            "master_volume": 0.8,
            "tempo_bpm": 30,
            "lookahead": 0.1,
            "tick_interval": 1.0 / 60.0,
            "start_muted": True,
        }

    def _number(self, key: str) -> float:
        """Numeric setting, or its default when the stored value is not a number."""
        value = self.config.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return self._default_config()[key]
        return value

    # ── Output device ────────────────────────────────────────────

    def get_sample_rate(self) -> int:
        return int(self._number("sample_rate"))

    def get_buffer_size(self) -> int:
        """Frames per render block, clamped to [64, 4096]."""
        return int(max(64, min(4096, self._number("buffer_size"))))

    def get_master_volume(self) -> float:
        return float(max(0.0, min(1.0, self._number("master_volume"))))

    # ── Ambient scheduler ────────────────────────────────────────

    def get_tempo_bpm(self) -> float:
        """Return the ambient tempo (default 30 BPM, one chord every 8s)."""
        return float(max(10, min(120, self._number("tempo_bpm"))))

    def get_lookahead(self) -> float:
        return float(max(0.01, self._number("lookahead")))

    def get_tick_interval(self) -> float:
        return float(max(0.001, self._number("tick_interval")))

    # ── Session ──────────────────────────────────────────────────

    def get_start_muted(self) -> bool:
        return bool(self.config.get("start_muted", True))
