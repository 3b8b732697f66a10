"""Tuned constants and JSON config file loading."""

import json
from pathlib import Path

CONFIG_PATH = Path.home() / ".config" / "trail-engine" / "trail-engine.json"
LOCAL_CONFIG_PATH = Path("trail-engine.json")

# Tuned values; any key can be overridden from the config files.
DEFAULTS = {
    "cluster_radius_px": 50.0,
    "viewport_margin": 1.2,
    "viewport_aspect": 0.6,
    "debounce_ms": 300.0,
    "chart_width": 800,
    "chart_height": 200,
    "chart_padding_top": 20,
    "chart_padding_right": 40,
    "chart_padding_bottom": 40,
    "chart_padding_left": 60,
}


def _read_json(path: Path) -> dict:
    """Settings from one file; unreadable or non-object files count as empty."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def load_config() -> dict:
    """User settings, the working-directory file taking priority over the global one."""
    return {**_read_json(CONFIG_PATH), **_read_json(LOCAL_CONFIG_PATH)}


def get_setting(key: str, config: dict | None = None):
    """Look up a tuned setting, preferring config values over DEFAULTS."""
    if config is None:
        config = load_config()
    return config.get(key, DEFAULTS[key])
