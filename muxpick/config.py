from __future__ import annotations

import json
import os
from pathlib import Path


DEFAULT_CONFIG_PATH = Path.home() / ".config" / "muxpick.json"


def load_config(config_path: Path | None = None) -> dict:
    """Load config from muxpick.json. Missing file or keys use built-in defaults."""
    defaults = {"authority": "tmux", "show_all": False, "handoff_delay": 0.2}
    env_path = os.environ.get("MUXPICK_CONFIG")
    path = config_path or (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)
    if path.exists():
        data = json.loads(path.read_text())
        defaults.update(data)
    return defaults
