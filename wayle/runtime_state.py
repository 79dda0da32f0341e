"""Runtime state persisted between command invocations and shared with the UI."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

STATE_FILE_NAME = "runtime-state.json"

_NANOS_PER_SEC = 1_000_000_000


def _is_uint(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass
class RuntimeState:
    """State shared between processes.

    ``last_updated`` is in nanoseconds since the Unix epoch.
    """

    active_media_player: str | None = None
    last_updated: int = field(default_factory=time.time_ns)

    def to_json(self) -> str:
        """Serialize to the on-disk JSON form."""
        secs, nanos = divmod(self.last_updated, _NANOS_PER_SEC)
        document = {
            "active_media_player": self.active_media_player,
            "last_updated": {"secs_since_epoch": secs, "nanos_since_epoch": nanos},
        }
        return json.dumps(document, indent=2)

    @classmethod
    def from_json(cls, text: str) -> RuntimeState:
        """Parse the on-disk JSON form, raising ``ValueError`` if it is malformed."""
        document = json.loads(text)
        if not isinstance(document, dict):
            raise ValueError("runtime state must be a JSON object")
        player = document.get("active_media_player")
        if player is not None and not isinstance(player, str):
            raise ValueError("active_media_player must be a string or null")
        updated = document.get("last_updated")
        if not isinstance(updated, dict):
            raise ValueError("last_updated must be an object")
        secs = updated.get("secs_since_epoch")
        nanos = updated.get("nanos_since_epoch")
        if not (_is_uint(secs) and _is_uint(nanos)):
            raise ValueError("last_updated must hold non-negative integers")
        return cls(player, secs * _NANOS_PER_SEC + nanos)

    def save(self, config_dir: str | Path) -> None:
        """Write this state into ``config_dir``, creating the directory if needed."""
        path = state_file_path(config_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")


def state_file_path(config_dir: str | Path) -> Path:
    """Return the path of the runtime state file inside ``config_dir``."""
    return Path(config_dir) / STATE_FILE_NAME


def load_runtime_state(config_dir: str | Path) -> RuntimeState:
    """Load the saved state, or a fresh one if the file is missing or malformed.

    Errors reading an existing file are raised.
    """
    path = state_file_path(config_dir)
    if not path.exists():
        return RuntimeState()
    text = path.read_text(encoding="utf-8")
    try:
        return RuntimeState.from_json(text)
    except ValueError:
        return RuntimeState()


def get_active_player(config_dir: str | Path) -> str | None:
    """Return the saved active media player, if any."""
    return load_runtime_state(config_dir).active_media_player


def set_active_player(player_id: str | None, config_dir: str | Path) -> None:
    """Save ``player_id`` as the active media player."""
    state = load_runtime_state(config_dir)
    state.active_media_player = player_id
    state.last_updated = time.time_ns()
    state.save(config_dir)