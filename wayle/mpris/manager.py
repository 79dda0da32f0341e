"""Tracking and persisting which media player is active."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, MutableMapping
from pathlib import Path
from typing import Any, TypeVar

from wayle.mpris.errors import PlayerNotFoundError
from wayle.mpris.player import PlayerId, PlayerStateTracker
from wayle.runtime_state import get_active_player, set_active_player

R = TypeVar("R")


def load_active_player_from_file(config_dir: str | Path) -> PlayerId | None:
    """Return the saved active player, or ``None`` if none is saved or readable."""
    try:
        bus_name = get_active_player(config_dir)
    except OSError:
        return None
    return None if bus_name is None else PlayerId(bus_name)


class PlayerManager:
    """Keeps the known players, the active one and the ignore patterns.

    When ``config_dir`` is given, every change of the active player is saved
    to the runtime state file there.
    """

    def __init__(
        self,
        players: MutableMapping[PlayerId, PlayerStateTracker] | None = None,
        active_player: PlayerId | None = None,
        ignored_players: Iterable[str] = (),
        config_dir: str | Path | None = None,
    ) -> None:
        self.players: MutableMapping[PlayerId, PlayerStateTracker] = (
            players if players is not None else {}
        )
        self._active = active_player
        self._ignored = list(ignored_players)
        self.config_dir = Path(config_dir) if config_dir is not None else None
        self.discovery_task: Any = None

    def save_active_player_to_file(self, player_id: PlayerId | None) -> None:
        """Persist ``player_id`` as active; failures are ignored."""
        if self.config_dir is None:
            return
        try:
            set_active_player(
                None if player_id is None else player_id.bus_name, self.config_dir
            )
        except OSError:
            pass

    def find_and_set_fallback_player(self) -> PlayerId | None:
        """Make the first known player active, or none if there is none."""
        fallback = next(iter(self.players), None)
        self._active = fallback
        self.save_active_player_to_file(fallback)
        return fallback

    def validate_loaded_active_player(self) -> None:
        """Replace an active player that is not among the known players."""
        if self._active is not None and self._active not in self.players:
            self.find_and_set_fallback_player()

    def set_ignored_players(self, patterns: Iterable[str]) -> None:
        """Ignore players whose bus name contains any of ``patterns``."""
        self._ignored = list(patterns)

    def get_ignored_players(self) -> list[str]:
        """Return the current ignore patterns."""
        return list(self._ignored)

    def should_ignore_player(self, bus_name: str) -> bool:
        """Tell whether ``bus_name`` contains any ignore pattern."""
        return any(pattern in bus_name for pattern in self._ignored)

    def active_player(self) -> PlayerId | None:
        """Return the active player, falling back if it has gone away."""
        if self._active is None:
            return None
        if self._active in self.players:
            return self._active
        return self.find_and_set_fallback_player()

    def set_active_player(self, player_id: PlayerId | None) -> None:
        """Make ``player_id`` active, or clear it with ``None``.

        Raises ``PlayerNotFoundError`` for a player that is not known.
        """
        if player_id is not None and player_id not in self.players:
            raise PlayerNotFoundError(player_id)
        self._active = player_id
        self.save_active_player_to_file(player_id)

    async def control_active_player(
        self, action: Callable[[PlayerId], Awaitable[R]]
    ) -> R | None:
        """Run ``action`` on the active player; return ``None`` if there is none."""
        active = self.active_player()
        if active is None:
            return None
        return await action(active)

    def shutdown(self) -> None:
        """Cancel discovery and monitoring and forget every player."""
        if self.discovery_task is not None:
            self.discovery_task.cancel()
            self.discovery_task = None
        for tracker in self.players.values():
            handle = tracker.monitoring_handle
            if handle is not None:
                handle.cancel()
                tracker.monitoring_handle = None
        self.players.clear()