"""Playback control of individual media players."""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, MutableMapping
from datetime import timedelta
from typing import Any, Protocol

from wayle.mpris.errors import (
    InvalidSeekPositionError,
    MediaBackendError,
    MediaError,
    PlayerNotFoundError,
    UnsupportedOperationError,
)
from wayle.mpris.player import (
    LoopMode,
    PlayerId,
    PlayerStateTracker,
    parse_loop_mode,
    to_mpris_micros,
)

DEFAULT_TRACK_ID = "/"

_OBJECT_PATH_RE = re.compile(r"/|(?:/[A-Za-z0-9_]+)+")

_NEXT_LOOP_MODE = {
    LoopMode.NONE: LoopMode.TRACK,
    LoopMode.TRACK: LoopMode.PLAYLIST,
    LoopMode.PLAYLIST: LoopMode.NONE,
}


class PlayerProxy(Protocol):
    """The bus interface through which a player's playback is controlled."""

    async def play_pause(self) -> None: ...

    async def next(self) -> None: ...

    async def previous(self) -> None: ...

    async def set_position(self, track_id: str, position: int) -> None: ...

    async def loop_status(self) -> str: ...

    async def set_loop_status(self, status: str) -> None: ...

    async def shuffle(self) -> bool: ...

    async def set_shuffle(self, shuffle: bool) -> None: ...


async def _call(func: Callable[..., Awaitable[Any]], *args: Any) -> Any:
    """Await a proxy call, reporting backend failures as ``MediaBackendError``."""
    try:
        return await func(*args)
    except MediaError:
        raise
    except Exception as exc:
        raise MediaBackendError(exc) from exc


def _validate_object_path(track_id: str) -> str:
    if not _OBJECT_PATH_RE.fullmatch(track_id):
        raise MediaBackendError(f"invalid object path '{track_id}'")
    return track_id


class MediaControl:
    """Sends playback commands to the players held in a shared tracker map."""

    def __init__(self, players: MutableMapping[PlayerId, PlayerStateTracker]) -> None:
        self.players = players

    def _tracker(self, player_id: PlayerId) -> PlayerStateTracker:
        try:
            return self.players[player_id]
        except KeyError:
            raise PlayerNotFoundError(player_id) from None

    def get_player_proxy(self, player_id: PlayerId) -> PlayerProxy:
        """Return the proxy of ``player_id``, or raise ``PlayerNotFoundError``."""
        return self._tracker(player_id).player_proxy

    async def get_current_loop_mode(self, proxy: PlayerProxy) -> LoopMode:
        """Ask the player for its current loop mode."""
        return parse_loop_mode(await _call(proxy.loop_status))

    async def play_pause(self, player_id: PlayerId) -> None:
        """Toggle between playing and paused."""
        await _call(self.get_player_proxy(player_id).play_pause)

    async def next(self, player_id: PlayerId) -> None:
        """Skip to the next track."""
        await _call(self.get_player_proxy(player_id).next)

    async def previous(self, player_id: PlayerId) -> None:
        """Skip to the previous track."""
        await _call(self.get_player_proxy(player_id).previous)

    async def seek(self, player_id: PlayerId, position: timedelta) -> None:
        """Move playback to ``position`` within the current track.

        Raises ``InvalidSeekPositionError`` if the position lies past the
        known track length.
        """
        tracker = self._tracker(player_id)
        proxy = tracker.player_proxy
        length = tracker.last_metadata.length
        if length is not None and position > length:
            raise InvalidSeekPositionError(position, length)
        track_id = tracker.last_metadata.track_id or DEFAULT_TRACK_ID
        _validate_object_path(track_id)
        await _call(proxy.set_position, track_id, to_mpris_micros(position))

    async def toggle_loop(self, player_id: PlayerId) -> None:
        """Cycle the loop mode: none, track, playlist, then none again."""
        proxy = self.get_player_proxy(player_id)
        current = await self.get_current_loop_mode(proxy)
        next_mode = _NEXT_LOOP_MODE.get(current)
        if next_mode is None:
            raise UnsupportedOperationError(player_id, "loop")
        await _call(proxy.set_loop_status, next_mode.to_mpris())

    async def toggle_shuffle(self, player_id: PlayerId) -> None:
        """Turn shuffle on if it is off, and off if it is on."""
        proxy = self.get_player_proxy(player_id)
        current = await _call(proxy.shuffle)
        await _call(proxy.set_shuffle, not current)