"""Errors raised by media player operations."""

from __future__ import annotations

from datetime import timedelta
from typing import Any


def _duration(value: timedelta) -> str:
    return f"{value.total_seconds():g}s"


class MediaError(Exception):
    """Base class for media player errors."""


class PlayerNotFoundError(MediaError):
    """No player with the given identifier is known."""

    def __init__(self, player_id: Any) -> None:
        self.player_id = player_id
        super().__init__(f"Player {player_id!r} not found")


class MediaBackendError(MediaError):
    """Communication with the media bus failed."""

    def __init__(self, details: Any) -> None:
        self.details = str(details)
        super().__init__(f"D-Bus operation failed: {self.details}")


class UnsupportedOperationError(MediaError):
    """The player does not support the requested operation."""

    def __init__(self, player: Any, operation: str) -> None:
        self.player = player
        self.operation = operation
        super().__init__(f"Player {player!r} doesn't support {operation}")


class InvalidSeekPositionError(MediaError):
    """The requested seek position lies outside the current track."""

    def __init__(self, position: timedelta, length: timedelta | None) -> None:
        self.position = position
        self.length = length
        length_text = "None" if length is None else f"Some({_duration(length)})"
        super().__init__(
            f"Invalid seek position: {_duration(position)} (track length: {length_text})"
        )


class PlayerUnresponsiveError(MediaError):
    """The player does not answer requests."""

    def __init__(self, player_id: Any) -> None:
        self.player_id = player_id
        super().__init__(f"Player {player_id!r} not responding")


class InitializationFailedError(MediaError):
    """The media service could not be started."""

    def __init__(self, details: str) -> None:
        self.details = details
        super().__init__(f"Failed to initialize media service: {details}")