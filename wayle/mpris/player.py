"""Media player identities, capabilities, state and events."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any

from wayle.mpris.metadata import TrackMetadata

_ONE_MICROSECOND = timedelta(microseconds=1)


def from_mpris_micros(micros: int) -> timedelta:
    """Convert an MPRIS position in microseconds; negative values become zero."""
    if micros < 0:
        return timedelta(0)
    return timedelta(microseconds=micros)


def to_mpris_micros(duration: timedelta) -> int:
    """Convert a duration to whole MPRIS microseconds."""
    return duration // _ONE_MICROSECOND


@dataclass(frozen=True)
class PlayerId:
    """Identifies a media player by its bus name."""

    bus_name: str


@dataclass
class PlayerCapabilities:
    """Operations a player supports."""

    can_play: bool = False
    can_go_next: bool = False
    can_go_previous: bool = False
    can_seek: bool = False
    can_loop: bool = False
    can_shuffle: bool = False


@dataclass
class PlayerInfo:
    """Descriptive information about a player."""

    id: PlayerId
    identity: str
    can_control: bool
    capabilities: PlayerCapabilities = field(default_factory=PlayerCapabilities)


class PlaybackState(Enum):
    """Whether a player is playing, paused or stopped."""

    PLAYING = "Playing"
    PAUSED = "Paused"
    STOPPED = "Stopped"


def parse_playback_state(status: str) -> PlaybackState:
    """Parse an MPRIS playback status; unknown values mean stopped."""
    try:
        return PlaybackState(status)
    except ValueError:
        return PlaybackState.STOPPED


class LoopMode(Enum):
    """Repetition of a track or playlist."""

    NONE = "None"
    TRACK = "Track"
    PLAYLIST = "Playlist"
    UNSUPPORTED = "Unsupported"

    def to_mpris(self) -> str:
        """Return the MPRIS loop status; unsupported maps to ``None``."""
        return "None" if self is LoopMode.UNSUPPORTED else self.value


def parse_loop_mode(status: str) -> LoopMode:
    """Parse an MPRIS loop status; unknown values mean unsupported."""
    if status in ("None", "Track", "Playlist"):
        return LoopMode(status)
    return LoopMode.UNSUPPORTED


class ShuffleMode(Enum):
    """Whether playback order is randomized."""

    ON = "On"
    OFF = "Off"
    UNSUPPORTED = "Unsupported"

    def to_bool(self) -> bool:
        """Return the MPRIS shuffle flag."""
        return self is ShuffleMode.ON


def shuffle_mode_from_bool(shuffle: bool) -> ShuffleMode:
    """Convert an MPRIS shuffle flag."""
    return ShuffleMode.ON if shuffle else ShuffleMode.OFF


@dataclass
class PlayerState:
    """Complete snapshot of one player."""

    player_info: PlayerInfo
    playback_state: PlaybackState
    metadata: TrackMetadata
    position: timedelta
    loop_mode: LoopMode
    shuffle_mode: ShuffleMode


@dataclass
class PlayerStateTracker:
    """Last known state of a player, together with the proxy that controls it."""

    info: PlayerInfo
    player_proxy: Any
    last_metadata: TrackMetadata = field(default_factory=TrackMetadata)
    last_position: timedelta = timedelta(0)
    last_playback_state: PlaybackState = PlaybackState.STOPPED
    last_loop_mode: LoopMode = LoopMode.NONE
    last_shuffle_mode: ShuffleMode = ShuffleMode.OFF
    monitoring_handle: Any = None

    def snapshot(self) -> PlayerState:
        """Return an independent copy of the tracked state."""
        return PlayerState(
            player_info=copy.deepcopy(self.info),
            playback_state=self.last_playback_state,
            metadata=copy.deepcopy(self.last_metadata),
            position=self.last_position,
            loop_mode=self.last_loop_mode,
            shuffle_mode=self.last_shuffle_mode,
        )


class PlayerEvent:
    """Base class of events emitted about media players."""


@dataclass(frozen=True)
class PlayerAdded(PlayerEvent):
    """A new player became available."""

    info: PlayerInfo

    @property
    def player_id(self) -> PlayerId:
        """Identifier of the added player."""
        return self.info.id


@dataclass(frozen=True)
class PlayerRemoved(PlayerEvent):
    """A player went away."""

    player_id: PlayerId


@dataclass(frozen=True)
class PlaybackStateChanged(PlayerEvent):
    """A player's playback state changed."""

    player_id: PlayerId
    state: PlaybackState


@dataclass(frozen=True)
class MetadataChanged(PlayerEvent):
    """A player's track metadata changed."""

    player_id: PlayerId
    metadata: TrackMetadata


@dataclass(frozen=True)
class PositionChanged(PlayerEvent):
    """A player's playback position changed."""

    player_id: PlayerId
    position: timedelta


@dataclass(frozen=True)
class LoopModeChanged(PlayerEvent):
    """A player's loop mode changed."""

    player_id: PlayerId
    mode: LoopMode


@dataclass(frozen=True)
class ShuffleModeChanged(PlayerEvent):
    """A player's shuffle mode changed."""

    player_id: PlayerId
    mode: ShuffleMode


@dataclass(frozen=True)
class CapabilitiesChanged(PlayerEvent):
    """A player's capabilities changed."""

    player_id: PlayerId
    capabilities: PlayerCapabilities