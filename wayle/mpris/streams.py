"""Asynchronous streams of media player state for reactive consumers."""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import AsyncIterator, Callable, Mapping
from datetime import timedelta
from typing import Any

from wayle.mpris.metadata import TrackMetadata
from wayle.mpris.monitoring import EventBus
from wayle.mpris.player import (
    CapabilitiesChanged,
    LoopMode,
    LoopModeChanged,
    MetadataChanged,
    PlaybackState,
    PlaybackStateChanged,
    PlayerAdded,
    PlayerId,
    PlayerInfo,
    PlayerRemoved,
    PlayerState,
    PlayerStateTracker,
    PositionChanged,
    ShuffleMode,
    ShuffleModeChanged,
)

_STATE_EVENTS = (
    PlaybackStateChanged,
    MetadataChanged,
    PositionChanged,
    LoopModeChanged,
    ShuffleModeChanged,
    CapabilitiesChanged,
)


class PlayerStreams:
    """Streams that start with a player's current value and follow its changes.

    Each stream subscribes to the event bus when it is created, so no event
    sent after that is missed. Streams end when their bus is closed or they
    fall too far behind.
    """

    def __init__(
        self,
        players: Mapping[PlayerId, PlayerStateTracker],
        events: EventBus,
        player_lists: EventBus,
    ) -> None:
        self.players = players
        self.events = events
        self.player_lists = player_lists

    def players(self) -> AsyncIterator[list[PlayerId]]:
        """The known players now, then every announced player list."""
        return self._players(self.player_lists.subscribe())

    async def _players(self, receiver: Any) -> AsyncIterator[list[PlayerId]]:
        yield list(self.players.keys())
        async for player_ids in receiver:
            yield list(player_ids)

    def player_info(self, player_id: PlayerId) -> AsyncIterator[PlayerInfo]:
        """The player's information, updated when it is added or its capabilities change.

        Ends when the player is removed.
        """
        return self._player_info(self.events.subscribe(), player_id)

    async def _player_info(
        self, receiver: Any, player_id: PlayerId
    ) -> AsyncIterator[PlayerInfo]:
        tracker = self.players.get(player_id)
        if tracker is not None:
            yield copy.deepcopy(tracker.info)

        async for event in receiver:
            if isinstance(event, PlayerRemoved):
                if event.player_id == player_id:
                    return
            elif isinstance(event, PlayerAdded):
                if event.info.id == player_id:
                    yield event.info
            elif isinstance(event, CapabilitiesChanged):
                if event.player_id != player_id:
                    continue
                tracker = self.players.get(player_id)
                if tracker is not None:
                    yield dataclasses.replace(
                        copy.deepcopy(tracker.info), capabilities=event.capabilities
                    )

    def playback_state(self, player_id: PlayerId) -> AsyncIterator[PlaybackState]:
        """The player's playback state and its changes."""
        return self._follow(
            player_id,
            lambda tracker: tracker.last_playback_state,
            PlaybackStateChanged,
            "state",
        )

    def position(self, player_id: PlayerId) -> AsyncIterator[timedelta]:
        """The player's playback position and its changes."""
        return self._follow(
            player_id,
            lambda tracker: tracker.last_position,
            PositionChanged,
            "position",
        )

    def metadata(self, player_id: PlayerId) -> AsyncIterator[TrackMetadata]:
        """The player's track metadata and its changes."""
        return self._follow(
            player_id,
            lambda tracker: copy.deepcopy(tracker.last_metadata),
            MetadataChanged,
            "metadata",
        )

    def loop_mode(self, player_id: PlayerId) -> AsyncIterator[LoopMode]:
        """The player's loop mode and its changes."""
        return self._follow(
            player_id,
            lambda tracker: tracker.last_loop_mode,
            LoopModeChanged,
            "mode",
        )

    def shuffle_mode(self, player_id: PlayerId) -> AsyncIterator[ShuffleMode]:
        """The player's shuffle mode and its changes."""
        return self._follow(
            player_id,
            lambda tracker: tracker.last_shuffle_mode,
            ShuffleModeChanged,
            "mode",
        )

    def player_state(self, player_id: PlayerId) -> AsyncIterator[PlayerState]:
        """Complete snapshots of the player after each change; ends on removal."""
        return self._player_state(self.events.subscribe(), player_id)

    async def _player_state(
        self, receiver: Any, player_id: PlayerId
    ) -> AsyncIterator[PlayerState]:
        tracker = self.players.get(player_id)
        if tracker is not None:
            yield tracker.snapshot()

        async for event in receiver:
            if isinstance(event, PlayerRemoved):
                if event.player_id == player_id:
                    return
            elif isinstance(event, _STATE_EVENTS) and event.player_id == player_id:
                tracker = self.players.get(player_id)
                if tracker is not None:
                    yield tracker.snapshot()

    def _follow(
        self,
        player_id: PlayerId,
        current: Callable[[PlayerStateTracker], Any],
        event_type: type,
        attribute: str,
    ) -> AsyncIterator[Any]:
        return self._follow_events(
            self.events.subscribe(), player_id, current, event_type, attribute
        )

    async def _follow_events(
        self,
        receiver: Any,
        player_id: PlayerId,
        current: Callable[[PlayerStateTracker], Any],
        event_type: type,
        attribute: str,
    ) -> AsyncIterator[Any]:
        tracker = self.players.get(player_id)
        if tracker is not None:
            yield current(tracker)

        async for event in receiver:
            if isinstance(event, event_type) and event.player_id == player_id:
                yield getattr(event, attribute)