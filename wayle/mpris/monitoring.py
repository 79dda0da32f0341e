"""Event fan-out for media players and tracking of their property changes."""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterable, Callable, MutableMapping
from datetime import timedelta
from typing import Any

from wayle.mpris.errors import MediaError, PlayerNotFoundError
from wayle.mpris.metadata import TrackMetadata, track_metadata_from_mpris
from wayle.mpris.player import (
    LoopMode,
    LoopModeChanged,
    MetadataChanged,
    PlaybackState,
    PlaybackStateChanged,
    PlayerId,
    PlayerStateTracker,
    PositionChanged,
    ShuffleMode,
    ShuffleModeChanged,
    from_mpris_micros,
    parse_loop_mode,
    parse_playback_state,
    shuffle_mode_from_bool,
)

DEFAULT_EVENT_CAPACITY = 1024

_END = object()


class _Receiver:
    """One subscriber's view of an ``EventBus``, iterated asynchronously.

    Iteration ends when the bus is closed or when the subscriber falls more
    than the bus capacity behind.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._queue: asyncio.Queue = asyncio.Queue()
        self._open = True

    @property
    def open(self) -> bool:
        """Whether further events will still be delivered."""
        return self._open

    def _deliver(self, event: Any) -> bool:
        if not self._open:
            return False
        if self._queue.qsize() >= self._capacity:
            self._end()
            return False
        self._queue.put_nowait(event)
        return True

    def _end(self) -> None:
        if self._open:
            self._open = False
            self._queue.put_nowait(_END)

    def __aiter__(self) -> _Receiver:
        return self

    async def __anext__(self) -> Any:
        item = await self._queue.get()
        if item is _END:
            self._queue.put_nowait(_END)
            raise StopAsyncIteration
        return item


class EventBus:
    """Delivers every sent event to every current subscriber."""

    def __init__(self, capacity: int = DEFAULT_EVENT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._receivers: weakref.WeakSet[_Receiver] = weakref.WeakSet()
        self._closed = False

    @property
    def receiver_count(self) -> int:
        """Number of subscribers still receiving events."""
        return sum(1 for receiver in self._receivers if receiver.open)

    def subscribe(self) -> _Receiver:
        """Return a receiver of all events sent from now on."""
        receiver = _Receiver(self.capacity)
        if self._closed:
            receiver._end()
        else:
            self._receivers.add(receiver)
        return receiver

    def send(self, event: Any) -> int:
        """Send ``event`` to all subscribers and return how many received it."""
        delivered = 0
        for receiver in list(self._receivers):
            if receiver._deliver(event):
                delivered += 1
            else:
                self._receivers.discard(receiver)
        return delivered

    def close(self) -> None:
        """End every subscription; later subscribers receive nothing."""
        self._closed = True
        for receiver in list(self._receivers):
            receiver._end()
        self._receivers.clear()


class PlayerMonitoring:
    """Records property changes of tracked players and announces them as events."""

    def __init__(
        self,
        players: MutableMapping[PlayerId, PlayerStateTracker],
        events: EventBus,
    ) -> None:
        self.players = players
        self.events = events

    def start_monitoring(self, player_id: PlayerId) -> asyncio.Task:
        """Follow the property-change feeds of the player's proxy in a task.

        The proxy must offer ``receive_position_changed``,
        ``receive_playback_status_changed``, ``receive_metadata_changed``,
        ``receive_loop_status_changed`` and ``receive_shuffle_changed``,
        each returning an async iterable of raw MPRIS values.
        """
        return asyncio.get_running_loop().create_task(self._run(player_id))

    async def _run(self, player_id: PlayerId) -> None:
        try:
            await self._monitor_player_properties(player_id)
        except MediaError as exc:
            print(f"Player monitoring failed: {exc}")

    async def _monitor_player_properties(self, player_id: PlayerId) -> None:
        tracker = self.players.get(player_id)
        if tracker is None:
            raise PlayerNotFoundError(player_id)
        proxy = tracker.player_proxy

        feeds: list[tuple[AsyncIterable[Any], Callable[[Any], None]]] = [
            (
                proxy.receive_position_changed(),
                lambda v: self.handle_position_changed(player_id, from_mpris_micros(v)),
            ),
            (
                proxy.receive_playback_status_changed(),
                lambda v: self.handle_playback_state_changed(
                    player_id, parse_playback_state(v)
                ),
            ),
            (
                proxy.receive_metadata_changed(),
                lambda v: self.handle_metadata_changed(
                    player_id, track_metadata_from_mpris(v)
                ),
            ),
            (
                proxy.receive_loop_status_changed(),
                lambda v: self.handle_loop_mode_changed(player_id, parse_loop_mode(v)),
            ),
            (
                proxy.receive_shuffle_changed(),
                lambda v: self.handle_shuffle_mode_changed(
                    player_id, shuffle_mode_from_bool(v)
                ),
            ),
        ]
        await asyncio.gather(*(self._consume(source, handle) for source, handle in feeds))

    @staticmethod
    async def _consume(source: AsyncIterable[Any], handle: Callable[[Any], None]) -> None:
        async for value in source:
            try:
                handle(value)
            except (TypeError, ValueError, AttributeError):
                continue

    def handle_position_changed(self, player_id: PlayerId, position: timedelta) -> None:
        """Record a new playback position and announce it."""
        tracker = self.players.get(player_id)
        if tracker is not None:
            tracker.last_position = position
        self.events.send(PositionChanged(player_id, position))

    def handle_playback_state_changed(
        self, player_id: PlayerId, state: PlaybackState
    ) -> None:
        """Record a new playback state and announce it."""
        tracker = self.players.get(player_id)
        if tracker is not None:
            tracker.last_playback_state = state
        self.events.send(PlaybackStateChanged(player_id, state))

    def handle_metadata_changed(
        self, player_id: PlayerId, metadata: TrackMetadata
    ) -> None:
        """Record new track metadata and announce it."""
        tracker = self.players.get(player_id)
        if tracker is not None:
            tracker.last_metadata = metadata
        self.events.send(MetadataChanged(player_id, metadata))

    def handle_loop_mode_changed(self, player_id: PlayerId, mode: LoopMode) -> None:
        """Record a new loop mode and announce it."""
        tracker = self.players.get(player_id)
        if tracker is not None:
            tracker.last_loop_mode = mode
        self.events.send(LoopModeChanged(player_id, mode))

    def handle_shuffle_mode_changed(
        self, player_id: PlayerId, mode: ShuffleMode
    ) -> None:
        """Record a new shuffle mode and announce it."""
        tracker = self.players.get(player_id)
        if tracker is not None:
            tracker.last_shuffle_mode = mode
        self.events.send(ShuffleModeChanged(player_id, mode))