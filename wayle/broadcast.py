"""Pattern-filtered fan-out of configuration changes to subscribers."""

from __future__ import annotations

import asyncio
import itertools
import threading
from dataclasses import dataclass

from wayle.changes import ConfigChange
from wayle.errors import ServiceUnavailableError
from wayle.path_ops import path_matches

DEFAULT_CAPACITY = 100


def _unavailable() -> ServiceUnavailableError:
    return ServiceUnavailableError("broadcast", "Broadcast service is not running")


@dataclass
class _Entry:
    pattern: str
    queue: asyncio.Queue


class Subscription:
    """Receives the configuration changes whose paths match one pattern.

    The subscription is removed from its service when ``unsubscribe`` is
    called, when a ``with`` block around it ends, or when it is garbage
    collected.
    """

    def __init__(
        self,
        service: BroadcastService,
        subscription_id: int,
        pattern: str,
        queue: asyncio.Queue,
    ) -> None:
        self._service = service
        self.id = subscription_id
        self.pattern = pattern
        self._queue = queue
        self._active = True

    async def get(self) -> ConfigChange:
        """Wait for and return the next matching change."""
        return await self._queue.get()

    def get_nowait(self) -> ConfigChange:
        """Return the next pending change or raise ``asyncio.QueueEmpty``."""
        return self._queue.get_nowait()

    def unsubscribe(self) -> None:
        """Stop receiving changes; calling it again has no effect."""
        if self._active:
            self._active = False
            self._service._remove(self.id)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> ConfigChange:
        return await self.get()

    def __del__(self) -> None:
        try:
            self.unsubscribe()
        except Exception:
            pass


class BroadcastService:
    """Delivers each broadcast change to every subscriber whose pattern matches.

    A subscriber whose queue is full when a matching change arrives is dropped.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._capacity = capacity
        self._ids = itertools.count(1)
        self._entries: dict[int, _Entry] = {}
        self._lock = threading.Lock()
        self._closed = False

    def subscribe(self, pattern: str) -> Subscription:
        """Subscribe to changes whose paths match ``pattern`` (``*`` is a wildcard)."""
        queue: asyncio.Queue = asyncio.Queue(self._capacity)
        with self._lock:
            if self._closed:
                raise _unavailable()
            subscription_id = next(self._ids)
            self._entries[subscription_id] = _Entry(pattern, queue)
        return Subscription(self, subscription_id, pattern, queue)

    def broadcast(self, change: ConfigChange) -> None:
        """Send ``change`` to every matching subscriber."""
        with self._lock:
            if self._closed:
                raise _unavailable()
            for subscription_id, entry in list(self._entries.items()):
                if not path_matches(change.path, entry.pattern):
                    continue
                try:
                    entry.queue.put_nowait(change)
                except asyncio.QueueFull:
                    del self._entries[subscription_id]

    def close(self) -> None:
        """Stop the service and forget every subscriber."""
        with self._lock:
            self._closed = True
            self._entries.clear()

    def _remove(self, subscription_id: int) -> None:
        with self._lock:
            self._entries.pop(subscription_id, None)