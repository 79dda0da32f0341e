"""Reloading the configuration store when files in its directory change."""

from __future__ import annotations

import asyncio
import os
import sys
import time
from collections.abc import Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from wayle.errors import ConfigError, FileWatcherInitError
from wayle.store import ConfigStore

DEBOUNCE_SECONDS = 0.1

_RELEVANT_EVENT_TYPES = frozenset({"modified", "created", "deleted", "moved", "closed"})


def is_relevant_event(event_type: str, paths: Iterable[str | os.PathLike]) -> bool:
    """Tell whether a file event is a write that touches a ``.toml`` file."""
    if event_type not in _RELEVANT_EVENT_TYPES:
        return False
    return any(Path(path).name.endswith(".toml") for path in paths)


class _Forwarder(FileSystemEventHandler):
    def __init__(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
        self._loop = loop
        self._queue = queue

    def on_any_event(self, event: FileSystemEvent) -> None:
        paths = [os.fsdecode(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(os.fsdecode(dest))
        try:
            self._loop.call_soon_threadsafe(
                self._queue.put_nowait, (event.event_type, paths)
            )
        except RuntimeError:
            pass


async def _watch_loop(queue: asyncio.Queue, store: ConfigStore) -> None:
    pending = False
    last_change = time.monotonic()
    while True:
        try:
            item = await asyncio.wait_for(queue.get(), DEBOUNCE_SECONDS)
        except asyncio.TimeoutError:
            if pending and time.monotonic() - last_change >= DEBOUNCE_SECONDS:
                try:
                    store.reload_from_files()
                except ConfigError as exc:
                    print(f"Failed to reload config: {exc}", file=sys.stderr)
                pending = False
            continue
        if item is None:
            break
        event_type, paths = item
        if is_relevant_event(event_type, paths):
            pending = True
            last_change = time.monotonic()


class FileWatcher:
    """Watches the configuration directory until stopped."""

    def __init__(self, observer: Observer, task: asyncio.Task) -> None:
        self._observer = observer
        self._task = task
        self._stopped = False

    @property
    def running(self) -> bool:
        """Whether events are still being watched and processed."""
        return not self._stopped and not self._task.done()

    def stop(self) -> None:
        """Stop watching; calling it again has no effect."""
        if self._stopped:
            return
        self._stopped = True
        self._observer.stop()
        self._observer.join(timeout=2)
        self._task.cancel()

    def __enter__(self) -> FileWatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def start_file_watching(store: ConfigStore) -> FileWatcher:
    """Reload ``store`` after debounced writes to ``.toml`` files in its directory.

    Must be called while an event loop is running.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError as exc:
        raise FileWatcherInitError(f"Failed to create watcher: {exc}") from exc

    config_dir = store.paths.config_dir
    if not config_dir.is_dir():
        raise FileWatcherInitError(
            f"Failed to watch config directory: {config_dir} is not a directory"
        )

    queue: asyncio.Queue = asyncio.Queue()
    observer = Observer()
    try:
        observer.schedule(_Forwarder(loop, queue), str(config_dir), recursive=False)
        observer.start()
    except Exception as exc:
        raise FileWatcherInitError(f"Failed to watch config directory: {exc}") from exc

    task = loop.create_task(_watch_loop(queue, store))
    return FileWatcher(observer, task)