import asyncio
import tomllib
from pathlib import Path

import pytest

from wayle.errors import FileWatcherInitError
from wayle.file_watching import is_relevant_event, start_file_watching
from wayle.store import ConfigPaths, load_store


def toml_loader(path: Path):
    return tomllib.loads(Path(path).read_text(encoding="utf-8"))


@pytest.mark.parametrize(
    ("event_type", "paths", "expected"),
    [
        ("modified", ["/cfg/config.toml"], True),
        ("created", ["/cfg/new.toml"], True),
        ("deleted", ["/cfg/old.toml"], True),
        ("closed", ["/cfg/config.toml"], True),
        ("moved", ["/cfg/runtime.tmp", "/cfg/runtime.toml"], True),
        ("modified", ["/cfg/notes.txt"], False),
        ("opened", ["/cfg/config.toml"], False),
        ("closed_no_write", ["/cfg/config.toml"], False),
        ("modified", [], False),
    ],
)
def test_is_relevant_event(event_type, paths, expected):
    assert is_relevant_event(event_type, paths) is expected


def test_start_without_event_loop_raises(tmp_path):
    paths = ConfigPaths(tmp_path)
    paths.main_config.write_text("", encoding="utf-8")
    store = load_store(paths, {}, toml_loader)
    with pytest.raises(FileWatcherInitError):
        start_file_watching(store)


@pytest.mark.asyncio
async def test_start_on_missing_directory_raises(tmp_path):
    paths = ConfigPaths(tmp_path)
    paths.main_config.write_text("", encoding="utf-8")
    store = load_store(paths, {}, toml_loader)
    store.paths = ConfigPaths(tmp_path / "missing")
    with pytest.raises(FileWatcherInitError):
        start_file_watching(store)


@pytest.mark.asyncio
async def test_stop_ends_watching(tmp_path):
    paths = ConfigPaths(tmp_path)
    paths.main_config.write_text("", encoding="utf-8")
    store = load_store(paths, {}, toml_loader)
    watcher = start_file_watching(store)
    assert watcher.running is True
    watcher.stop()
    assert watcher.running is False
    watcher.stop()
    assert watcher.running is False


@pytest.mark.asyncio
async def test_file_change_reloads_and_broadcasts(tmp_path):
    paths = ConfigPaths(tmp_path)
    paths.main_config.write_text('[general]\nlog_level = "info"\n', encoding="utf-8")
    store = load_store(paths, {"general": {"log_level": "info"}}, toml_loader)
    sub = store.subscribe_to_path("general.*")
    with start_file_watching(store):
        await asyncio.sleep(0.2)
        paths.main_config.write_text(
            '[general]\nlog_level = "debug"\n', encoding="utf-8"
        )
        change = await asyncio.wait_for(sub.get(), 5)
    assert change.path == "general.log_level"
    assert change.new_value == "debug"
    assert store.get_by_path("general.log_level") == "debug"