# wayle

Building blocks for a desktop shell:

- a TOML-backed configuration store (`wayle.store.ConfigStore`) with
  dotted-path access, runtime overrides kept in a separate file, and change
  subscriptions filtered by wildcard patterns;
- field-level comparison of two configurations (`wayle.diff.diff_configs`)
  and reloading when files in the configuration directory change
  (`wayle.file_watching.start_file_watching`);
- markdown reference pages built from JSON-schema descriptions of modules
  (`wayle.docs`);
- media player state: identifiers, playback, loop and shuffle modes, track
  metadata, playback control, active-player selection and event streams
  (`wayle.mpris`).

## Installation

```
pip install .
```

With the test suite's requirements:

```
pip install ".[test]"
pytest
```

## Configuration store

The configuration is a plain table of dicts, lists and scalars. A store
lives in one directory, described by `ConfigPaths`: the main file is
`config.toml` and runtime overrides go to `runtime.toml`.

```python
from wayle.store import ConfigPaths, ConfigStore, load_store

paths = ConfigPaths("/home/me/.config/wayle")
defaults = {"modules": {"clock": {"general": {"format": "%H:%M"}}}}

store = load_store(paths, defaults)   # reads config.toml over the defaults, plus runtime.toml
store.set_by_path("modules.clock.general.format", "%H:%M:%S")
print(store.get_by_path("modules.clock.general.format"))
```

`ConfigStore(paths, defaults=None, config=None, runtime_config=None,
loader=None, broadcast_service=None)` builds a store directly. A `loader`
is any callable that takes the main file's path and returns the
configuration table; without one, the main file is read as TOML and laid
over the defaults.

`set_by_path(path, value)`:

1. records the value as a runtime override and sets it in the current configuration;
2. writes all overrides to `runtime.toml` (through a temporary file);
3. adds `"@runtime"` to the `imports` list of `config.toml` if it is not there;
4. broadcasts a `wayle.changes.ConfigChange` to matching subscribers.

The main file must exist; otherwise `ConfigIOError` is raised at step 3.

Other members: `get_current()`, `update_config(new_config)`,
`save_config()`, `broadcast_change(change)` and `reload_from_files()`,
which reloads through the loader and broadcasts one change per differing
field. A field missing from the reloaded configuration is reported with its
default value.

### Subscriptions

```python
subscription = store.subscribe_to_path("modules.*")
change = await subscription.get()          # or subscription.get_nowait()
print(change.path, change.old_value, change.new_value)
subscription.unsubscribe()
```

A pattern of `"*"` matches every path; a `*` segment matches any single
segment in its position. Subscriptions also work as context managers and as
async iterators. A subscriber whose queue (100 changes) is full when a
matching change arrives is dropped.

`ConfigChange.extract(expected_type)`, `as_string()` and
`as_string_or(default)` read the new value.

### Watching for edits

```python
from wayle.file_watching import start_file_watching

with start_file_watching(store):   # must run inside an event loop
    ...
```

Writes, creations, deletions and moves of `.toml` files in the
configuration directory trigger `reload_from_files()` after 100 ms of quiet.

## Documentation pages

```python
from wayle.docs.schema import ModuleInfo
from wayle.docs.generator import DocsGenerator, ModuleRegistry

clock = ModuleInfo(
    name="clock",
    icon="🕐",
    description="Shows the time.",
    behavior_configs=[("general", lambda: {"properties": {
        "format": {"type": "string", "description": "Time format", "default": "%H:%M"},
    }})],
)
DocsGenerator("docs/config/modules", ModuleRegistry([clock])).generate_all()
```

This writes `clock.md`. `wayle.docs.markdown` offers
`generate_module_page`, `generate_property_table` and `title_case`, and
`wayle.docs.schema.extract_property_info` turns a schema's `properties` into
`PropertyInfo` rows sorted by name.

## Media players

- `wayle.mpris.player`: `PlayerId`, `PlayerInfo`, `PlayerCapabilities`,
  `PlaybackState`, `LoopMode`, `ShuffleMode`, `PlayerStateTracker`, the
  `PlayerEvent` classes, and microsecond conversions.
- `wayle.mpris.metadata.track_metadata_from_mpris` builds `TrackMetadata`
  from an MPRIS metadata map.
- `wayle.mpris.control.MediaControl` sends play/pause, next, previous, seek,
  loop and shuffle commands through each tracker's proxy (any object
  matching the `PlayerProxy` protocol).
- `wayle.mpris.manager.PlayerManager` keeps the active player, falls back to
  another known player when it disappears, applies ignore patterns and, when
  given a `config_dir`, saves the choice through `wayle.runtime_state`
  (`runtime-state.json`).
- `wayle.mpris.monitoring` has `EventBus` and `PlayerMonitoring`, which
  records property changes and announces them as events.
- `wayle.mpris.streams.PlayerStreams` yields a player's current value and
  then its changes as async iterators.

## What the package does not do

- It does not connect to D-Bus or discover players; player proxies and the
  trackers holding them are supplied by the caller.
- The default loader does not follow `imports` in the main file; pass a
  `loader` for that.
- No modules are registered for documentation by default, and there is no
  command-line program.

## Errors

- Store failures raise subclasses of `wayle.errors.ConfigError`, such as
  `InvalidPathError`, `PersistenceError` and `ProcessingError`.
- `wayle.errors.WayleError` and its subclasses, with the helpers
  `toml_parse_error` and `import_error`, describe loading and import failures.
- Documentation failures raise subclasses of `wayle.docs.schema.DocsError`.
- Media failures raise subclasses of `wayle.mpris.errors.MediaError`, such
  as `PlayerNotFoundError` and `InvalidSeekPositionError`.