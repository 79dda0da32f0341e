"""Configuration store with path-based access, persistence and change notification."""

from __future__ import annotations

import copy
import os
import sys
import threading
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from wayle.broadcast import BroadcastService, Subscription
from wayle.changes import ConfigChange
from wayle.diff import diff_configs
from wayle.errors import (
    ConfigError,
    ConfigIOError,
    ConfigTomlParseError,
    PersistenceError,
    ProcessingError,
    SerializationError,
)
from wayle.path_ops import navigate_path, set_value_at_path

MAIN_CONFIG_NAME = "config.toml"
RUNTIME_CONFIG_NAME = "runtime.toml"
RUNTIME_IMPORT = "@runtime"

Loader = Callable[[Path], Any]


@dataclass(frozen=True)
class ConfigPaths:
    """Locations of the configuration files inside one configuration directory."""

    config_dir: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "config_dir", Path(self.config_dir))

    @property
    def main_config(self) -> Path:
        """The user's main configuration file."""
        return self.config_dir / MAIN_CONFIG_NAME

    @property
    def runtime_config(self) -> Path:
        """The file holding values set at runtime."""
        return self.config_dir / RUNTIME_CONFIG_NAME


def _deep_merge(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _read_over_defaults(defaults: dict[str, Any]) -> Loader:
    """Build a loader that reads the main file as plain TOML laid over ``defaults``."""

    def load(path: Path) -> dict[str, Any]:
        with open(path, "rb") as handle:
            return _deep_merge(defaults, tomllib.load(handle))

    return load


def ensure_runtime_import(config: str) -> str:
    """Return ``config`` with ``"@runtime"`` added to its ``imports`` list.

    Text that is not valid TOML is replaced by a document holding only the
    import list. If the result cannot be serialized, ``config`` is returned.
    """
    try:
        document: Any = tomllib.loads(config)
    except tomllib.TOMLDecodeError:
        document = {"imports": []}

    if isinstance(document, dict):
        imports = document.setdefault("imports", [])
        if isinstance(imports, list) and RUNTIME_IMPORT not in (
            item for item in imports if isinstance(item, str)
        ):
            imports.append(RUNTIME_IMPORT)

    try:
        return tomli_w.dumps(document)
    except (TypeError, ValueError):
        return config


def flatten_toml_to_paths(value: Any, prefix: str = "") -> dict[str, Any]:
    """Map each leaf inside nested tables to its dotted path."""
    if not isinstance(value, Mapping):
        return {prefix: copy.deepcopy(value)}
    flat: dict[str, Any] = {}
    for key, item in value.items():
        path = key if not prefix else f"{prefix}.{key}"
        flat.update(flatten_toml_to_paths(item, path))
    return flat


def _load_runtime_config(paths: ConfigPaths) -> dict[str, Any]:
    runtime_path = paths.runtime_config
    if not runtime_path.exists():
        return {}
    try:
        text = runtime_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigIOError(runtime_path, f"Failed to read runtime.toml: {exc}") from exc
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigTomlParseError(str(runtime_path), str(exc)) from exc
    return flatten_toml_to_paths(document)


class ConfigStore:
    """Holds the current configuration, persists runtime edits and reports changes.

    The configuration is a TOML-like table of dicts, lists and scalars. Values
    set through ``set_by_path`` are remembered and written to the runtime file.
    """

    def __init__(
        self,
        paths: ConfigPaths,
        defaults: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        runtime_config: Mapping[str, Any] | None = None,
        loader: Loader | None = None,
        broadcast_service: BroadcastService | None = None,
    ) -> None:
        self.paths = paths
        self.defaults: dict[str, Any] = copy.deepcopy(dict(defaults or {}))
        self._config: dict[str, Any] = copy.deepcopy(
            dict(config) if config is not None else self.defaults
        )
        self._runtime: dict[str, Any] = copy.deepcopy(dict(runtime_config or {}))
        self._loader = loader or _read_over_defaults(self.defaults)
        self._broadcast = broadcast_service or BroadcastService()
        self._lock = threading.RLock()

    def get_current(self) -> dict[str, Any]:
        """Return a copy of the current configuration."""
        with self._lock:
            return copy.deepcopy(self._config)

    def get_by_path(self, path: str) -> Any:
        """Return the value at the dotted ``path``."""
        with self._lock:
            return navigate_path(self._config, path)

    def set_by_path(self, path: str, value: Any) -> None:
        """Set ``value`` at ``path``, persist it and broadcast the change."""
        try:
            old_value = self.get_by_path(path)
        except ConfigError:
            old_value = None

        with self._lock:
            self._runtime[path] = copy.deepcopy(value)
            updated = copy.deepcopy(self._config)
            set_value_at_path(updated, path, copy.deepcopy(value))
            self._config = updated

        self.save_config()
        self.broadcast_change(ConfigChange(path, old_value, value))

    def subscribe_to_path(self, pattern: str) -> Subscription:
        """Subscribe to changes whose paths match ``pattern``."""
        return self._broadcast.subscribe(pattern)

    def save_config(self) -> None:
        """Write runtime values to disk and make sure the main file imports them."""
        with self._lock:
            entries = copy.deepcopy(self._runtime)

        runtime_value: dict[str, Any] = {}
        for path, value in entries.items():
            set_value_at_path(runtime_value, path, value)

        try:
            toml_text = tomli_w.dumps(runtime_value)
        except (TypeError, ValueError) as exc:
            raise SerializationError("config", str(exc)) from exc

        self._ensure_config_dir()

        config_path = self.paths.runtime_config
        temp_path = config_path.with_suffix(".tmp")
        try:
            temp_path.write_text(toml_text, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(temp_path, str(exc)) from exc
        try:
            os.replace(temp_path, config_path)
        except OSError as exc:
            raise PersistenceError(config_path, str(exc)) from exc

        main_path = self.paths.main_config
        try:
            main_text = main_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigIOError(
                main_path, "Main config file not found during persist operation"
            ) from exc

        if f'"{RUNTIME_IMPORT}"' not in main_text:
            try:
                main_path.write_text(ensure_runtime_import(main_text), encoding="utf-8")
            except OSError as exc:
                raise PersistenceError(
                    main_path, f"Failed to add runtime import to main config: {exc}"
                ) from exc

    def update_config(self, new_config: Mapping[str, Any]) -> None:
        """Replace the whole configuration without broadcasting."""
        with self._lock:
            self._config = copy.deepcopy(dict(new_config))

    def broadcast_change(self, change: ConfigChange) -> None:
        """Send ``change`` to subscribers, warning on stderr if that fails."""
        try:
            self._broadcast.broadcast(change)
        except ConfigError as exc:
            print(f"Warning: Failed to broadcast config change: {exc}", file=sys.stderr)

    def reload_from_files(self) -> None:
        """Reload the configuration from disk and broadcast every changed field."""
        old_config = self.get_current()
        try:
            new_config = self._loader(self.paths.main_config)
        except Exception as exc:
            raise ProcessingError("reload config", str(exc)) from exc

        try:
            changes = diff_configs(old_config, new_config, self.defaults)
        except Exception as exc:
            raise ProcessingError("diff configs", str(exc)) from exc

        self.update_config(new_config)
        for change in changes:
            self.broadcast_change(change)

    def _ensure_config_dir(self) -> None:
        config_dir = self.paths.config_dir
        try:
            config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(
                config_dir, f"Failed to create config directory: {exc}"
            ) from exc


def load_store(
    paths: ConfigPaths,
    defaults: Mapping[str, Any] | None = None,
    loader: Loader | None = None,
) -> ConfigStore:
    """Load a store from the main configuration file and the runtime file."""
    base = copy.deepcopy(dict(defaults or {}))
    load = loader or _read_over_defaults(base)
    try:
        config = load(paths.main_config)
    except Exception as exc:
        raise ProcessingError("load config", str(exc)) from exc
    runtime_config = _load_runtime_config(paths)
    return ConfigStore(
        paths,
        defaults=base,
        config=config,
        runtime_config=runtime_config,
        loader=load,
    )