"""Error types raised by configuration loading and the configuration store."""

from __future__ import annotations

from pathlib import Path
from typing import Any


def _resolved(path: str | Path) -> Path:
    """Return the canonical form of ``path``, or ``path`` itself if it cannot be resolved."""
    candidate = Path(path)
    try:
        return candidate.resolve(strict=True)
    except (OSError, RuntimeError):
        return candidate


class WayleError(Exception):
    """Base class for errors raised while loading, parsing and importing configuration."""


class ConfigValidationError(WayleError):
    """A configuration component failed validation."""

    def __init__(self, component: str, details: str) -> None:
        self.component = component
        self.details = details
        super().__init__(f"configuration validation failed for '{component}': {details}")


class InvalidConfigFieldError(WayleError):
    """A configuration field is missing or invalid."""

    def __init__(self, field: str, component: str, reason: str) -> None:
        self.field = field
        self.component = component
        self.reason = reason
        super().__init__(f"invalid config field '{field}' in {component}: {reason}")


class WayleIOError(WayleError):
    """An I/O operation failed, optionally on a known path."""

    def __init__(self, details: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self.details = details
        if self.path is None:
            message = f"IO error: {details}"
        else:
            message = f"I/O error on '{self.path}': {details}"
        super().__init__(message)


class TomlParseError(WayleError):
    """TOML text could not be parsed."""

    def __init__(self, location: str, details: str) -> None:
        self.location = location
        self.details = details
        super().__init__(f"failed to parse TOML at '{location}': {details}")


class ConfigImportError(WayleError):
    """An imported configuration file could not be processed."""

    def __init__(self, path: str | Path, details: str) -> None:
        self.path = Path(path)
        self.details = details
        super().__init__(f"failed to import '{self.path}': {details}")


def toml_parse_error(error: Any, path: str | Path | None = None) -> TomlParseError:
    """Build a TOML parse error, naming the canonical file path or ``string``."""
    location = "string" if path is None else str(_resolved(path))
    return TomlParseError(location, str(error))


def import_error(error: Any, path: str | Path) -> ConfigImportError:
    """Build an import error for the file at ``path``."""
    return ConfigImportError(_resolved(path), str(error))


class ConfigError(Exception):
    """Base class for errors raised by configuration store operations."""


class InvalidPathError(ConfigError):
    """The configuration path does not exist or is malformed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid config path: {message}")


class TypeMismatchError(ConfigError):
    """A value does not have the type expected for its field."""

    def __init__(self, path: str, expected_type: str, actual_value: Any) -> None:
        self.path = path
        self.expected_type = expected_type
        self.actual_value = actual_value
        super().__init__(
            f"Type mismatch at {path}: Expected {expected_type}, got {actual_value!r}"
        )


class FieldRemovedError(ConfigError):
    """A configuration field that used to exist has been removed."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Config field removed: {field}")


class PatternError(ConfigError):
    """A path pattern could not be parsed."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid path pattern '{pattern}': {reason}")


class PersistenceError(ConfigError):
    """Configuration could not be written to disk."""

    def __init__(self, path: str | Path, details: str) -> None:
        self.path = Path(path)
        self.details = details
        super().__init__(f"failed to persist config to '{self.path}': {details}")


class SerializationError(ConfigError):
    """Configuration content could not be serialized."""

    def __init__(self, content_type: str, details: str) -> None:
        self.content_type = content_type
        self.details = details
        super().__init__(f"failed to serialize {content_type}: {details}")


class ConfigTomlParseError(ConfigError):
    """TOML content read by the store could not be parsed."""

    def __init__(self, location: str, details: str) -> None:
        self.location = location
        self.details = details
        super().__init__(f"failed to parse TOML from {location}: {details}")


class ConversionError(ConfigError):
    """A value could not be converted between formats or types."""

    def __init__(self, source: str, target: str, details: str) -> None:
        self.source = source
        self.target = target
        self.details = details
        super().__init__(f"failed to convert {source} to {target}: {details}")


class FileWatcherInitError(ConfigError):
    """The file watcher could not be started."""

    def __init__(self, details: str) -> None:
        self.details = details
        super().__init__(f"failed to initialize file watcher: {details}")


class FileWatchError(ConfigError):
    """Watching a particular file failed."""

    def __init__(self, path: str | Path, details: str) -> None:
        self.path = Path(path)
        self.details = details
        super().__init__(f"file watcher error for '{self.path}': {details}")


class ProcessingError(ConfigError):
    """A configuration processing step failed."""

    def __init__(self, operation: str, details: str) -> None:
        self.operation = operation
        self.details = details
        super().__init__(f"config processing failed for '{operation}': {details}")


class ConfigIOError(ConfigError):
    """File I/O performed by the store failed."""

    def __init__(self, path: str | Path, details: str) -> None:
        self.path = Path(path)
        self.details = details
        super().__init__(f"I/O error on '{self.path}': {details}")


class LockError(ConfigError):
    """A lock guarding shared configuration could not be acquired."""

    def __init__(self, lock_type: str, details: str) -> None:
        self.lock_type = lock_type
        self.details = details
        super().__init__(f"failed to acquire {lock_type} lock: {details}")


class ServiceUnavailableError(ConfigError):
    """A service the store depends on is not running."""

    def __init__(self, service: str, details: str) -> None:
        self.service = service
        self.details = details
        super().__init__(f"{service} service unavailable: {details}")