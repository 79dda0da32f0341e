"""Module descriptions and property extraction from JSON Schema documents."""

from __future__ import annotations

import json
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

SchemaFn = Callable[[], Mapping[str, Any]]


@dataclass
class PropertyInfo:
    """Documentation facts about one schema property."""

    name: str
    type_name: str
    description: str
    default_value: str


@dataclass
class ModuleInfo:
    """Metadata and configuration schemas of one module."""

    name: str
    icon: str
    description: str
    behavior_configs: list[tuple[str, SchemaFn]] = field(default_factory=list)
    styling_configs: list[tuple[str, SchemaFn]] = field(default_factory=list)


class DocsError(Exception):
    """Base class for documentation generation errors."""


class DocsFileWriteError(DocsError):
    """A documentation file could not be written."""

    def __init__(self, path: str | Path, details: str) -> None:
        self.path = Path(path)
        self.details = details
        super().__init__(f"failed to write documentation to '{self.path}': {details}")


class InvalidModuleNameError(DocsError):
    """A module name was rejected."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"invalid module name '{name}': {reason}")


class SchemaConversionError(DocsError):
    """A module schema could not be converted."""

    def __init__(self, module: str, details: str) -> None:
        self.module = module
        self.details = details
        super().__init__(f"failed to convert schema for '{module}': {details}")


class DocsModuleNotFoundError(DocsError):
    """No module with the requested name is registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"module '{name}' not found in registry")


def _format_float(number: float) -> str:
    if math.isnan(number) or math.isinf(number):
        return "null"
    mantissa, marker, exponent = repr(number).partition("e")
    return f"{mantissa}e{int(exponent)}" if marker else mantissa


def _format_default(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def _string_field(prop: Any, key: str, fallback: str) -> str:
    if isinstance(prop, Mapping):
        value = prop.get(key)
        if isinstance(value, str):
            return value
    return fallback


def _default_of(prop: Any) -> str:
    if isinstance(prop, Mapping) and "default" in prop:
        return _format_default(prop["default"])
    return "-"


def extract_property_info(schema: Any) -> list[PropertyInfo]:
    """Return the schema's ``properties`` as ``PropertyInfo`` sorted by name.

    Returns an empty list when the schema has no ``properties`` object.
    """
    if not isinstance(schema, Mapping):
        return []
    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        return []
    return [
        PropertyInfo(
            name=name,
            type_name=_string_field(prop, "type", "unknown"),
            description=_string_field(prop, "description", "No description provided"),
            default_value=_default_of(prop),
        )
        for name, prop in sorted(properties.items())
    ]