"""Dot-separated path matching, lookup and assignment over TOML-like values."""

from __future__ import annotations

import copy
import datetime
import re
from typing import Any

from wayle.errors import InvalidPathError

WILDCARD = "*"

_INDEX_RE = re.compile(r"\+?[0-9]+")


def _type_str(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return "datetime"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "table"
    return type(value).__name__


def _parse_index(part: str) -> int | None:
    if _INDEX_RE.fullmatch(part):
        return int(part)
    return None


def path_matches(path: str, pattern: str) -> bool:
    """Tell whether ``path`` matches ``pattern``, where ``*`` matches any segment.

    Segments are compared pairwise up to the shorter of the two.
    """
    if pattern == WILDCARD:
        return True
    return all(
        pattern_part == WILDCARD or path_part == pattern_part
        for path_part, pattern_part in zip(path.split("."), pattern.split("."))
    )


def navigate_path(value: Any, path: str) -> Any:
    """Return a copy of the value found at ``path`` inside ``value``."""
    parts = path.split(".")
    current = value
    for i, part in enumerate(parts):
        prefix = ".".join(parts[:i])
        if isinstance(current, dict):
            if part not in current:
                raise InvalidPathError(
                    f"Key '{part}' not found in table at path '{prefix}'"
                )
            current = current[part]
        elif isinstance(current, list):
            index = _parse_index(part)
            if index is None:
                raise InvalidPathError(
                    f"Invalid array index '{part}' at path '{prefix}'"
                )
            if index >= len(current):
                raise InvalidPathError(
                    f"Array index '{index}' out of bounds at path '{prefix}'"
                )
            current = current[index]
        else:
            raise InvalidPathError(
                f'Cannot navigate into "{_type_str(current)}" at path \'{prefix}\''
            )
    return copy.deepcopy(current)


def _navigate_step(current: Any, key: str, path_so_far: list[str]) -> Any:
    joined = ".".join(path_so_far)
    if isinstance(current, dict):
        return current.setdefault(key, {})
    if isinstance(current, list):
        index = _parse_index(key)
        if index is None:
            raise InvalidPathError(f"Invalid array index '{key}' at path '{joined}'")
        if index >= len(current):
            raise InvalidPathError(
                f"Array index {index} out of bounds at path '{joined}'"
            )
        return current[index]
    raise InvalidPathError(
        f"Cannot navigate into {_type_str(current)} at path '{joined}'"
    )


def insert_value(container: Any, key: str, new_value: Any) -> None:
    """Store ``new_value`` under ``key`` in a table, or at index ``key`` in an array."""
    if isinstance(container, dict):
        container[key] = new_value
        return
    if isinstance(container, list):
        index = _parse_index(key)
        if index is None:
            raise InvalidPathError(f"Invalid array index '{key}'")
        if index >= len(container):
            raise InvalidPathError(f"Array index {index} out of bounds")
        container[index] = new_value
        return
    raise InvalidPathError(f"Cannot insert into {_type_str(container)}")


def set_value_at_path(value: Any, path: str, new_value: Any) -> None:
    """Set ``new_value`` at ``path`` inside ``value`` in place.

    Missing intermediate tables are created; array indices must already exist.
    """
    parts = path.split(".")
    if not parts:
        raise InvalidPathError("Empty path")
    current = value
    for i, part in enumerate(parts[:-1]):
        current = _navigate_step(current, part, parts[: i + 1])
    insert_value(current, parts[-1], new_value)