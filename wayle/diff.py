"""Field-level comparison of two configurations."""

from __future__ import annotations

import copy
import dataclasses
import time
from collections.abc import Iterator, Mapping
from typing import Any

from wayle.changes import ConfigChange
from wayle.errors import InvalidPathError
from wayle.path_ops import navigate_path


def _normalize(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    if isinstance(value, Mapping):
        return {
            str(key): _normalize(item)
            for key, item in value.items()
            if item is not None
        }
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return copy.deepcopy(value)


def _same(old: Any, new: Any) -> bool:
    if isinstance(old, dict) and isinstance(new, dict):
        return old.keys() == new.keys() and all(_same(old[k], new[k]) for k in old)
    if isinstance(old, list) and isinstance(new, list):
        return len(old) == len(new) and all(_same(a, b) for a, b in zip(old, new))
    return type(old) is type(new) and old == new


def _join(path: str, key: str) -> str:
    return key if not path else f"{path}.{key}"


def _diff(
    path: str, old: Any, new: Any, timestamp: float, defaults: Any
) -> Iterator[ConfigChange]:
    if not (isinstance(old, dict) and isinstance(new, dict)):
        if not _same(old, new):
            yield ConfigChange(path, old, new, timestamp)
        return

    keys = list(old) + [key for key in new if key not in old]
    for key in keys:
        field_path = _join(path, key)
        if key in old and key in new:
            yield from _diff(field_path, old[key], new[key], timestamp, defaults)
        elif key in old:
            if defaults is None:
                continue
            try:
                default_value = navigate_path(defaults, field_path)
            except InvalidPathError:
                continue
            yield ConfigChange(field_path, old[key], default_value, timestamp)
        else:
            yield ConfigChange(field_path, None, new[key], timestamp)


def diff_configs(old: Any, new: Any, defaults: Any = None) -> list[ConfigChange]:
    """List the field-level changes between two configurations.

    Configurations may be mappings or dataclass instances. A field present in
    ``old`` but missing from ``new`` is reported with its value from
    ``defaults``; it is left out when no default exists. All changes share
    one timestamp.
    """
    timestamp = time.monotonic()
    normalized_defaults = None if defaults is None else _normalize(defaults)
    return list(
        _diff("", _normalize(old), _normalize(new), timestamp, normalized_defaults)
    )