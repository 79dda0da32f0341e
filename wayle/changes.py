"""Records of individual configuration changes."""

from __future__ import annotations

import copy
import dataclasses
import time
from dataclasses import dataclass, field
from typing import Any

from wayle.errors import TypeMismatchError


def _type_name(expected_type: Any) -> str:
    return getattr(expected_type, "__qualname__", None) or repr(expected_type)


def _coerce(value: Any, expected_type: Any) -> Any:
    if expected_type is bool:
        if isinstance(value, bool):
            return value
        raise TypeError
    if expected_type is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise TypeError
    if expected_type is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise TypeError
    if dataclasses.is_dataclass(expected_type) and isinstance(expected_type, type):
        if not isinstance(value, dict):
            raise TypeError
        return expected_type(**copy.deepcopy(value))
    if isinstance(expected_type, type) and isinstance(value, expected_type):
        return copy.deepcopy(value)
    raise TypeError


@dataclass
class ConfigChange:
    """A change to one configuration field, identified by its dotted path."""

    path: str
    old_value: Any | None
    new_value: Any
    timestamp: float = field(default_factory=time.monotonic)

    def extract(self, expected_type: Any) -> Any:
        """Return the new value as ``expected_type``, or raise ``TypeMismatchError``."""
        try:
            return _coerce(self.new_value, expected_type)
        except (TypeError, ValueError):
            raise TypeMismatchError(
                self.path, _type_name(expected_type), self.new_value
            ) from None

    def as_string(self) -> str | None:
        """Return the new value if it is a string, else ``None``."""
        return self.new_value if isinstance(self.new_value, str) else None

    def as_string_or(self, default: str) -> str:
        """Return the new value if it is a string, else ``default``."""
        value = self.as_string()
        return default if value is None else value