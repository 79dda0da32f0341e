import math
import time
from dataclasses import dataclass

import pytest

from wayle.changes import ConfigChange
from wayle.errors import TypeMismatchError


def test_config_change_new():
    change = ConfigChange("test.path", "old", "new")
    assert change.path == "test.path"
    assert change.old_value == "old"
    assert change.new_value == "new"
    assert time.monotonic() - change.timestamp < 1


def test_config_change_new_field():
    change = ConfigChange("modules.new_module", None, True)
    assert change.path == "modules.new_module"
    assert change.old_value is None
    assert change.new_value is True


def test_config_change_value_types():
    change = ConfigChange("string_field", "old", "new")
    assert change.new_value == "new"

    change = ConfigChange("bool_field", False, True)
    assert change.old_value is False
    assert change.new_value is True

    change = ConfigChange("int_field", 10, 42)
    assert change.old_value == 10
    assert change.new_value == 42

    change = ConfigChange("float_field", None, math.pi)
    assert change.old_value is None
    assert change.new_value == math.pi


def test_extract_matching_types():
    assert ConfigChange("a", None, 42).extract(int) == 42
    assert ConfigChange("a", None, "x").extract(str) == "x"
    assert ConfigChange("a", None, True).extract(bool) is True
    assert ConfigChange("a", None, [1, 2]).extract(list) == [1, 2]


def test_extract_integer_as_float():
    result = ConfigChange("a", None, 42).extract(float)
    assert result == 42
    assert isinstance(result, float)


def test_extract_mismatch_raises():
    change = ConfigChange("general.count", None, "text")
    with pytest.raises(TypeMismatchError) as info:
        change.extract(int)
    assert info.value.path == "general.count"
    assert info.value.actual_value == "text"
    assert info.value.expected_type == "int"


def test_extract_bool_is_not_int():
    with pytest.raises(TypeMismatchError):
        ConfigChange("flag", None, True).extract(int)


def test_extract_dataclass_from_table():
    @dataclass
    class Clock:
        format: str
        enabled: bool

    change = ConfigChange("modules.clock", None, {"format": "%H:%M", "enabled": True})
    clock = change.extract(Clock)
    assert clock == Clock(format="%H:%M", enabled=True)

    with pytest.raises(TypeMismatchError):
        ConfigChange("modules.clock", None, {"unknown": 1}).extract(Clock)


def test_as_string_and_default():
    assert ConfigChange("a", None, "value").as_string() == "value"
    assert ConfigChange("a", None, 5).as_string() is None
    assert ConfigChange("a", None, 5).as_string_or("fallback") == "fallback"
    assert ConfigChange("a", None, "value").as_string_or("fallback") == "value"


def test_changes_compare_by_fields():
    first = ConfigChange("p", 1, 2, timestamp=10.0)
    second = ConfigChange("p", 1, 2, timestamp=10.0)
    assert first == second
    assert first != ConfigChange("p", 1, 3, timestamp=10.0)