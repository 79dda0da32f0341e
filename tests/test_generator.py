import pytest

from wayle.docs.generator import DEFAULT_OUTPUT_DIR, DocsGenerator, ModuleRegistry
from wayle.docs.markdown import generate_module_page
from wayle.docs.schema import DocsFileWriteError, DocsModuleNotFoundError, ModuleInfo

SCHEMA = {"properties": {"format": {"type": "string", "default": "%H:%M"}}}


def _clock():
    return ModuleInfo("clock", "C", "Shows the time", [("general", lambda: SCHEMA)])


def _battery():
    return ModuleInfo("battery", "B", "Shows charge", [("general", lambda: SCHEMA)])


def test_registry_lookup():
    registry = ModuleRegistry([_clock(), _battery()])
    assert registry.list_module_names() == ["clock", "battery"]
    assert registry.get_module_by_name("battery").description == "Shows charge"
    assert registry.get_module_by_name("missing") is None
    assert len(registry.get_all()) == 2


def test_default_output_dir():
    assert DocsGenerator().output_dir.as_posix() == DEFAULT_OUTPUT_DIR
    assert DocsGenerator().list_modules() == []


def test_generate_all_writes_every_page(tmp_path, capsys):
    out = tmp_path / "nested" / "out"
    module = _clock()
    generator = DocsGenerator(out, ModuleRegistry([module, _battery()]))
    generator.generate_all()
    assert (out / "clock.md").read_text(encoding="utf-8") == generate_module_page(module)
    assert (out / "battery.md").exists()
    assert "Generated documentation for 2 modules" in capsys.readouterr().out


def test_generate_module_by_name(tmp_path):
    generator = DocsGenerator(tmp_path, ModuleRegistry([_clock(), _battery()]))
    generator.generate_module_by_name("battery")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["battery.md"]


def test_generate_unknown_module_raises(tmp_path):
    generator = DocsGenerator(tmp_path, ModuleRegistry([_clock()]))
    with pytest.raises(DocsModuleNotFoundError) as info:
        generator.generate_module_by_name("nope")
    assert info.value.name == "nope"


def test_output_dir_that_is_a_file_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    generator = DocsGenerator(blocker, ModuleRegistry([_clock()]))
    with pytest.raises(DocsFileWriteError) as info:
        generator.generate_all()
    assert info.value.path == blocker