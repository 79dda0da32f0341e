"""Registry of documented modules and writer of their markdown pages."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from wayle.docs.markdown import generate_module_page
from wayle.docs.schema import DocsFileWriteError, DocsModuleNotFoundError, ModuleInfo

DEFAULT_OUTPUT_DIR = "docs/config/modules"


class ModuleRegistry:
    """The set of modules whose configuration can be documented."""

    def __init__(self, modules: Iterable[ModuleInfo] = ()) -> None:
        self._modules = list(modules)

    def get_all(self) -> list[ModuleInfo]:
        """Return every registered module."""
        return list(self._modules)

    def get_module_by_name(self, name: str) -> ModuleInfo | None:
        """Return the module called ``name``, or ``None``."""
        return next((module for module in self._modules if module.name == name), None)

    def list_module_names(self) -> list[str]:
        """Return the names of all registered modules."""
        return [module.name for module in self._modules]


class DocsGenerator:
    """Writes one markdown file per registered module into an output directory."""

    def __init__(
        self,
        output_dir: str | Path = DEFAULT_OUTPUT_DIR,
        registry: ModuleRegistry | None = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.registry = registry if registry is not None else ModuleRegistry()

    def generate_all(self) -> None:
        """Create the output directory and write a page for every module."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DocsFileWriteError(
                self.output_dir, f"Failed to create output directory: {exc}"
            ) from exc

        modules = self.registry.get_all()
        for module in modules:
            self._generate_single_module(module)
        print(f"Generated documentation for {len(modules)} modules")

    def generate_module_by_name(self, module_name: str) -> None:
        """Write the page of the module called ``module_name``."""
        module = self.registry.get_module_by_name(module_name)
        if module is None:
            raise DocsModuleNotFoundError(module_name)
        self._generate_single_module(module)

    def list_modules(self) -> list[str]:
        """Return the names of all modules that can be documented."""
        return self.registry.list_module_names()

    def _generate_single_module(self, module: ModuleInfo) -> None:
        content = generate_module_page(module)
        filepath = self.output_dir / f"{module.name}.md"
        try:
            filepath.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise DocsFileWriteError(filepath, str(exc)) from exc
        print(f"Generated {filepath}")