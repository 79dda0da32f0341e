"""Markdown pages documenting module configuration schemas."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence

from wayle.docs.schema import (
    ModuleInfo,
    PropertyInfo,
    SchemaConversionError,
    SchemaFn,
    extract_property_info,
)

TABLE_HEADER = (
    "| Property | Type | Description | Default |\n"
    "|----------|------|-------------|---------|"
)


def title_case(s: str) -> str:
    """Upper-case the first character of ``s`` and keep the rest unchanged."""
    if not s:
        return ""
    return s[0].upper() + s[1:]


def generate_property_table(
    section_title: str, config_path: str, properties: Iterable[PropertyInfo]
) -> str:
    """Render a section with a table of properties, or ``""`` when there are none."""
    props = list(properties)
    if not props:
        return ""
    rows = "\n".join(
        f"| `{prop.name}` | `{prop.type_name}` | {prop.description} | `{prop.default_value}` |"
        for prop in props
    )
    return (
        f"## {section_title}\n**Config path:** `{config_path}`\n\n"
        f"{TABLE_HEADER}\n{rows}\n"
    )


def _header(module: ModuleInfo) -> str:
    return f"# {module.icon} {title_case(module.name)} Module\n\n{module.description}\n\n"


def _sections(
    configs: Sequence[tuple[str, SchemaFn]],
    module_name: str,
    section_type: str,
    path_prefix: str,
) -> str:
    parts: list[str] = []
    for config_name, schema_fn in configs:
        try:
            schema = json.loads(json.dumps(schema_fn()))
        except (TypeError, ValueError) as exc:
            raise SchemaConversionError(
                module_name,
                f"Failed to generate section for '{config_name}': {exc}",
            ) from exc

        properties = extract_property_info(schema)
        if not properties:
            continue
        section_title = f"{title_case(config_name)} {section_type}"
        config_path = f"[modules.{module_name}{path_prefix}.{config_name}]"
        parts.append(generate_property_table(section_title, config_path, properties))
        parts.append("\n")
    return "".join(parts)


def generate_module_page(module: ModuleInfo) -> str:
    """Render the full documentation page of ``module``.

    Raises ``SchemaConversionError`` if a schema cannot be represented as JSON.
    """
    return (
        _header(module)
        + _sections(module.behavior_configs, module.name, "Behavior", "")
        + _sections(module.styling_configs, module.name, "Styling", ".styling")
    )