"""Read the declared dependencies out of a pubspec manifest."""

from __future__ import annotations

from typing import Any

import yaml

from pubsentinel.engines.classifier.models import (
    DeclaredDependency,
    DependencySection,
    SimpleVersion,
    StructuredSpec,
    VersionSpec,
)
from pubsentinel.engines.manifest_editor.structure import find_section, locate_entry
from pubsentinel.exceptions import ManifestParseError


def load_manifest(text: str) -> dict[str, Any]:
    """Parse *text* as YAML; anything but a mapping yields an empty dict."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestParseError(f"invalid YAML: {exc}") from exc
    return data if isinstance(data, dict) else {}


def read_declared_dependencies(
    text: str,
) -> tuple[list[DeclaredDependency], list[DeclaredDependency]]:
    """Return ``(dependencies, dev_dependencies)`` in declaration order.

    Values are not validated. Nested mappings become :class:`StructuredSpec`
    carrying their raw manifest lines; everything else is stringified.
    """
    data = load_manifest(text)
    lines = text.split("\n")
    return (
        _section_entries(data, lines, DependencySection.DEPENDENCIES),
        _section_entries(data, lines, DependencySection.DEV_DEPENDENCIES),
    )


def _section_entries(
    data: dict[str, Any], lines: list[str], section: DependencySection
) -> list[DeclaredDependency]:
    raw = data.get(section.value)
    if not isinstance(raw, dict):
        return []

    section_info = find_section(lines, section.value)
    entries: list[DeclaredDependency] = []
    for key, value in raw.items():
        name = str(key)
        spec: VersionSpec
        if isinstance(value, dict):
            block: tuple[str, ...] = ()
            if section_info is not None:
                extent = locate_entry(lines, section_info, name)
                if extent is not None:
                    block = tuple(lines[i] for i in extent)
            spec = StructuredSpec(value=value, lines=block)
        else:
            spec = SimpleVersion(None if value is None else str(value))
        entries.append(DeclaredDependency(name=name, spec=spec, section=section))
    return entries
