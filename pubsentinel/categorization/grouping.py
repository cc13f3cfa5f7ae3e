"""GroupingService — rewrite dependency sections under category comment headers."""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml

from pubsentinel.categorization.categorizer import PackageCategorizer
from pubsentinel.categorization.heuristics import category_sort_key
from pubsentinel.categorization.models import GroupedDependencies
from pubsentinel.core.config import DEPENDENCIES_SECTION, DEV_DEPENDENCIES_SECTION
from pubsentinel.engines.classifier.models import DependencyInfo
from pubsentinel.engines.manifest_editor.structure import entries_end, find_section, iter_entries

log = structlog.get_logger(__name__)

_DEFAULT_INDENT = "  "


class GroupingService:
    def __init__(
        self,
        categorizer: PackageCategorizer,
        overrides: dict[str, str] | None = None,
    ) -> None:
        self.categorizer = categorizer
        self.overrides = overrides or {}

    async def group_dependencies(self, dependencies: list[DependencyInfo]) -> GroupedDependencies:
        """Bucket *dependencies* by category (local overrides win)."""
        grouped: dict[str, list[DependencyInfo]] = {}
        for dep in dependencies:
            category = self.overrides.get(dep.name)
            if category is None:
                category = await self.categorizer.classify_package(dep.name)
            grouped.setdefault(category, []).append(dep)

        for deps in grouped.values():
            deps.sort(key=lambda d: d.name)

        return GroupedDependencies(
            grouped=grouped,
            category_order=sorted(grouped, key=category_sort_key),
        )

    def generate_preview(
        self,
        grouped_deps: GroupedDependencies,
        grouped_dev_deps: GroupedDependencies,
        manifest_text: str | None = None,
    ) -> str:
        """Render both grouped sections stand-alone.

        With *manifest_text*, entries are shown with their original lines
        (including nested git/path mappings); otherwise as ``name: version``.
        """
        lines = manifest_text.split("\n") if manifest_text is not None else []
        out: list[str] = []
        for section_name, grouped in (
            (DEPENDENCIES_SECTION, grouped_deps),
            (DEV_DEPENDENCIES_SECTION, grouped_dev_deps),
        ):
            if not grouped.grouped:
                continue
            if out:
                out.append("")
            blocks, indent = _section_blocks(lines, section_name)
            out.append(f"{section_name}:")
            out.extend(_render_grouped(grouped, blocks, indent))
        return "\n".join(out) + "\n" if out else ""

    def generate_grouped_manifest(
        self,
        manifest_text: str,
        grouped_deps: GroupedDependencies,
        grouped_dev_deps: GroupedDependencies,
    ) -> str:
        """Return *manifest_text* with both sections regrouped.

        Each declaration keeps its raw block, so structured specs survive.
        Entries that were not grouped (e.g. the SDK entry) stay first, in
        their original order. Indented comments between entries are replaced
        by the category headers. Whatever follows the last entry, such as a
        column-0 comment or a stray top-level key, is left as it was.
        """
        lines = manifest_text.split("\n")
        for section_name, grouped in (
            (DEV_DEPENDENCIES_SECTION, grouped_dev_deps),
            (DEPENDENCIES_SECTION, grouped_deps),
        ):
            section = find_section(lines, section_name)
            if section is None or not grouped.grouped:
                continue

            blocks, indent = _section_blocks(lines, section_name)
            eol = "\r" if lines[section.start_index].endswith("\r") else ""
            grouped_names = {dep.name for deps in grouped.grouped.values() for dep in deps}

            body: list[str] = []
            for name, block in blocks.items():
                if name not in grouped_names:
                    body.extend(block)
            if body:
                body.append(eol)
            body.extend(_render_grouped(grouped, blocks, indent, eol))

            lines[section.start_index + 1 : entries_end(lines, section)] = body
            log.debug(
                "grouping.section_rewritten",
                section=section_name,
                categories=grouped.category_count,
                packages=grouped.total_packages,
            )
        return "\n".join(lines)


def _section_blocks(lines: list[str], section_name: str) -> tuple[dict[str, list[str]], str]:
    """Raw lines per top-level entry of a section, plus the entry indent."""
    section = find_section(lines, section_name) if lines else None
    if section is None:
        return {}, _DEFAULT_INDENT
    blocks: dict[str, list[str]] = {}
    indent = None
    for name, extent in iter_entries(lines, section):
        first = lines[extent.start]
        if indent is None:
            indent = first[: len(first) - len(first.lstrip())]
        blocks[name] = lines[extent.start : extent.stop]
    return blocks, indent or _DEFAULT_INDENT


def _render_grouped(
    grouped: GroupedDependencies,
    blocks: dict[str, list[str]],
    indent: str,
    eol: str = "",
) -> list[str]:
    out: list[str] = []
    categories = [c for c in grouped.category_order if grouped.grouped.get(c)]
    for position, category in enumerate(categories):
        out.append(f"{indent}# {category}{eol}")
        for dep in grouped.grouped[category]:
            out.extend(blocks.get(dep.name) or [f"{indent}{dep.name}: {dep.version}{eol}"])
        if position < len(categories) - 1:
            out.append(eol)
    return out


def load_group_overrides(path: Path) -> dict[str, str] | None:
    """Read ``package: Category`` overrides; ``None`` if absent or unreadable."""
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        log.warning("grouping.overrides_unreadable", path=str(path), error=str(exc))
        return None
    if not isinstance(data, dict):
        return None
    return {str(key): str(value) for key, value in data.items()}


def save_group_overrides(path: Path, overrides: dict[str, str]) -> None:
    header = "# Package category overrides\n# Format: package_name: Category Name\n\n"
    body = yaml.safe_dump(
        dict(sorted(overrides.items())), default_flow_style=False, allow_unicode=True
    )
    path.write_text(header + body, encoding="utf-8")
