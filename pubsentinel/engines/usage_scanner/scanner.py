"""Walk the source roots and record which packages each role imports."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

import structlog

from pubsentinel.core.config import IMPORT_PATTERN, SCAN_DIRECTORIES, SOURCE_EXTENSION
from pubsentinel.engines.usage_scanner.models import PackageUsage, SourceRole

log = structlog.get_logger("pubsentinel.engine")

_IMPORT_RE = re.compile(IMPORT_PATTERN)


def role_for_path(relative_path: str) -> SourceRole | None:
    """Map a project-relative path to the role of the root containing it.

    Accepts both the native separator and ``/``. Returns ``None`` for files
    outside ``lib``, ``test``, ``bin`` and ``tool``.
    """
    for role in SourceRole:
        if relative_path.startswith((f"{role.value}{os.sep}", f"{role.value}/")):
            return role
    return None


def extract_imports(content: str, pattern: re.Pattern[str] = _IMPORT_RE) -> set[str]:
    """Return the distinct package names imported by *content*."""
    return {m.group(1) for m in pattern.finditer(content) if m.group(1)}


def scan_usage(
    project_root: Path,
    roots: Iterable[str] = SCAN_DIRECTORIES,
    extension: str = SOURCE_EXTENSION,
    pattern: str = IMPORT_PATTERN,
) -> dict[str, PackageUsage]:
    """Scan every *extension* file under *roots* and build the usage map.

    Missing roots are skipped. A file that cannot be read or decoded is
    logged and skipped; the rest of the walk continues.
    """
    import_re = re.compile(pattern)
    usage_map: dict[str, PackageUsage] = {}
    scanned = 0

    for file_path in _iter_source_files(project_root, roots, extension):
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("scanner.file_skipped", path=str(file_path), error=str(exc))
            continue

        scanned += 1
        relative = file_path.relative_to(project_root).as_posix()
        role = role_for_path(relative)

        for package_name in extract_imports(content, import_re):
            usage = usage_map.get(package_name)
            if usage is None:
                usage = usage_map[package_name] = PackageUsage(package_name=package_name)
            usage.mark(role)
            if role is None:
                log.info(
                    "scanner.unrecognised_root",
                    package=package_name,
                    path=relative,
                )

    log.debug("scanner.done", files=scanned, packages=len(usage_map))
    return usage_map


def _iter_source_files(
    project_root: Path, roots: Iterable[str], extension: str
) -> Iterator[Path]:
    seen: set[Path] = set()
    for root in roots:
        directory = project_root / root
        if not directory.is_dir():
            continue
        for hit in sorted(directory.rglob(f"*{extension}")):
            if hit.is_file() and hit not in seen:
                seen.add(hit)
                yield hit
