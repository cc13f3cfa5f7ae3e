"""ManifestEditor — apply dependency changes to the raw manifest lines."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

import structlog

from pubsentinel.core.config import DEPENDENCIES_SECTION, DEV_DEPENDENCIES_SECTION
from pubsentinel.engines.manifest_editor.models import (
    ChangeAction,
    DependencyChange,
    SectionInfo,
)
from pubsentinel.engines.manifest_editor.structure import (
    entries_end,
    find_section,
    iter_entries,
    locate_entry,
)
from pubsentinel.exceptions import ManifestNotFoundError, ManifestWriteError

log = structlog.get_logger("pubsentinel.engine")

TRACKED_SECTIONS = (DEPENDENCIES_SECTION, DEV_DEPENDENCIES_SECTION)


class ManifestEditor:
    """Surgical editor over a mutable list of manifest lines.

    Only the lines of the affected declarations are touched. The editor keeps
    one :class:`SectionInfo` per tracked section and shifts it by the exact
    delta of every insertion and removal, so each change in a batch sees the
    current layout. Creating a section re-derives all of them from the buffer.
    """

    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.sections: dict[str, SectionInfo | None] = {}
        self._eol = "\r" if any(line.endswith("\r") for line in lines) else ""
        self._rescan_sections()

    @classmethod
    def from_text(cls, text: str) -> ManifestEditor:
        return cls(text.split("\n"))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    # ── batch ────────────────────────────────────────────────────────────

    def apply(self, changes: Iterable[DependencyChange]) -> list[DependencyChange]:
        """Apply *changes* strictly in order; return the ones that took effect.

        A change whose package cannot be located is a no-op.
        """
        handlers: dict[ChangeAction, Callable[[str], bool]] = {
            ChangeAction.REMOVE: self.remove,
            ChangeAction.MOVE_TO_DEV_DEPENDENCIES: lambda name: self.move(
                name, DEPENDENCIES_SECTION, DEV_DEPENDENCIES_SECTION
            ),
            ChangeAction.MOVE_TO_DEPENDENCIES: lambda name: self.move(
                name, DEV_DEPENDENCIES_SECTION, DEPENDENCIES_SECTION
            ),
            ChangeAction.REMOVE_FROM_DEPENDENCIES: lambda name: self.remove_from(
                DEPENDENCIES_SECTION, name
            ),
            ChangeAction.REMOVE_FROM_DEV_DEPENDENCIES: lambda name: self.remove_from(
                DEV_DEPENDENCIES_SECTION, name
            ),
        }

        applied: list[DependencyChange] = []
        for change in changes:
            if handlers[change.action](change.package_name):
                applied.append(change)
            else:
                log.debug(
                    "editor.change_skipped",
                    package=change.package_name,
                    action=change.action.value,
                )
        return applied

    # ── operations ───────────────────────────────────────────────────────

    def remove(self, package_name: str) -> bool:
        """Remove *package_name* from whichever tracked section declares it."""
        removed = False
        for section_name in TRACKED_SECTIONS:
            removed = self.remove_from(section_name, package_name) or removed
        return removed

    def remove_from(self, section_name: str, package_name: str) -> bool:
        section = self.sections.get(section_name)
        if section is None:
            return False
        extent = locate_entry(self.lines, section, package_name)
        if extent is None:
            return False
        self._delete(extent, section)
        log.debug(
            "editor.dependency_removed",
            package=package_name,
            section=section_name,
            lines=len(extent),
        )
        return True

    def move(self, package_name: str, from_section: str, to_section: str) -> bool:
        """Move the whole declaration block of *package_name* between sections.

        The block lands before the first top-level entry of the target that
        sorts after *package_name*, or right after the target's last entry.
        A missing target section is created right after the source section.
        """
        source = self.sections.get(from_section)
        if source is None:
            return False
        extent = locate_entry(self.lines, source, package_name)
        if extent is None:
            return False

        block = self.lines[extent.start : extent.stop]
        self._delete(extent, source)

        target = self.sections.get(to_section)
        if target is None:
            target = self._create_section(to_section, after=source)

        insert_at = self._insertion_index(target, package_name)
        self._insert(insert_at, block, target)
        log.debug(
            "editor.dependency_moved",
            package=package_name,
            source=from_section,
            target=to_section,
            lines=len(block),
        )
        return True

    # ── internals ────────────────────────────────────────────────────────

    def _insertion_index(self, section: SectionInfo, package_name: str) -> int:
        for name, extent in iter_entries(self.lines, section):
            if package_name < name:
                return extent.start
        return entries_end(self.lines, section)

    def _delete(self, extent: range, owner: SectionInfo) -> None:
        # Reverse order keeps the remaining indices valid.
        for index in reversed(extent):
            del self.lines[index]
        self._shift(extent.start, -len(extent), owner)

    def _insert(self, index: int, block: list[str], owner: SectionInfo) -> None:
        for offset, line in enumerate(block):
            self.lines.insert(index + offset, line)
        self._shift(index, len(block), owner)

    def _shift(self, position: int, delta: int, owner: SectionInfo) -> None:
        owner.end_index += delta
        for section in self.sections.values():
            if section is None or section is owner:
                continue
            if section.start_index >= position:
                section.start_index += delta
                section.end_index += delta

    def _create_section(self, section_name: str, after: SectionInfo | None) -> SectionInfo:
        header = [self._eol, f"{section_name}:{self._eol}"]
        if after is not None:
            index = entries_end(self.lines, after)
        elif self.lines and self.lines[-1] == "":
            # Keep the file's trailing newline after the new header.
            index = len(self.lines) - 1
        else:
            index = len(self.lines)

        self.lines[index:index] = header
        self._rescan_sections()
        log.info("editor.section_created", section=section_name, line=index + 1)

        created = self.sections[section_name]
        assert created is not None
        return created

    def _rescan_sections(self) -> None:
        self.sections = {name: find_section(self.lines, name) for name in TRACKED_SECTIONS}


def read_manifest_text(manifest_path: Path) -> str:
    """Read the manifest verbatim (no newline translation)."""
    if not manifest_path.is_file():
        raise ManifestNotFoundError(manifest_path)
    with manifest_path.open(encoding="utf-8", newline="") as fh:
        return fh.read()


def write_manifest_text(manifest_path: Path, text: str) -> None:
    try:
        with manifest_path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text)
    except OSError as exc:
        raise ManifestWriteError(f"cannot write {manifest_path}: {exc}") from exc


def apply_changes(manifest_path: Path, changes: list[DependencyChange]) -> list[DependencyChange]:
    """Read, edit and write back *manifest_path*; return the applied changes.

    Raises :class:`ManifestWriteError` if the write fails. Restoring the
    original file is the caller's job (see ``BackupService``).
    """
    editor = ManifestEditor.from_text(read_manifest_text(manifest_path))
    applied = editor.apply(changes)
    if applied:
        write_manifest_text(manifest_path, editor.text)
    log.info("editor.applied", path=str(manifest_path), requested=len(changes), applied=len(applied))
    return applied
