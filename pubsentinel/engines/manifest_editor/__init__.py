"""Manifest editor engine — structure-preserving edits to pubspec.yaml."""

from pubsentinel.engines.manifest_editor.editor import (
    ManifestEditor,
    apply_changes,
    read_manifest_text,
    write_manifest_text,
)
from pubsentinel.engines.manifest_editor.models import (
    ChangeAction,
    DependencyChange,
    SectionInfo,
)
from pubsentinel.engines.manifest_editor.structure import (
    find_block_extent,
    find_section,
    iter_entries,
)

__all__ = [
    "ChangeAction",
    "DependencyChange",
    "ManifestEditor",
    "SectionInfo",
    "apply_changes",
    "find_block_extent",
    "find_section",
    "iter_entries",
    "read_manifest_text",
    "write_manifest_text",
]
