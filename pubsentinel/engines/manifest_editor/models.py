"""Data models for the manifest editor engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class SectionInfo:
    """Live pointer into the editor's line buffer.

    Both indices are inclusive. The editor adjusts them in place after every
    insertion or removal so they always match what :func:`find_section`
    would report for the current buffer.
    """

    name: str
    start_index: int
    end_index: int


class ChangeAction(str, Enum):
    REMOVE = "remove"
    MOVE_TO_DEV_DEPENDENCIES = "move_to_dev_dependencies"
    MOVE_TO_DEPENDENCIES = "move_to_dependencies"
    REMOVE_FROM_DEPENDENCIES = "remove_from_dependencies"
    REMOVE_FROM_DEV_DEPENDENCIES = "remove_from_dev_dependencies"


@dataclass(frozen=True)
class DependencyChange:
    """A single requested edit, applied once and in list order."""

    package_name: str
    action: ChangeAction
    version: str | None = None
