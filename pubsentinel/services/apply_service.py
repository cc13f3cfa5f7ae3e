"""ApplyService — turn an analysis into manifest edits, with backup and rollback."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from pubsentinel.engines.classifier.models import AnalysisResult, DependencySection
from pubsentinel.engines.manifest_editor.editor import apply_changes
from pubsentinel.engines.manifest_editor.models import ChangeAction, DependencyChange
from pubsentinel.exceptions import PubSentinelError
from pubsentinel.services.backup_service import BackupService

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PlannedChange:
    """An editor change plus the text shown to the user for it."""

    change: DependencyChange
    description: str
    question: str


@dataclass
class ApplyResult:
    success: bool
    changes: list[str] = field(default_factory=list)
    error: str | None = None
    backup_created: bool = False

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)

    @property
    def change_count(self) -> int:
        return len(self.changes)


def derive_changes(result: AnalysisResult) -> list[PlannedChange]:
    """Ordered change list for everything the analysis flagged.

    Order: unused removals, moves to dev_dependencies, moves to dependencies,
    then duplicate resolutions. A duplicated name is handled only by its
    duplicate resolution so two changes never fight over the same entry.
    """
    duplicated = {dup.name for dup in result.duplicates}
    planned: list[PlannedChange] = []

    for dep in result.unused_dependencies:
        if dep.name in duplicated:
            continue
        planned.append(
            PlannedChange(
                change=DependencyChange(dep.name, ChangeAction.REMOVE, dep.version),
                description=f"Removed unused dependency: {dep.name}",
                question=f"{dep.name}: unused dependency. Remove it?",
            )
        )

    for dep in result.misplaced_dependencies:
        if dep.name in duplicated:
            continue
        planned.append(
            PlannedChange(
                change=DependencyChange(dep.name, ChangeAction.MOVE_TO_DEV_DEPENDENCIES, dep.version),
                description=f"Moved to dev_dependencies: {dep.name}",
                question=f"{dep.name}: {dep.usage_description}. Move to dev_dependencies?",
            )
        )

    for dep in result.promotable_dependencies:
        if dep.name in duplicated:
            continue
        planned.append(
            PlannedChange(
                change=DependencyChange(dep.name, ChangeAction.MOVE_TO_DEPENDENCIES, dep.version),
                description=f"Moved to dependencies: {dep.name}",
                question=f"{dep.name}: {dep.usage_description}. Move to dependencies?",
            )
        )

    for dup in result.duplicates:
        versions = (
            f" (versions: {dup.dependencies_version} vs {dup.dev_dependencies_version})"
            if dup.has_version_conflict
            else ""
        )
        if dup.recommended_section is DependencySection.DEPENDENCIES:
            action = ChangeAction.REMOVE_FROM_DEV_DEPENDENCIES
            description = f"Removed duplicate from dev_dependencies: {dup.name}"
        else:
            action = ChangeAction.REMOVE_FROM_DEPENDENCIES
            description = f"Removed duplicate from dependencies: {dup.name}"
        planned.append(
            PlannedChange(
                change=DependencyChange(dup.name, action),
                description=description,
                question=f"{dup.name}{versions}: duplicate. {dup.recommendation_message}?",
            )
        )

    return planned


def preview_changes(result: AnalysisResult) -> list[str]:
    """Describe what :meth:`ApplyService.apply_fixes` would do."""
    return [
        planned.description.replace("Removed", "Would remove", 1).replace("Moved", "Would move", 1)
        for planned in derive_changes(result)
    ]


class ApplyService:
    """Apply derived changes to the manifest behind a whole-file backup."""

    def __init__(self, manifest_path: Path, backup_service: BackupService | None = None) -> None:
        self.manifest_path = manifest_path
        self.backup_service = backup_service or BackupService(manifest_path)

    def apply_fixes(self, result: AnalysisResult) -> ApplyResult:
        """Apply every recommended change."""
        return self._apply(derive_changes(result))

    def apply_interactive(
        self, result: AnalysisResult, prompt: Callable[[str], bool]
    ) -> ApplyResult:
        """Ask *prompt* about each change and apply only the accepted ones."""
        accepted = [planned for planned in derive_changes(result) if prompt(planned.question)]
        return self._apply(accepted)

    def _apply(self, planned: list[PlannedChange]) -> ApplyResult:
        if not planned:
            return ApplyResult(success=True)

        if not self.backup_service.create_backup():
            return ApplyResult(success=False, error="Failed to create backup")

        try:
            applied = apply_changes(self.manifest_path, [p.change for p in planned])
        except (PubSentinelError, OSError) as exc:
            log.error("apply.failed", path=str(self.manifest_path), error=str(exc))
            restored = self.backup_service.restore_from_backup()
            suffix = "backup restored" if restored else "backup could NOT be restored"
            return ApplyResult(
                success=False,
                error=f"Failed to apply changes ({exc}) - {suffix}",
                backup_created=True,
            )

        applied_set = set(applied)
        descriptions = [p.description for p in planned if p.change in applied_set]
        log.info("apply.done", requested=len(planned), applied=len(descriptions))
        return ApplyResult(success=True, changes=descriptions, backup_created=True)
