"""BackupService — whole-file safety copies of the manifest."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import structlog

from pubsentinel.core.config import BACKUP_EXTENSION

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BackupInfo:
    path: Path
    size: int
    last_modified: datetime

    @property
    def formatted_size(self) -> str:
        if self.size < 1024:
            return f"{self.size}B"
        if self.size < 1024 * 1024:
            return f"{self.size / 1024:.1f}KB"
        return f"{self.size / (1024 * 1024):.1f}MB"

    def formatted_last_modified(self, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        delta = now - self.last_modified
        seconds = delta.total_seconds()
        if seconds < 60:
            return "Just now"
        if seconds < 3600:
            return f"{int(seconds // 60)}m ago"
        if delta.days < 1:
            return f"{int(seconds // 3600)}h ago"
        if delta.days < 7:
            return f"{delta.days}d ago"
        return f"{self.last_modified.day}/{self.last_modified.month}/{self.last_modified.year}"


class BackupService:
    """Copy the manifest aside before edits and put it back on failure.

    Every operation reports failure through its return value and never
    raises, so callers can abort or roll back without try/except.
    """

    def __init__(self, manifest_path: Path) -> None:
        self.manifest_path = manifest_path
        self.backup_path = manifest_path.with_name(manifest_path.name + BACKUP_EXTENSION)
        self._timestamp_prefix = f"{manifest_path.name}.backup."

    def create_backup(self) -> bool:
        if not self.manifest_path.is_file():
            log.warning("backup.manifest_missing", path=str(self.manifest_path))
            return False
        try:
            shutil.copyfile(self.manifest_path, self.backup_path)
        except OSError as exc:
            log.warning("backup.create_failed", path=str(self.backup_path), error=str(exc))
            return False
        log.debug("backup.created", path=str(self.backup_path))
        return True

    def restore_from_backup(self) -> bool:
        if not self.backup_path.is_file():
            log.warning("backup.not_found", path=str(self.backup_path))
            return False
        try:
            shutil.copyfile(self.backup_path, self.manifest_path)
        except OSError as exc:
            log.error("backup.restore_failed", path=str(self.manifest_path), error=str(exc))
            return False
        log.info("backup.restored", path=str(self.manifest_path))
        return True

    def backup_exists(self) -> bool:
        return self.backup_path.is_file()

    def delete_backup(self) -> bool:
        try:
            self.backup_path.unlink(missing_ok=True)
        except OSError as exc:
            log.warning("backup.delete_failed", path=str(self.backup_path), error=str(exc))
            return False
        return True

    def get_backup_info(self) -> BackupInfo | None:
        try:
            stat = self.backup_path.stat()
        except OSError:
            return None
        return BackupInfo(
            path=self.backup_path,
            size=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    def create_timestamped_backup(self) -> Path | None:
        """Copy the manifest to ``pubspec.yaml.backup.<timestamp>``."""
        if not self.manifest_path.is_file():
            return None
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
        target = self.manifest_path.with_name(f"{self._timestamp_prefix}{stamp}")
        try:
            shutil.copyfile(self.manifest_path, target)
        except OSError as exc:
            log.warning("backup.create_failed", path=str(target), error=str(exc))
            return None
        return target

    def list_backups(self) -> list[Path]:
        """All backups next to the manifest, newest first."""
        directory = self.manifest_path.parent
        try:
            candidates = [
                p
                for p in directory.iterdir()
                if p.is_file()
                and (p.name == self.backup_path.name or p.name.startswith(self._timestamp_prefix))
            ]
        except OSError:
            return []
        return sorted(candidates, key=lambda p: p.stat().st_mtime, reverse=True)
