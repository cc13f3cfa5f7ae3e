"""CategoryCache — user-level JSON cache of package categories."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import structlog

from pubsentinel.categorization.models import PackageCategory
from pubsentinel.core.config import CACHE_FILE_NAME, cache_dir, cache_ttl_days

log = structlog.get_logger(__name__)


class CategoryCache:
    """Read-through cache backed by one JSON file.

    Loading a missing or corrupt file yields an empty cache and writes are
    best-effort; the cache never raises to its caller.
    """

    def __init__(self, path: Path | None = None, ttl_days: int | None = None) -> None:
        self.path = path or cache_dir() / CACHE_FILE_NAME
        self.ttl = timedelta(days=ttl_days if ttl_days is not None else cache_ttl_days())
        self._entries: dict[str, PackageCategory] = {}

    def load(self) -> None:
        self._entries = {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, ValueError) as exc:
            log.warning("cache.load_failed", path=str(self.path), error=str(exc))
            return
        if not isinstance(raw, dict):
            return

        for name, data in raw.items():
            if not isinstance(data, dict):
                continue
            try:
                self._entries[name] = PackageCategory.from_json(data)
            except (KeyError, ValueError, TypeError, IndexError):
                log.debug("cache.entry_dropped", package=name)

    def get(self, package_name: str) -> PackageCategory | None:
        return self._entries.get(package_name)

    def get_valid(self, package_name: str, now: datetime | None = None) -> PackageCategory | None:
        entry = self._entries.get(package_name)
        if entry is not None and self.is_valid(entry, now):
            return entry
        return None

    def is_valid(self, category: PackageCategory, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - category.fetched_at < self.ttl

    @property
    def keys(self) -> list[str]:
        return list(self._entries)

    def save(self, package_name: str, category: PackageCategory) -> None:
        self._entries[package_name] = category
        self._write()

    def clear(self) -> None:
        self._entries = {}
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            log.warning("cache.clear_failed", path=str(self.path), error=str(exc))

    def _write(self) -> None:
        payload = {name: entry.to_json() for name, entry in self._entries.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            log.debug("cache.write_failed", path=str(self.path), error=str(exc))
