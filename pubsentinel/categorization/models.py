"""Data models for package categorization and grouping."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pubsentinel.categorization.heuristics import choose_primary_category
from pubsentinel.engines.classifier.models import DependencyInfo


@dataclass(frozen=True)
class PackageCategory:
    name: str
    categories: list[str]
    primary_category: str
    source: str  # cache | remote | heuristic
    confidence: float
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "categories": list(self.categories),
            "primaryCategory": self.primary_category,
            "source": self.source,
            "confidence": self.confidence,
            "fetchedAt": self.fetched_at.isoformat(),
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> PackageCategory:
        """Build from the cache / API shape. Raises KeyError/ValueError/TypeError."""
        raw_fetched = data.get("fetchedAt")
        fetched_at = (
            datetime.fromisoformat(raw_fetched) if raw_fetched else datetime.now(timezone.utc)
        )
        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)
        categories = [str(c) for c in data["categories"]]
        return cls(
            name=str(data["name"]),
            categories=categories,
            primary_category=str(
                data.get("primaryCategory") or choose_primary_category(categories)
            ),
            source=str(data.get("source", "remote")),
            confidence=float(data.get("confidence", 0.9)),
            fetched_at=fetched_at,
        )


@dataclass
class GroupedDependencies:
    grouped: dict[str, list[DependencyInfo]] = field(default_factory=dict)
    category_order: list[str] = field(default_factory=list)

    @property
    def total_packages(self) -> int:
        return sum(len(deps) for deps in self.grouped.values())

    @property
    def category_count(self) -> int:
        return len(self.grouped)
