"""Data models for the dependency classifier engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import yaml

from pubsentinel.engines.usage_scanner.models import PackageUsage


class DependencySection(str, Enum):
    DEPENDENCIES = "dependencies"
    DEV_DEPENDENCIES = "dev_dependencies"

    @property
    def display_name(self) -> str:
        return self.value


class DependencyStatus(str, Enum):
    USED = "used"
    TEST_ONLY = "test_only"  # in dev_dependencies: "used by lib/bin, move to dependencies"
    UNUSED = "unused"

    @property
    def display_name(self) -> str:
        return {
            DependencyStatus.USED: "Used",
            DependencyStatus.TEST_ONLY: "Test Only",
            DependencyStatus.UNUSED: "Unused",
        }[self]


@dataclass(frozen=True)
class SimpleVersion:
    """A plain version constraint such as ``^5.0.0`` (``None`` = any)."""

    text: str | None

    def __str__(self) -> str:
        return self.text if self.text is not None else "any"


@dataclass(frozen=True)
class StructuredSpec:
    """A nested mapping spec (git, path, sdk, hosted …) and its raw lines."""

    value: dict[str, Any]
    lines: tuple[str, ...] = ()

    def __str__(self) -> str:
        return yaml.safe_dump(self.value, default_flow_style=True, sort_keys=False).strip()


VersionSpec = SimpleVersion | StructuredSpec


@dataclass(frozen=True)
class DeclaredDependency:
    name: str
    spec: VersionSpec
    section: DependencySection

    @property
    def version(self) -> str:
        return str(self.spec)


@dataclass(frozen=True)
class DependencyInfo:
    """Classification of one declared dependency for one analysis pass."""

    name: str
    version: str
    section: DependencySection
    status: DependencyStatus
    used_in_lib: bool = False
    used_in_test: bool = False
    used_in_bin: bool = False
    used_in_tool: bool = False

    @property
    def usage_description(self) -> str:
        locations = [
            role
            for role, flag in (
                ("lib", self.used_in_lib),
                ("test", self.used_in_test),
                ("bin", self.used_in_bin),
                ("tool", self.used_in_tool),
            )
            if flag
        ]
        if not locations:
            return "unused"
        return f"used in {', '.join(locations)}"

    @property
    def recommendation(self) -> str:
        if self.status is DependencyStatus.UNUSED:
            return "Remove (unused)"
        if self.status is DependencyStatus.TEST_ONLY:
            if self.section is DependencySection.DEPENDENCIES:
                return "Move to dev_dependencies"
            return "Move to dependencies"
        if self.section is DependencySection.DEV_DEPENDENCIES:
            return "Keep in dev_dependencies"
        return "Keep in dependencies"

    @property
    def needs_action(self) -> bool:
        return self.status is DependencyStatus.UNUSED or (
            self.status is DependencyStatus.TEST_ONLY
            and self.section is DependencySection.DEPENDENCIES
        )

    @property
    def should_promote(self) -> bool:
        """A dev dependency imported from lib/ or bin/."""
        return (
            self.status is DependencyStatus.TEST_ONLY
            and self.section is DependencySection.DEV_DEPENDENCIES
        )


@dataclass(frozen=True)
class DuplicateDependency:
    """A package declared in both sections at once."""

    name: str
    dependencies_version: str
    dev_dependencies_version: str
    recommended_section: DependencySection
    usage: PackageUsage | None = None

    @property
    def usage_description(self) -> str:
        if self.usage is None:
            return "unused"
        return self.usage.description

    @property
    def recommendation_message(self) -> str:
        return f"Keep in {self.recommended_section.display_name} ({self.usage_description})"

    @property
    def has_version_conflict(self) -> bool:
        return self.dependencies_version != self.dev_dependencies_version


@dataclass
class AnalysisResult:
    dependencies: list[DependencyInfo]
    duplicates: list[DuplicateDependency] = field(default_factory=list)

    @property
    def total_scanned(self) -> int:
        return len(self.dependencies)

    def by_status(self, status: DependencyStatus) -> list[DependencyInfo]:
        return [dep for dep in self.dependencies if dep.status is status]

    @property
    def used_dependencies(self) -> list[DependencyInfo]:
        return self.by_status(DependencyStatus.USED)

    @property
    def test_only_dependencies(self) -> list[DependencyInfo]:
        return self.by_status(DependencyStatus.TEST_ONLY)

    @property
    def unused_dependencies(self) -> list[DependencyInfo]:
        return self.by_status(DependencyStatus.UNUSED)

    @property
    def misplaced_dependencies(self) -> list[DependencyInfo]:
        """Primary-section packages only used from test/ or tool/."""
        return [
            dep
            for dep in self.test_only_dependencies
            if dep.section is DependencySection.DEPENDENCIES
        ]

    @property
    def promotable_dependencies(self) -> list[DependencyInfo]:
        return [dep for dep in self.dependencies if dep.should_promote]

    @property
    def has_issues(self) -> bool:
        return (
            any(dep.needs_action or dep.should_promote for dep in self.dependencies)
            or bool(self.duplicates)
        )

    def for_section(self, section: DependencySection) -> list[DependencyInfo]:
        return [dep for dep in self.dependencies if dep.section is section]
