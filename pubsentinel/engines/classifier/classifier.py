"""Classify declared dependencies against the source usage map."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

import structlog

from pubsentinel.core.config import MANIFEST_FILE, SCAN_DIRECTORIES, SDK_PACKAGE, SOURCE_EXTENSION
from pubsentinel.engines.classifier.manifest import read_declared_dependencies
from pubsentinel.engines.classifier.models import (
    AnalysisResult,
    DeclaredDependency,
    DependencyInfo,
    DependencySection,
    DependencyStatus,
    DuplicateDependency,
)
from pubsentinel.engines.manifest_editor.editor import read_manifest_text
from pubsentinel.engines.usage_scanner.models import PackageUsage
from pubsentinel.engines.usage_scanner.scanner import scan_usage

log = structlog.get_logger("pubsentinel.engine")


def dependency_status(usage: PackageUsage | None) -> DependencyStatus:
    """Status of a package declared under ``dependencies``."""
    if usage is None:
        return DependencyStatus.UNUSED
    if usage.used_in_lib or usage.used_in_bin:
        return DependencyStatus.USED
    if usage.used_in_test or usage.used_in_tool:
        return DependencyStatus.TEST_ONLY
    return DependencyStatus.UNUSED


def dev_dependency_status(usage: PackageUsage | None) -> DependencyStatus:
    """Status of a package declared under ``dev_dependencies``.

    Dev dependencies are never reported unused: build tools and linters are
    rarely imported. TEST_ONLY here means "imported from lib/ or bin/, move
    it to dependencies".
    """
    if usage is not None and (usage.used_in_lib or usage.used_in_bin):
        return DependencyStatus.TEST_ONLY
    return DependencyStatus.USED


def recommended_section(usage: PackageUsage | None) -> DependencySection:
    """Where a package declared in both sections should stay."""
    if usage is not None and usage.used_in_lib:
        return DependencySection.DEPENDENCIES
    return DependencySection.DEV_DEPENDENCIES


def classify(
    dependencies: Iterable[DeclaredDependency],
    dev_dependencies: Iterable[DeclaredDependency],
    usage_map: dict[str, PackageUsage],
    sdk_package: str = SDK_PACKAGE,
) -> AnalysisResult:
    """Combine declarations and usage into an :class:`AnalysisResult`."""
    primary = [dep for dep in dependencies if dep.name != sdk_package]
    dev = [dep for dep in dev_dependencies if dep.name != sdk_package]

    results: list[DependencyInfo] = []
    for dep in primary:
        results.append(_info(dep, usage_map.get(dep.name), dependency_status))
    for dep in dev:
        results.append(_info(dep, usage_map.get(dep.name), dev_dependency_status))

    dev_by_name = {dep.name: dep for dep in dev}
    duplicates: list[DuplicateDependency] = []
    for dep in primary:
        dev_dep = dev_by_name.get(dep.name)
        if dev_dep is None:
            continue
        usage = usage_map.get(dep.name)
        duplicates.append(
            DuplicateDependency(
                name=dep.name,
                dependencies_version=dep.version,
                dev_dependencies_version=dev_dep.version,
                recommended_section=recommended_section(usage),
                usage=usage,
            )
        )

    return AnalysisResult(dependencies=results, duplicates=duplicates)


def _info(
    dep: DeclaredDependency,
    usage: PackageUsage | None,
    rule: Callable[[PackageUsage | None], DependencyStatus],
) -> DependencyInfo:
    return DependencyInfo(
        name=dep.name,
        version=dep.version,
        section=dep.section,
        status=rule(usage),
        used_in_lib=usage.used_in_lib if usage else False,
        used_in_test=usage.used_in_test if usage else False,
        used_in_bin=usage.used_in_bin if usage else False,
        used_in_tool=usage.used_in_tool if usage else False,
    )


class DependencyAnalyzer:
    """Full pass: read manifest -> scan sources -> classify."""

    def __init__(
        self,
        project_root: Path,
        manifest_file: str = MANIFEST_FILE,
        scan_directories: Iterable[str] = SCAN_DIRECTORIES,
        extension: str = SOURCE_EXTENSION,
    ) -> None:
        self.project_root = project_root
        self.manifest_path = project_root / manifest_file
        self._scan_directories = tuple(scan_directories)
        self._extension = extension

    def analyze(self) -> AnalysisResult:
        """Run one analysis pass.

        Raises :class:`~pubsentinel.exceptions.ManifestNotFoundError` when the
        manifest is missing.
        """
        text = read_manifest_text(self.manifest_path)
        dependencies, dev_dependencies = read_declared_dependencies(text)
        usage_map = scan_usage(self.project_root, self._scan_directories, self._extension)
        result = classify(dependencies, dev_dependencies, usage_map)
        log.info(
            "analyzer.done",
            declared=result.total_scanned,
            unused=len(result.unused_dependencies),
            misplaced=len(result.misplaced_dependencies),
            duplicates=len(result.duplicates),
        )
        return result
