"""Dependency classifier engine — status per declaration plus duplicates."""

from pubsentinel.engines.classifier.classifier import DependencyAnalyzer, classify
from pubsentinel.engines.classifier.manifest import read_declared_dependencies
from pubsentinel.engines.classifier.models import (
    AnalysisResult,
    DeclaredDependency,
    DependencyInfo,
    DependencySection,
    DependencyStatus,
    DuplicateDependency,
    SimpleVersion,
    StructuredSpec,
)

__all__ = [
    "AnalysisResult",
    "DeclaredDependency",
    "DependencyAnalyzer",
    "DependencyInfo",
    "DependencySection",
    "DependencyStatus",
    "DuplicateDependency",
    "SimpleVersion",
    "StructuredSpec",
    "classify",
    "read_declared_dependencies",
]
