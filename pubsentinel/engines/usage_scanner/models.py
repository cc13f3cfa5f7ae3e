"""Data models for the usage scanner engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SourceRole(str, Enum):
    """Which source directory a file lives in."""

    LIB = "lib"
    TEST = "test"
    BIN = "bin"
    TOOL = "tool"


@dataclass
class PackageUsage:
    """Mutable accumulator: where a single package is imported.

    ``used_elsewhere`` records imports from files outside the four
    recognised roots. It is informational only and never affects status.
    """

    package_name: str
    used_in_lib: bool = False
    used_in_test: bool = False
    used_in_bin: bool = False
    used_in_tool: bool = False
    used_elsewhere: bool = False

    @property
    def is_used(self) -> bool:
        return self.used_in_lib or self.used_in_test or self.used_in_bin or self.used_in_tool

    def mark(self, role: SourceRole | None) -> None:
        """OR the flag for *role* into this record (``None`` = unrecognised root)."""
        if role is SourceRole.LIB:
            self.used_in_lib = True
        elif role is SourceRole.TEST:
            self.used_in_test = True
        elif role is SourceRole.BIN:
            self.used_in_bin = True
        elif role is SourceRole.TOOL:
            self.used_in_tool = True
        else:
            self.used_elsewhere = True

    def merge(self, other: PackageUsage) -> None:
        """OR another record for the same package into this one."""
        self.used_in_lib |= other.used_in_lib
        self.used_in_test |= other.used_in_test
        self.used_in_bin |= other.used_in_bin
        self.used_in_tool |= other.used_in_tool
        self.used_elsewhere |= other.used_elsewhere

    @property
    def locations(self) -> list[str]:
        locations: list[str] = []
        if self.used_in_lib:
            locations.append("lib")
        if self.used_in_test:
            locations.append("test")
        if self.used_in_bin:
            locations.append("bin")
        if self.used_in_tool:
            locations.append("tool")
        return locations

    @property
    def description(self) -> str:
        locations = self.locations
        if not locations:
            return "unused"
        return f"used in {', '.join(locations)}"
