"""Shared constants and environment-backed settings."""

from __future__ import annotations

import os
from pathlib import Path

# ── manifest ─────────────────────────────────────────────────────────────

MANIFEST_FILE = "pubspec.yaml"
BACKUP_EXTENSION = ".bak"
BACKUP_FILE = f"{MANIFEST_FILE}{BACKUP_EXTENSION}"
GROUP_OVERRIDES_FILE = "group-overrides.yaml"

DEPENDENCIES_SECTION = "dependencies"
DEV_DEPENDENCIES_SECTION = "dev_dependencies"

# Pseudo-package for the SDK itself; never analysed.
SDK_PACKAGE = "flutter"

# ── usage scanning ───────────────────────────────────────────────────────

SCAN_DIRECTORIES: tuple[str, ...] = ("lib/", "test/", "bin/", "tool/")
SOURCE_EXTENSION = ".dart"
IMPORT_PATTERN = r"""import\s+['"]package:([^/'"]+)"""

# ── categorization ───────────────────────────────────────────────────────

CACHE_FILE_NAME = "package_categories.json"
DEFAULT_CATEGORY = "Miscellaneous"

CATEGORY_PRIORITY: tuple[str, ...] = (
    "State Management",
    "Networking",
    "HTTP Clients",
    "Database",
    "Storage",
    "UI Components",
    "Widgets",
    "Navigation",
    "Authentication",
    "Firebase",
    "Animation",
    "Charts",
    "Forms",
    "Maps",
    "Camera",
    "Image Processing",
    "Audio",
    "Video",
    "Testing",
    "Development Tools",
    "Utilities",
    "Miscellaneous",
)


def _env_float(key: str, default: float) -> float:
    return float(os.environ.get(key, default))


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


def cache_dir() -> Path:
    """User-level cache directory (``PUBSENTINEL_CACHE_DIR`` overrides)."""
    override = os.environ.get("PUBSENTINEL_CACHE_DIR")
    if override:
        return Path(override)
    return Path.home() / ".pubsentinel" / "cache"


def cache_ttl_days() -> int:
    return _env_int("PUBSENTINEL_CACHE_TTL_DAYS", 7)


def category_api_url() -> str | None:
    """Base URL of the shared category service; ``None`` disables the remote tier."""
    url = os.environ.get("PUBSENTINEL_CATEGORY_API_URL", "").strip()
    return url.rstrip("/") or None


def http_timeout() -> float:
    return _env_float("PUBSENTINEL_HTTP_TIMEOUT", 5.0)
