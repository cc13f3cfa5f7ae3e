"""Name-based category guesses, the last tier of the retrieval chain."""

from __future__ import annotations

from pubsentinel.core.config import CATEGORY_PRIORITY, DEFAULT_CATEGORY

# (category, exact names, substrings, prefixes, suffixes); first match wins.
_RULES: tuple[tuple[str, frozenset[str], tuple[str, ...], tuple[str, ...], tuple[str, ...]], ...] = (
    (
        "UI Components",
        frozenset({"cached_network_image", "flutter_svg"}),
        ("widget", "icon", "animation", "carousel", "shimmer", "lottie"),
        ("ui_",),
        ("_ui",),
    ),
    (
        "State Management",
        frozenset(),
        ("bloc", "provider", "riverpod", "redux", "mobx", "get"),
        (),
        (),
    ),
    (
        "Database",
        frozenset(),
        ("sqflite", "hive", "shared_preferences", "path_provider", "database", "storage"),
        (),
        (),
    ),
    ("Testing", frozenset(), ("test", "mock", "fake"), (), ()),
    (
        "Development Tools",
        frozenset(),
        ("build_runner", "json_serializable", "freezed", "lint", "analysis"),
        (),
        (),
    ),
    (
        "Networking",
        frozenset(),
        ("http", "dio", "network", "api", "rest", "graphql"),
        (),
        (),
    ),
)


def infer_category(package_name: str) -> str:
    """Guess a category from the package name alone."""
    name = package_name.lower()
    for category, exact, substrings, prefixes, suffixes in _RULES:
        if (
            name in exact
            or any(part in name for part in substrings)
            or (prefixes and name.startswith(prefixes))
            or (suffixes and name.endswith(suffixes))
        ):
            return category
    return "Utilities"


def choose_primary_category(categories: list[str]) -> str:
    """Highest-priority category in *categories*, else the first one."""
    if not categories:
        return DEFAULT_CATEGORY
    for priority in CATEGORY_PRIORITY:
        if priority in categories:
            return priority
    return categories[0]


def category_sort_key(category: str) -> tuple[int, str]:
    """Known categories by priority, then unknown ones alphabetically."""
    try:
        return (CATEGORY_PRIORITY.index(category), "")
    except ValueError:
        return (len(CATEGORY_PRIORITY), category)
