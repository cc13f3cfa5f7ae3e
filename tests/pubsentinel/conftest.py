"""Shared fixtures for pubsentinel tests (filesystem only, no network)."""

from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_MANIFEST = """\
name: demo_app
description: A demo Flutter application.
version: 1.0.0

environment:
  sdk: '>=3.0.0 <4.0.0'

dependencies:
  flutter:
    sdk: flutter
  dio: ^5.0.0
  http: ^1.1.0
  mockito: ^5.4.0
  provider: ^6.0.0

dev_dependencies:
  flutter_test:
    sdk: flutter
  lints: ^3.0.0
  yaml: ^3.1.0

flutter:
  uses-material-design: true
"""

# Layout produced by `flutter create`: indented notes inside the sections and
# column-0 comments between the last dependency and `flutter:`.
FLUTTER_TEMPLATE_MANIFEST = """\
name: template_app
description: A new Flutter project.
publish_to: 'none'
version: 1.0.0+1

environment:
  sdk: '>=3.0.0 <4.0.0'

dependencies:
  flutter:
    sdk: flutter

  # The following adds the Cupertino Icons font to your application.
  cupertino_icons: ^1.0.2
  mockito: ^5.4.4

dev_dependencies:
  flutter_test:
    sdk: flutter

  # The "flutter_lints" package below contains a set of recommended lints.
  flutter_lints: ^2.0.0

# For information on the generic Dart part of this file, see the
# following page: https://dart.dev/tools/pub/pubspec

# The following section is specific to Flutter packages.
flutter:
  uses-material-design: true
"""


def write_project(root: Path, manifest: str, sources: dict[str, str] | None = None) -> Path:
    """Lay out a pub project: ``pubspec.yaml`` plus ``{relative_path: content}``."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "pubspec.yaml").write_text(manifest, encoding="utf-8")
    for relative, content in (sources or {}).items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def dart_imports(*packages: str) -> str:
    return "".join(f"import 'package:{name}/{name}.dart';\n" for name in packages)


@pytest.fixture
def make_project(tmp_path: Path):
    """Factory: ``make_project(manifest, {relative_path: content}) -> root``."""

    def _make(manifest: str = SAMPLE_MANIFEST, sources: dict[str, str] | None = None) -> Path:
        return write_project(tmp_path / "project", manifest, sources)

    return _make


@pytest.fixture
def imports():
    return dart_imports


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sample_manifest() -> str:
    return SAMPLE_MANIFEST


@pytest.fixture
def template_manifest() -> str:
    return FLUTTER_TEMPLATE_MANIFEST


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """http + provider from lib/, mockito only from test/, dio never imported."""
    return write_project(
        tmp_path / "demo_app",
        SAMPLE_MANIFEST,
        {
            "lib/main.dart": dart_imports("http", "provider"),
            "test/widget_test.dart": dart_imports("mockito", "flutter_test"),
        },
    )


@pytest.fixture(autouse=True)
def _isolated_cache(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PUBSENTINEL_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.delenv("PUBSENTINEL_CATEGORY_API_URL", raising=False)
