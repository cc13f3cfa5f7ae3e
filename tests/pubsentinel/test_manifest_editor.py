"""Tests for the manifest editor engine (pure line-buffer edits)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from pubsentinel.engines.manifest_editor import (
    ChangeAction,
    DependencyChange,
    ManifestEditor,
    SectionInfo,
    apply_changes,
    find_block_extent,
    find_section,
    iter_entries,
    read_manifest_text,
    write_manifest_text,
)
from pubsentinel.engines.manifest_editor.editor import TRACKED_SECTIONS
from pubsentinel.engines.manifest_editor.structure import (
    entries_end,
    indentation,
    is_dependency_line,
)
from pubsentinel.exceptions import ManifestNotFoundError, ManifestWriteError

GIT_MANIFEST = """\
name: git_app

dependencies:
  http: ^1.0.0
  my_pkg:
    git:
      url: https://example.com/my_pkg.git

      ref: main
  zed: ^0.1.0

dev_dependencies:
  lints: ^3.0.0
"""


# ── helpers ──────────────────────────────────────────────────────────────


def _assert_sections_consistent(editor: ManifestEditor) -> None:
    for name in TRACKED_SECTIONS:
        assert editor.sections[name] == find_section(editor.lines, name), name


def _names(editor: ManifestEditor, section_name: str) -> list[str]:
    section = find_section(editor.lines, section_name)
    assert section is not None
    return [name for name, _ in iter_entries(editor.lines, section)]


# ── structure ────────────────────────────────────────────────────────────


class TestStructure:
    def test_indentation_counts_tabs_as_two(self):
        assert indentation("    x") == 4
        assert indentation("\tx") == 2
        assert indentation("\t  x") == 4
        assert indentation("x") == 0

    def test_is_dependency_line(self):
        assert is_dependency_line("  http: ^1.0.0")
        assert is_dependency_line("\thttp: ^1.0.0")
        assert not is_dependency_line("  # http: ^1.0.0")
        assert not is_dependency_line("http: ^1.0.0")
        assert not is_dependency_line("  just text")
        assert not is_dependency_line("")

    def test_find_section(self, sample_manifest: str):
        lines = sample_manifest.split("\n")
        deps = find_section(lines, "dependencies")
        assert deps is not None
        assert lines[deps.start_index] == "dependencies:"
        assert lines[deps.end_index] == ""
        assert lines[deps.end_index + 1] == "dev_dependencies:"

        dev = find_section(lines, "dev_dependencies")
        assert dev is not None
        assert lines[dev.end_index + 1] == "flutter:"

    def test_find_section_absent(self):
        assert find_section(["name: x", ""], "dev_dependencies") is None

    def test_indented_header_is_not_a_section(self):
        lines = ["environment:", "  dependencies:", "    x: 1"]
        assert find_section(lines, "dependencies") is None

    def test_comment_does_not_end_section(self):
        lines = ["dependencies:", "  http: ^1.0.0", "# note:", "  dio: ^5.0.0"]
        section = find_section(lines, "dependencies")
        assert section == SectionInfo("dependencies", 0, 3)

    def test_last_section_runs_to_end(self):
        lines = ["dependencies:", "  http: ^1.0.0", ""]
        assert find_section(lines, "dependencies") == SectionInfo("dependencies", 0, 2)

    def test_block_extent_simple(self):
        lines = ["dependencies:", "  http: ^1.0.0", "  dio: ^5.0.0"]
        assert find_block_extent(lines, 1, 2) == range(1, 2)

    def test_block_extent_nested_with_inner_blank(self):
        lines = GIT_MANIFEST.split("\n")
        start = lines.index("  my_pkg:")
        section = find_section(lines, "dependencies")
        extent = find_block_extent(lines, start, section.end_index)
        assert lines[extent.start] == "  my_pkg:"
        assert lines[extent.stop - 1] == "      ref: main"
        assert "" in lines[extent.start : extent.stop]

    def test_block_extent_excludes_trailing_blank(self):
        lines = ["dependencies:", "  sdk_pkg:", "    sdk: flutter", "", "dev_dependencies:"]
        assert find_block_extent(lines, 1, 3) == range(1, 3)

    def test_iter_entries_skips_nested_keys(self):
        lines = GIT_MANIFEST.split("\n")
        section = find_section(lines, "dependencies")
        assert [name for name, _ in iter_entries(lines, section)] == ["http", "my_pkg", "zed"]

    def test_entries_end(self, sample_manifest: str):
        lines = sample_manifest.split("\n")
        deps = find_section(lines, "dependencies")
        assert lines[entries_end(lines, deps) - 1] == "  provider: ^6.0.0"

    def test_entries_end_empty_section(self):
        lines = ["dependencies:", "", "flutter:"]
        section = find_section(lines, "dependencies")
        assert entries_end(lines, section) == 1

    def test_entries_end_stops_before_column_zero_lines(self, template_manifest: str):
        lines = template_manifest.split("\n")
        dev = find_section(lines, "dev_dependencies")
        end = entries_end(lines, dev)
        assert lines[end - 1] == "  flutter_lints: ^2.0.0"
        assert lines[dev.end_index] == "# The following section is specific to Flutter packages."
        assert end < dev.end_index


# ── ManifestEditor ───────────────────────────────────────────────────────


class TestRemove:
    def test_remove_leaves_everything_else_identical(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        assert editor.remove("dio")
        assert editor.text == sample_manifest.replace("  dio: ^5.0.0\n", "")
        _assert_sections_consistent(editor)

    def test_remove_from_dev(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        assert editor.remove("lints")
        assert "lints" not in editor.text
        assert _names(editor, "dev_dependencies") == ["flutter_test", "yaml"]
        _assert_sections_consistent(editor)

    def test_remove_structured_block(self):
        editor = ManifestEditor.from_text(GIT_MANIFEST)
        assert editor.remove("my_pkg")
        assert editor.text == (
            "name: git_app\n"
            "\n"
            "dependencies:\n"
            "  http: ^1.0.0\n"
            "  zed: ^0.1.0\n"
            "\n"
            "dev_dependencies:\n"
            "  lints: ^3.0.0\n"
        )
        _assert_sections_consistent(editor)

    def test_remove_missing_is_noop(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        assert not editor.remove("not_there")
        assert editor.text == sample_manifest

    def test_nested_key_is_not_a_package(self):
        editor = ManifestEditor.from_text(GIT_MANIFEST)
        assert not editor.remove("git")
        assert not editor.remove("url")
        assert editor.text == GIT_MANIFEST

    def test_prefix_name_does_not_match(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        assert not editor.remove("flutter_")
        assert not editor.remove("prov")
        assert editor.text == sample_manifest

    def test_remove_from_specific_section(self):
        text = "dependencies:\n  yaml: ^3.1.0\n\ndev_dependencies:\n  yaml: ^3.1.0\n"
        editor = ManifestEditor.from_text(text)
        assert editor.remove_from("dev_dependencies", "yaml")
        assert editor.text == "dependencies:\n  yaml: ^3.1.0\n\ndev_dependencies:\n"
        _assert_sections_consistent(editor)

    def test_remove_from_absent_section(self):
        editor = ManifestEditor.from_text("dependencies:\n  http: ^1.0.0\n")
        assert not editor.remove_from("dev_dependencies", "http")


class TestMove:
    def test_move_to_dev_in_alphabetical_position(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        assert editor.move("mockito", "dependencies", "dev_dependencies")
        assert _names(editor, "dependencies") == ["flutter", "dio", "http", "provider"]
        assert _names(editor, "dev_dependencies") == ["flutter_test", "lints", "mockito", "yaml"]
        assert "  mockito: ^5.4.0" in editor.lines
        assert editor.text.endswith("flutter:\n  uses-material-design: true\n")
        _assert_sections_consistent(editor)

    def test_move_keeps_separator_before_next_section(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        assert editor.move("provider", "dependencies", "dev_dependencies")
        dev = editor.sections["dev_dependencies"]
        assert editor.lines[entries_end(editor.lines, dev) - 1] == "  yaml: ^3.1.0"
        assert _names(editor, "dev_dependencies") == ["flutter_test", "lints", "provider", "yaml"]
        # The blank separator before the next section survives.
        index = editor.lines.index("flutter:")
        assert editor.lines[index - 1] == ""

    def test_move_appends_when_nothing_sorts_after(self):
        text = "dependencies:\n  zzz: ^1.0.0\n\ndev_dependencies:\n  lints: ^3.0.0\n\nflutter:\n"
        editor = ManifestEditor.from_text(text)
        assert editor.move("zzz", "dependencies", "dev_dependencies")
        assert editor.text == (
            "dependencies:\n\ndev_dependencies:\n  lints: ^3.0.0\n  zzz: ^1.0.0\n\nflutter:\n"
        )
        _assert_sections_consistent(editor)

    def test_move_lands_after_last_entry_not_trailing_comments(self, template_manifest: str):
        editor = ManifestEditor.from_text(template_manifest)
        assert editor.move("mockito", "dependencies", "dev_dependencies")
        assert editor.text == template_manifest.replace("  mockito: ^5.4.4\n", "").replace(
            "  flutter_lints: ^2.0.0\n", "  flutter_lints: ^2.0.0\n  mockito: ^5.4.4\n"
        )
        _assert_sections_consistent(editor)

    def test_move_stays_above_top_level_key(self):
        text = "dependencies:\n  zzz: ^1.0.0\n\ndev_dependencies:\n  lints: ^3.0.0\npublish_to: none\n"
        editor = ManifestEditor.from_text(text)
        assert editor.move("zzz", "dependencies", "dev_dependencies")
        assert editor.text == (
            "dependencies:\n\ndev_dependencies:\n  lints: ^3.0.0\n  zzz: ^1.0.0\npublish_to: none\n"
        )
        _assert_sections_consistent(editor)

    def test_promote_to_dependencies(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        assert editor.move("yaml", "dev_dependencies", "dependencies")
        assert _names(editor, "dependencies") == [
            "flutter",
            "dio",
            "http",
            "mockito",
            "provider",
            "yaml",
        ]
        assert _names(editor, "dev_dependencies") == ["flutter_test", "lints"]
        _assert_sections_consistent(editor)

    def test_move_structured_block_verbatim(self):
        editor = ManifestEditor.from_text(GIT_MANIFEST)
        assert editor.move("my_pkg", "dependencies", "dev_dependencies")
        assert editor.text == (
            "name: git_app\n"
            "\n"
            "dependencies:\n"
            "  http: ^1.0.0\n"
            "  zed: ^0.1.0\n"
            "\n"
            "dev_dependencies:\n"
            "  lints: ^3.0.0\n"
            "  my_pkg:\n"
            "    git:\n"
            "      url: https://example.com/my_pkg.git\n"
            "\n"
            "      ref: main\n"
        )
        _assert_sections_consistent(editor)

    def test_move_creates_missing_section(self):
        editor = ManifestEditor.from_text("name: x\n\ndependencies:\n  http: ^1.0.0\n  mockito: ^5.0.0\n")
        assert editor.sections["dev_dependencies"] is None
        assert editor.move("mockito", "dependencies", "dev_dependencies")
        assert editor.text == (
            "name: x\n\ndependencies:\n  http: ^1.0.0\n\ndev_dependencies:\n  mockito: ^5.0.0\n"
        )
        _assert_sections_consistent(editor)

    def test_created_section_sits_before_following_section(self):
        text = "dependencies:\n  http: ^1.0.0\n  mockito: ^5.0.0\n\nflutter:\n  uses-material-design: true\n"
        editor = ManifestEditor.from_text(text)
        assert editor.move("mockito", "dependencies", "dev_dependencies")
        assert editor.text == (
            "dependencies:\n"
            "  http: ^1.0.0\n"
            "\n"
            "dev_dependencies:\n"
            "  mockito: ^5.0.0\n"
            "\n"
            "flutter:\n"
            "  uses-material-design: true\n"
        )
        _assert_sections_consistent(editor)

    def test_move_missing_is_noop(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        assert not editor.move("nope", "dependencies", "dev_dependencies")
        assert not editor.move("http", "dev_dependencies", "dependencies")
        assert editor.text == sample_manifest

    def test_move_from_absent_section(self):
        editor = ManifestEditor.from_text("dependencies:\n  http: ^1.0.0\n")
        assert not editor.move("http", "dev_dependencies", "dependencies")


class TestApplyBatch:
    def test_changes_apply_in_order(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        changes = [
            DependencyChange("dio", ChangeAction.REMOVE),
            DependencyChange("mockito", ChangeAction.MOVE_TO_DEV_DEPENDENCIES),
            DependencyChange("yaml", ChangeAction.MOVE_TO_DEPENDENCIES),
            DependencyChange("lints", ChangeAction.REMOVE_FROM_DEV_DEPENDENCIES),
        ]
        applied = editor.apply(changes)
        assert applied == changes
        assert _names(editor, "dependencies") == ["flutter", "http", "provider", "yaml"]
        assert _names(editor, "dev_dependencies") == ["flutter_test", "mockito"]
        _assert_sections_consistent(editor)

    def test_missing_names_are_skipped(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        ok = DependencyChange("dio", ChangeAction.REMOVE)
        applied = editor.apply(
            [
                DependencyChange("ghost", ChangeAction.REMOVE),
                ok,
                DependencyChange("dio", ChangeAction.REMOVE),
                DependencyChange("ghost", ChangeAction.REMOVE_FROM_DEPENDENCIES),
            ]
        )
        assert applied == [ok]

    def test_duplicate_resolution(self):
        text = (
            "dependencies:\n"
            "  yaml: ^3.1.0\n"
            "\n"
            "dev_dependencies:\n"
            "  lints: ^3.0.0\n"
            "  yaml: ^3.1.0\n"
        )
        editor = ManifestEditor.from_text(text)
        editor.apply([DependencyChange("yaml", ChangeAction.REMOVE_FROM_DEV_DEPENDENCIES)])
        assert editor.text == (
            "dependencies:\n  yaml: ^3.1.0\n\ndev_dependencies:\n  lints: ^3.0.0\n"
        )

    def test_sections_tracked_through_long_batch(self, sample_manifest: str):
        editor = ManifestEditor.from_text(sample_manifest)
        for change in [
            DependencyChange("mockito", ChangeAction.MOVE_TO_DEV_DEPENDENCIES),
            DependencyChange("lints", ChangeAction.MOVE_TO_DEPENDENCIES),
            DependencyChange("http", ChangeAction.MOVE_TO_DEV_DEPENDENCIES),
            DependencyChange("flutter_test", ChangeAction.REMOVE),
            DependencyChange("mockito", ChangeAction.MOVE_TO_DEPENDENCIES),
        ]:
            assert editor.apply([change]) == [change]
            _assert_sections_consistent(editor)

    def test_tab_indented_manifest(self):
        text = "dependencies:\n\thttp: ^1.0.0\n\tdio: ^5.0.0\n"
        editor = ManifestEditor.from_text(text)
        assert editor.remove("dio")
        assert editor.text == "dependencies:\n\thttp: ^1.0.0\n"


class TestLineEndings:
    def test_crlf_preserved_on_remove(self):
        text = "dependencies:\r\n  http: ^1.0.0\r\n  dio: ^5.0.0\r\n"
        editor = ManifestEditor.from_text(text)
        assert editor.remove("dio")
        assert editor.text == "dependencies:\r\n  http: ^1.0.0\r\n"

    def test_crlf_used_for_created_section(self):
        text = "dependencies:\r\n  http: ^1.0.0\r\n  mockito: ^5.0.0\r\n"
        editor = ManifestEditor.from_text(text)
        assert editor.move("mockito", "dependencies", "dev_dependencies")
        assert editor.text == (
            "dependencies:\r\n  http: ^1.0.0\r\n\r\ndev_dependencies:\r\n  mockito: ^5.0.0\r\n"
        )

    def test_file_roundtrip_keeps_crlf(self, tmp_path: Path):
        path = tmp_path / "pubspec.yaml"
        path.write_bytes(b"dependencies:\r\n  http: ^1.0.0\r\n  dio: ^5.0.0\r\n")
        applied = apply_changes(path, [DependencyChange("dio", ChangeAction.REMOVE)])
        assert len(applied) == 1
        assert path.read_bytes() == b"dependencies:\r\n  http: ^1.0.0\r\n"


# ── file helpers ─────────────────────────────────────────────────────────


class TestFileHelpers:
    def test_read_missing(self, tmp_path: Path):
        with pytest.raises(ManifestNotFoundError):
            read_manifest_text(tmp_path / "pubspec.yaml")

    def test_apply_changes_writes_file(self, tmp_path: Path, sample_manifest: str):
        path = tmp_path / "pubspec.yaml"
        path.write_text(sample_manifest, encoding="utf-8")
        apply_changes(path, [DependencyChange("dio", ChangeAction.REMOVE)])
        assert "dio" not in path.read_text(encoding="utf-8")

    def test_apply_changes_no_write_when_nothing_applied(self, tmp_path: Path, sample_manifest: str):
        path = tmp_path / "pubspec.yaml"
        path.write_text(sample_manifest, encoding="utf-8")
        with patch("pubsentinel.engines.manifest_editor.editor.write_manifest_text") as writer:
            assert apply_changes(path, [DependencyChange("ghost", ChangeAction.REMOVE)]) == []
        writer.assert_not_called()

    def test_write_failure_raises(self, tmp_path: Path):
        target = tmp_path / "missing_dir" / "pubspec.yaml"
        with pytest.raises(ManifestWriteError):
            write_manifest_text(target, "name: x\n")
