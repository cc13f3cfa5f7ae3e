"""Line-level structure detection for pubspec manifests.

These helpers look only at raw text and indentation. They never build a YAML
model, so they work on hand-edited files with comments and odd spacing, and
they are shared by the editor, the manifest reader and the grouping rewrite.
"""

from __future__ import annotations

from collections.abc import Iterator

from pubsentinel.engines.manifest_editor.models import SectionInfo

# A tab counts as two spaces.
_TAB_WIDTH = 2


def indentation(line: str) -> int:
    """Width of the leading whitespace of *line*."""
    width = 0
    for char in line:
        if char == " ":
            width += 1
        elif char == "\t":
            width += _TAB_WIDTH
        else:
            break
    return width


def is_blank(line: str) -> bool:
    return not line.strip()


def is_dependency_line(line: str) -> bool:
    """Indented, non-comment line containing ``:``."""
    trimmed = line.strip()
    return (
        bool(trimmed)
        and not trimmed.startswith("#")
        and ":" in trimmed
        and line.startswith(("  ", "\t"))
    )


def declared_name(line: str) -> str | None:
    """Key declared by a dependency line, or ``None``."""
    trimmed = line.strip()
    colon = trimmed.find(":")
    if colon > 0:
        return trimmed[:colon]
    return None


def declares_package(line: str, package_name: str) -> bool:
    return line.strip().startswith(f"{package_name}:") and is_dependency_line(line)


def is_section_header(line: str, section_name: str) -> bool:
    return line.strip() == f"{section_name}:" and not line.startswith((" ", "\t"))


def _starts_new_section(line: str) -> bool:
    return (
        bool(line)
        and not line.startswith((" ", "\t", "#"))
        and line.strip().endswith(":")
    )


def find_section(lines: list[str], section_name: str) -> SectionInfo | None:
    """Locate ``<section_name>:`` at column 0 and the extent of its body.

    The section runs up to the line before the next zero-indentation,
    non-comment line ending in ``:``, or to the end of the buffer.
    """
    for i, line in enumerate(lines):
        if not is_section_header(line, section_name):
            continue
        end_index = len(lines) - 1
        for j in range(i + 1, len(lines)):
            if _starts_new_section(lines[j]):
                end_index = j - 1
                break
        return SectionInfo(name=section_name, start_index=i, end_index=end_index)
    return None


def find_block_extent(lines: list[str], start_index: int, section_end: int) -> range:
    """Line range of the declaration starting at *start_index*.

    Every following line indented deeper than the declaration belongs to it.
    A blank line is included only when the next non-blank line (within the
    section) is still deeper, i.e. when it sits inside an open nested block;
    a trailing separator is never swallowed. The scan stops at the first
    non-blank line indented at or above the declaration.
    """
    base = indentation(lines[start_index])
    last = min(section_end, len(lines) - 1)
    stop = start_index + 1

    for i in range(start_index + 1, last + 1):
        line = lines[i]
        if not is_blank(line):
            if indentation(line) > base:
                stop = i + 1
                continue
            break

        following = _next_content_index(lines, i + 1, last)
        if following is None or indentation(lines[following]) <= base:
            break
        stop = i + 1

    return range(start_index, stop)


def _next_content_index(lines: list[str], start: int, last: int) -> int | None:
    for j in range(start, last + 1):
        if not is_blank(lines[j]):
            return j
    return None


def iter_entries(lines: list[str], section: SectionInfo) -> Iterator[tuple[str, range]]:
    """Yield ``(name, extent)`` for each top-level declaration in *section*.

    Nested lines (git/path mappings) are consumed with their owner and never
    reported as entries of their own.
    """
    last = min(section.end_index, len(lines) - 1)
    i = section.start_index + 1
    while i <= last:
        line = lines[i]
        if is_dependency_line(line):
            extent = find_block_extent(lines, i, section.end_index)
            name = declared_name(line)
            if name is not None:
                yield name, extent
            i = extent.stop
        else:
            i += 1


def locate_entry(lines: list[str], section: SectionInfo, package_name: str) -> range | None:
    """Extent of *package_name*'s declaration in *section*, if present."""
    for name, extent in iter_entries(lines, section):
        if name == package_name and declares_package(lines[extent.start], package_name):
            return extent
    return None


def entries_end(lines: list[str], section: SectionInfo) -> int:
    """Index just past the last top-level declaration of *section*.

    Column-0 comments and scalar keys that fall inside the section's extent
    (``publish_to: none``, the comment above ``flutter:``) lie beyond it. An
    empty section yields the line after its header.
    """
    end = section.start_index + 1
    for _, extent in iter_entries(lines, section):
        end = extent.stop
    return end
