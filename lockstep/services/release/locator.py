"""Locate the exact text ranges that a release rewrites.

Documents are parsed with tree-sitter only to find where a value sits; the
value is then replaced by splicing (see `patch.py`).

tree-sitter reports UTF-8 byte offsets. Every Span returned from here is
already converted to `str` indices of the original text.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import tree_sitter_markdown
import tree_sitter_toml
from tree_sitter import Language, Node, Parser

from lockstep.core.result import Err, Ok, Result
from lockstep.services.release.errors import ReleaseError
from lockstep.services.release.model import ChangelogSections, Section, Span
from lockstep.services.release.semver import Version, parse_version


_TOML = Language(tree_sitter_toml.language())
_MARKDOWN = Language(tree_sitter_markdown.language())

_KEY_TYPES = frozenset({"bare_key", "quoted_key", "dotted_key"})
_HEADING_TYPES = frozenset({"atx_heading", "setext_heading"})

UNRELEASED_KEY = "Unreleased"
_VERSION_HEADER_RE = re.compile(r"^\[(\d+\.\d+\.\d+)\]")
_CLOSING_HASHES_RE = re.compile(r"\s+#+\s*$")


@dataclass(frozen=True, slots=True)
class LocatedValue:
    # Unquoted string value.
    value: str
    # Covers the quoted string, quotes included.
    span: Span


@dataclass(frozen=True, slots=True)
class LocatedDependency:
    id: str
    version: LocatedValue


@dataclass(frozen=True, slots=True)
class LocatedBuildpack:
    id: str
    uri: LocatedValue


class _Source:
    """Original text with its UTF-8 encoding, for byte → str offset mapping."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        self.data = raw.encode("utf-8")
        self._ascii = len(self.data) == len(raw)

    def offset(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return len(self.data[:byte_offset].decode("utf-8"))

    def span(self, node: Node) -> Span:
        return Span(self.offset(node.start_byte), self.offset(node.end_byte))

    def text(self, node: Node) -> str:
        return self.data[node.start_byte : node.end_byte].decode("utf-8")


def _parse(language: Language, source: _Source) -> Node:
    parser = Parser()
    parser.language = language
    return parser.parse(source.data).root_node


def inner_value(raw: str, span: Span) -> str:
    """Strip the quotes from a located TOML string."""
    return _unquote(span.text(raw))


def _unquote(text: str) -> str:
    for quote in ('"""', "'''"):
        if len(text) >= 6 and text.startswith(quote) and text.endswith(quote):
            return text[3:-3]
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text


# -----------------------------------------------------------------------------
# TOML
# -----------------------------------------------------------------------------


def _key_parts(node: Node, source: _Source) -> tuple[str, ...] | None:
    match node.type:
        case "bare_key":
            return (source.text(node).strip(),)
        case "quoted_key":
            return (_unquote(source.text(node).strip()),)
        case "dotted_key":
            parts: list[str] = []
            for child in node.named_children:
                sub = _key_parts(child, source)
                if sub is None:
                    return None
                parts.extend(sub)
            return tuple(parts)
        case _:
            return None


def _pair(node: Node, source: _Source) -> tuple[tuple[str, ...], Node] | None:
    """Split a `pair` node into its key path and value node."""
    if node.type != "pair":
        return None
    # A trailing `# comment` is a named child of the pair, after its value.
    named = [child for child in node.named_children if child.type != "comment"]
    if len(named) < 2:
        return None
    key = _key_parts(named[0], source)
    if key is None:
        return None
    return (key, named[1])


def _header(node: Node, source: _Source) -> tuple[str, ...] | None:
    """Key path of a `[table]` or `[[table]]` header."""
    for child in node.named_children:
        if child.type in _KEY_TYPES:
            return _key_parts(child, source)
    return None


def _pairs(node: Node, source: _Source) -> Iterator[tuple[tuple[str, ...], Node]]:
    for child in node.named_children:
        pair = _pair(child, source)
        if pair is not None:
            yield pair


def _string_value(node: Node, source: _Source) -> LocatedValue | None:
    if node.type != "string":
        return None
    span = source.span(node)
    return LocatedValue(value=inner_value(source.raw, span), span=span)


def _version_in_table(root: Node, source: _Source, table: str) -> LocatedValue | None:
    # [buildpack]
    # version = "x.y.z"
    for node in root.named_children:
        if node.type != "table" or _header(node, source) != (table,):
            continue
        for key, value in _pairs(node, source):
            if key == ("version",):
                located = _string_value(value, source)
                if located is not None:
                    return located
    return None


def _version_in_dotted_key(root: Node, source: _Source, table: str) -> LocatedValue | None:
    # buildpack.version = "x.y.z"
    for key, value in _pairs(root, source):
        if key == (table, "version"):
            located = _string_value(value, source)
            if located is not None:
                return located
    return None


def _version_in_inline_table(root: Node, source: _Source, table: str) -> LocatedValue | None:
    # buildpack = { id = "...", version = "x.y.z" }
    for key, value in _pairs(root, source):
        if key != (table,) or value.type != "inline_table":
            continue
        for inner_key, inner_value_node in _pairs(value, source):
            if inner_key == ("version",):
                located = _string_value(inner_value_node, source)
                if located is not None:
                    return located
    return None


_VERSION_SHAPES = (
    _version_in_table,
    _version_in_dotted_key,
    _version_in_inline_table,
)


def locate_version(path: Path, raw: str, *, table: str) -> Result[LocatedValue, ReleaseError]:
    """Find the `<table>.version` string, trying each TOML shape in order."""
    source = _Source(raw)
    root = _parse(_TOML, source)

    for shape in _VERSION_SHAPES:
        located = shape(root, source, table)
        if located is not None:
            return Ok(located)

    return Err(
        ReleaseError(
            kind="invalid_manifest",
            message=f"no version found in {path}",
            hint=f"expected a {table}.version string",
        )
    )


def locate_and_validate(
    path: Path, raw: str, *, table: str, expected: Version
) -> Result[Span, ReleaseError]:
    """Locate the version and check it against the structurally parsed one.

    A disagreement means the locator matched some other `version` key, and
    replacing that range would corrupt the file.
    """
    located = locate_version(path, raw, table=table)
    if isinstance(located, Err):
        return located

    value = located.value.value
    version = parse_version(value)
    if version is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"version {value!r} in {path} is invalid",
                hint="expected MAJOR.MINOR.PATCH",
            )
        )

    if version != expected:
        return Err(
            ReleaseError(
                kind="span_mismatch",
                message=f"could not determine the correct text range to replace in {path}",
                hint=f"located {version}, parsed {expected}",
            )
        )

    return Ok(located.value.span)


def _string_fields(node: Node, source: _Source) -> dict[str, LocatedValue]:
    """Single-key string pairs of a table or inline table."""
    fields: dict[str, LocatedValue] = {}
    for key, value in _pairs(node, source):
        if len(key) != 1:
            continue
        located = _string_value(value, source)
        if located is not None:
            fields[key[0]] = located
    return fields


def _inline_tables(node: Node, source: _Source, key: tuple[str, ...]) -> Iterator[Node]:
    # key = [{ ... }, { ... }]
    for pair_key, value in _pairs(node, source):
        if pair_key != key or value.type != "array":
            continue
        for item in value.named_children:
            if item.type == "inline_table":
                yield item


def _dependency(node: Node, source: _Source) -> LocatedDependency | None:
    fields = _string_fields(node, source)
    if "id" not in fields or "version" not in fields:
        return None
    return LocatedDependency(id=fields["id"].value, version=fields["version"])


def locate_dependencies(raw: str) -> list[LocatedDependency]:
    """Find every `order[].group[]` entry that has a string id and version.

    Supported shapes, in document order:

        [[order.group]]
        id = "x"
        version = "1.0.0"

        [[order]]
        group = [{ id = "x", version = "1.0.0" }]
    """
    source = _Source(raw)
    root = _parse(_TOML, source)

    found: list[LocatedDependency] = []
    for node in root.named_children:
        if node.type != "table_array_element":
            continue
        header = _header(node, source)
        if header == ("order", "group"):
            entries: Iterator[Node] = iter((node,))
        elif header == ("order",):
            entries = _inline_tables(node, source, ("group",))
        else:
            continue
        for entry in entries:
            dep = _dependency(entry, source)
            if dep is not None:
                found.append(dep)
    return found


def _builder_buildpack(node: Node, source: _Source) -> LocatedBuildpack | None:
    fields = _string_fields(node, source)
    if "id" not in fields or "uri" not in fields:
        return None
    return LocatedBuildpack(id=fields["id"].value, uri=fields["uri"])


def locate_builder_buildpacks(raw: str) -> list[LocatedBuildpack]:
    """Find every `buildpacks[]` entry of a builder that has a string id and uri.

    Supported shapes, in document order:

        [[buildpacks]]
        id = "x"
        uri = "docker://..."

        buildpacks = [{ id = "x", uri = "docker://..." }]
    """
    source = _Source(raw)
    root = _parse(_TOML, source)

    found: list[LocatedBuildpack] = []
    entries: list[Node] = list(_inline_tables(root, source, ("buildpacks",)))
    for node in root.named_children:
        if node.type == "table_array_element" and _header(node, source) == ("buildpacks",):
            entries.append(node)
    for entry in sorted(entries, key=lambda n: n.start_byte):
        buildpack = _builder_buildpack(entry, source)
        if buildpack is not None:
            found.append(buildpack)
    return found


# -----------------------------------------------------------------------------
# Markdown
# -----------------------------------------------------------------------------


def _blocks(node: Node) -> Iterator[Node]:
    """Top-level blocks in document order, with heading sections flattened."""
    for child in node.named_children:
        if child.type == "section":
            yield from _blocks(child)
        else:
            yield child


def heading_text(raw_heading: str) -> str:
    """Normalize a heading to its text: `## [Unreleased] ##` → `[Unreleased]`."""
    lines = raw_heading.strip().splitlines()
    if not lines:
        return ""
    line = lines[0].strip()
    if line.startswith("#"):
        line = line.lstrip("#")
        line = _CLOSING_HASHES_RE.sub("", " " + line)
    return line.strip()


def _section_key(text: str) -> str | None:
    if text.lower() == "[unreleased]":
        return UNRELEASED_KEY
    m = _VERSION_HEADER_RE.match(text)
    if m is not None:
        return m.group(1)
    return None


def _section(
    path: Path, source: _Source, key: str, header: Node, body: list[Node]
) -> Result[Section, ReleaseError]:
    if not body:
        end = min(source.offset(header.end_byte), len(source.raw))
        return Ok(Section(span=Span(end, end), body=None))

    if len(body) > 1 and key == UNRELEASED_KEY:
        return Err(
            ReleaseError(
                kind="invalid_changelog",
                message=(
                    f"[{key}] in {path} should contain a single content block "
                    f"but has {len(body)}"
                ),
                hint="keep pending changes in one list",
            )
        )

    span = Span(source.offset(body[0].start_byte), source.offset(body[-1].end_byte))
    return Ok(Section(span=span, body=span.text(source.raw)))


def locate_sections(path: Path, raw: str) -> Result[ChangelogSections, ReleaseError]:
    """Split a changelog into its pending section and released sections.

    A heading reading `[Unreleased]` (any case) opens the pending section, a
    heading starting with `[x.y.z]` opens the section of that version, and any
    other heading closes the current section. Every block up to the next
    heading belongs to the open section.
    """
    source = _Source(raw)
    root = _parse(_MARKDOWN, source)

    headers: dict[str, Node] = {}
    bodies: dict[str, list[Node]] = {}
    current: str | None = None

    for block in _blocks(root):
        if block.type in _HEADING_TYPES:
            current = _section_key(heading_text(source.text(block)))
            if current is None:
                continue
            if current in headers:
                return Err(
                    ReleaseError(
                        kind="invalid_changelog",
                        message=f"duplicate [{current}] section in {path}",
                        hint=str(path),
                    )
                )
            headers[current] = block
            bodies[current] = []
        elif current is not None:
            bodies[current].append(block)

    if UNRELEASED_KEY not in headers:
        return Err(
            ReleaseError(
                kind="invalid_changelog",
                message=f"no [Unreleased] section located in {path}",
                hint="add a '## [Unreleased]' heading",
            )
        )

    sections: dict[str, Section] = {}
    for key, header in headers.items():
        section = _section(path, source, key, header, bodies[key])
        if isinstance(section, Err):
            return section
        sections[key] = section.value

    pending = sections.pop(UNRELEASED_KEY)
    return Ok(ChangelogSections(pending=pending, released=sections))


def locate_pending_section(path: Path, raw: str) -> Result[Section, ReleaseError]:
    sections = locate_sections(path, raw)
    if isinstance(sections, Err):
        return sections
    return Ok(sections.value.pending)
