from __future__ import annotations

from pathlib import Path

from lockstep.core.result import Err, Ok
from lockstep.services.release.manifest import read_manifest
from lockstep.services.release.semver import Version

PATH = Path("/path/to/test/buildpack.toml")


def test_reads_id_version_and_span() -> None:
    raw = '[buildpack]\nid = "test"\nversion = "0.0.2"\n'

    result = read_manifest(PATH, raw, table="buildpack")

    assert isinstance(result, Ok)
    descriptor = result.value.descriptor
    assert descriptor.id == "test"
    assert descriptor.version == Version(0, 0, 2)
    assert descriptor.version_span.text(raw) == '"0.0.2"'
    assert descriptor.dependencies == ()
    assert result.value.document.spans == {"version": descriptor.version_span}
    assert result.value.document.raw == raw


def test_reads_dependencies_in_order() -> None:
    raw = """[buildpack]
id = "test"
version = "0.0.2"

[[order]]
[[order.group]]
id = "dep-a"
version = "0.0.2"

[[order.group]]
id = "heroku/procfile"
version = "2.0.0"
optional = true
"""

    result = read_manifest(PATH, raw, table="buildpack")

    assert isinstance(result, Ok)
    deps = result.value.descriptor.dependencies
    assert [(d.id, d.version) for d in deps] == [("dep-a", "0.0.2"), ("heroku/procfile", "2.0.0")]
    assert [d.span.text(raw) for d in deps] == ['"0.0.2"', '"2.0.0"']
    assert set(result.value.document.spans) == {
        "version",
        "order.group[0].version",
        "order.group[1].version",
    }


def test_invalid_toml() -> None:
    result = read_manifest(PATH, "[buildpack\n", table="buildpack")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_manifest"
    assert str(PATH) in result.error.message


def test_missing_table() -> None:
    result = read_manifest(PATH, '[package]\nid = "x"\nversion = "1.0.0"\n', table="buildpack")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_manifest"
    assert "[buildpack]" in result.error.message


def test_missing_id() -> None:
    result = read_manifest(PATH, '[buildpack]\nversion = "1.0.0"\n', table="buildpack")
    assert isinstance(result, Err)
    assert "buildpack.id" in result.error.message


def test_unparsable_version() -> None:
    result = read_manifest(PATH, '[buildpack]\nid = "x"\nversion = "1.0"\n', table="buildpack")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_version"
    assert "'1.0'" in result.error.message


def test_custom_table_name() -> None:
    raw = '[package]\nid = "x"\nversion = "3.1.4"\n'
    result = read_manifest(PATH, raw, table="package")
    assert isinstance(result, Ok)
    assert result.value.descriptor.version == Version(3, 1, 4)


def test_unlocatable_dependency_shape_is_a_span_mismatch() -> None:
    raw = (
        'order = [{ group = [{ id = "a", version = "1.0.0" }] }]\n\n'
        '[buildpack]\nid = "x"\nversion = "1.0.0"\n'
    )
    result = read_manifest(PATH, raw, table="buildpack")
    assert isinstance(result, Err)
    assert result.error.kind == "span_mismatch"


def test_trailing_comments_on_version_and_dependency_lines() -> None:
    raw = (
        "[buildpack]\n"
        'id = "test"  # package id\n'
        'version = "0.0.2" # current\n'
        "\n"
        "[[order]]\n"
        "[[order.group]]\n"
        'id = "dep"\n'
        'version = "0.0.2" # kept in lockstep\n'
    )

    result = read_manifest(PATH, raw, table="buildpack")

    assert isinstance(result, Ok)
    descriptor = result.value.descriptor
    assert descriptor.version_span.text(raw) == '"0.0.2"'
    assert [(d.id, d.version, d.span.text(raw)) for d in descriptor.dependencies] == [
        ("dep", "0.0.2", '"0.0.2"')
    ]
