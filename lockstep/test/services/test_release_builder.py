from __future__ import annotations

from pathlib import Path

from lockstep.core.result import Err, Ok
from lockstep.services.release.builder import builder_edit, read_builder, validate_uri
from lockstep.services.release.locator import locate_builder_buildpacks
from lockstep.services.release.model import BuilderFile
from lockstep.services.release.patch import apply_edit
from lockstep.services.release.semver import Version

PATH = Path("/path/to/builder.toml")

JAVA_OLD = "docker://docker.io/heroku/buildpack-java@sha256:21990393c93927b16f76c303ae007ea7e95502d52b0317ca773d4cd51e7a5682"
JAVA_NEW = "docker://docker.io/heroku/buildpack-java@sha256:c6dd500be06a2a1e764c30359c5dd4f4955a98b572ef3095b2f6115cd8a87c99"

BUILDER = f"""
[[buildpacks]]
  id = "heroku/java"
  uri = "{JAVA_OLD}"

[[buildpacks]]
  id = "heroku/nodejs"
  uri = "docker://docker.io/heroku/buildpack-nodejs@sha256:22ec91eebee2271b99368844f193c4bb3c6084201062f89b3e45179b938c3241"

[[order]]
  [[order.group]]
    id = "heroku/nodejs"
    version = "0.6.5"

[[order]]
  [[order.group]]
    id = "heroku/java"
    version = "0.6.9"

  [[order.group]]
    id = "heroku/procfile"
    version = "2.0.0"
    optional = true
"""


def _read(raw: str) -> BuilderFile:
    result = read_builder(PATH, raw)
    assert isinstance(result, Ok)
    return result.value


def test_update_builder_contents_with_buildpack() -> None:
    edit = builder_edit(
        _read(BUILDER), buildpack_id="heroku/java", version=Version(0, 6, 10), uri=JAVA_NEW
    )

    assert apply_edit(edit) == BUILDER.replace(JAVA_OLD, JAVA_NEW).replace(
        'version = "0.6.9"', 'version = "0.6.10"'
    )


def test_read_builder_records_spans() -> None:
    builder = _read(BUILDER)

    java = builder.buildpacks[0]
    assert (java.id, java.uri) == ("heroku/java", JAVA_OLD)
    assert java.span.text(BUILDER) == f'"{JAVA_OLD}"'
    assert [(g.id, g.version) for g in builder.groups] == [
        ("heroku/nodejs", "0.6.5"),
        ("heroku/java", "0.6.9"),
        ("heroku/procfile", "2.0.0"),
    ]
    assert set(builder.document.spans) == {
        "buildpacks[0].uri",
        "buildpacks[1].uri",
        "order.group[0].version",
        "order.group[1].version",
        "order.group[2].version",
    }


def test_unknown_buildpack_makes_no_replacements() -> None:
    edit = builder_edit(
        _read(BUILDER), buildpack_id="heroku/go", version=Version(1, 0, 0), uri="docker://go"
    )
    assert edit.replacements == ()
    assert apply_edit(edit) == BUILDER


def test_inline_buildpacks_array() -> None:
    raw = (
        'buildpacks = [{ id = "heroku/java", uri = "docker://a" }]  # images\n\n'
        '[[order]]\ngroup = [{ id = "heroku/java", version = "1.0.0" }]\n'
    )

    edit = builder_edit(
        _read(raw), buildpack_id="heroku/java", version=Version(1, 1, 0), uri="docker://b"
    )

    assert apply_edit(edit) == raw.replace("docker://a", "docker://b").replace('"1.0.0"', '"1.1.0"')


def test_locate_builder_buildpacks_skips_entries_without_uri() -> None:
    raw = (
        '[[buildpacks]]\nid = "a"\nversion = "1.0.0"\n\n'
        '[[buildpacks]]\nid = "b"\nuri = "docker://b"\n'
    )
    assert [(b.id, b.uri.value) for b in locate_builder_buildpacks(raw)] == [("b", "docker://b")]


def test_invalid_toml() -> None:
    result = read_builder(PATH, "[[buildpacks]\n")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_builder"


def test_missing_order() -> None:
    result = read_builder(PATH, '[[buildpacks]]\nid = "a"\nuri = "docker://a"\n')
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_builder"
    assert result.error.message == f"missing order array in {PATH}"


def test_buildpacks_must_be_an_array() -> None:
    result = read_builder(PATH, "[buildpacks]\nx = 1\n\n[[order]]\n")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_builder"


def test_unlocatable_group_shape_is_a_span_mismatch() -> None:
    raw = (
        'buildpacks = [{ id = "a", uri = "docker://a" }]\n'
        'order = [{ group = [{ id = "a", version = "1.0.0" }] }]\n'
    )
    result = read_builder(PATH, raw)
    assert isinstance(result, Err)
    assert result.error.kind == "span_mismatch"


def test_validate_uri() -> None:
    assert validate_uri(f"  {JAVA_NEW}\n") == Ok(JAVA_NEW)
    assert validate_uri("../local/buildpack") == Ok("../local/buildpack")
    for bad in ["", "docker://a b", 'docker://a"b', "docker://a\\b", "http://[::1"]:
        result = validate_uri(bad)
        assert isinstance(result, Err), bad
        assert result.error.kind == "invalid_uri"
