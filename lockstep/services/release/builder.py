"""Builder definitions (`builder.toml`) that pin released packages.

A builder lists where each buildpack image comes from (`[[buildpacks]]`
`uri`) and which version every `[[order.group]]` entry expects. Publishing a
release rewrites both for one buildpack id, by splicing located spans.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from urllib.parse import urlsplit

from lockstep.core.result import Err, Ok, Result
from lockstep.core.structured import StrDict, as_str_dict, get_list
from lockstep.services.release.errors import ReleaseError
from lockstep.services.release.locator import locate_builder_buildpacks, locate_dependencies
from lockstep.services.release.manifest import structural_dependencies
from lockstep.services.release.model import (
    BuilderBuildpack,
    BuilderFile,
    DependencyRef,
    Document,
    FileEdit,
    Replacement,
    Span,
)
from lockstep.services.release.semver import Version

BUILDER_FILE_NAME = "builder.toml"


def _invalid(path: Path, message: str) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="invalid_builder", message=message, hint=str(path)))


def _structural_buildpacks(data: StrDict) -> list[tuple[str, str]]:
    out: list[tuple[str, str]] = []
    for item in get_list(data, "buildpacks") or []:
        entry = as_str_dict(item)
        if entry is None:
            continue
        bp_id = entry.get("id")
        uri = entry.get("uri")
        if isinstance(bp_id, str) and isinstance(uri, str):
            out.append((bp_id, uri))
    return out


def validate_uri(text: str) -> Result[str, ReleaseError]:
    """Accept a URI reference that can be written inside a basic TOML string."""
    uri = text.strip()
    bad = [c for c in uri if c in '"\\' or c.isspace() or not c.isprintable()]
    if not uri or bad:
        return Err(
            ReleaseError(
                kind="invalid_uri",
                message=f"the buildpack URI is invalid: {text!r}",
                hint="expected a URI such as docker://docker.io/heroku/buildpack-java@sha256:...",
            )
        )
    try:
        urlsplit(uri)
    except ValueError as e:
        return Err(
            ReleaseError(
                kind="invalid_uri",
                message=f"the buildpack URI is invalid: {text!r} ({e})",
            )
        )
    return Ok(uri)


def read_builder(path: Path, raw: str) -> Result[BuilderFile, ReleaseError]:
    try:
        data_obj: object = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        return _invalid(path, f"could not parse {path}: {e}")

    data = as_str_dict(data_obj)
    if data is None:
        return _invalid(path, f"{path} root must be a TOML table")
    for key in ("buildpacks", "order"):
        if get_list(data, key) is None:
            return _invalid(path, f"missing {key} array in {path}")

    located_buildpacks = locate_builder_buildpacks(raw)
    if [(b.id, b.uri.value) for b in located_buildpacks] != _structural_buildpacks(data):
        return Err(
            ReleaseError(
                kind="span_mismatch",
                message=f"could not determine the buildpack uri text ranges to replace in {path}",
                hint="buildpacks entries must use [[buildpacks]] tables or inline tables",
            )
        )

    located_groups = locate_dependencies(raw)
    if [(d.id, d.version.value) for d in located_groups] != structural_dependencies(data):
        return Err(
            ReleaseError(
                kind="span_mismatch",
                message=f"could not determine the order.group text ranges to replace in {path}",
                hint="order.group entries must use [[order.group]] tables or inline tables",
            )
        )

    buildpacks = tuple(
        BuilderBuildpack(id=b.id, uri=b.uri.value, span=b.uri.span) for b in located_buildpacks
    )
    groups = tuple(
        DependencyRef(id=d.id, version=d.version.value, span=d.version.span)
        for d in located_groups
    )

    spans: dict[str, Span] = {}
    for i, buildpack in enumerate(buildpacks):
        spans[f"buildpacks[{i}].uri"] = buildpack.span
    for i, group in enumerate(groups):
        spans[f"order.group[{i}].version"] = group.span

    return Ok(
        BuilderFile(
            document=Document(path=path, raw=raw, spans=spans),
            buildpacks=buildpacks,
            groups=groups,
        )
    )


def builder_edit(
    builder: BuilderFile, *, buildpack_id: str, version: Version, uri: str
) -> FileEdit:
    """Point every entry for `buildpack_id` at the new image and version."""
    replacements = [
        Replacement(span=b.span, text=f'"{uri}"') for b in builder.buildpacks if b.id == buildpack_id
    ]
    replacements.extend(
        Replacement(span=g.span, text=f'"{version}"') for g in builder.groups if g.id == buildpack_id
    )
    return FileEdit(
        path=builder.document.path,
        raw=builder.document.raw,
        replacements=tuple(replacements),
    )
