"""Package manifests (`buildpack.toml` by default).

Each manifest is read twice: once structurally with `tomllib` for the values,
once with the locator for their spans. Both passes must agree.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from lockstep.core.result import Err, Ok, Result
from lockstep.core.structured import StrDict, as_obj_list, as_str_dict, get_list, get_str, get_table
from lockstep.services.release.errors import ReleaseError
from lockstep.services.release.locator import locate_and_validate, locate_dependencies
from lockstep.services.release.model import (
    DependencyRef,
    Document,
    ManifestFile,
    PackageDescriptor,
    Span,
)
from lockstep.services.release.semver import parse_version


def _invalid(path: Path, message: str) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="invalid_manifest", message=message, hint=str(path)))


def structural_dependencies(data: StrDict) -> list[tuple[str, str]]:
    """`order[].group[]` entries as (id, version), in declaration order."""
    out: list[tuple[str, str]] = []
    for order_item in get_list(data, "order") or []:
        order = as_str_dict(order_item)
        if order is None:
            continue
        for group_item in as_obj_list(order.get("group")) or []:
            group = as_str_dict(group_item)
            if group is None:
                continue
            dep_id = group.get("id")
            dep_version = group.get("version")
            if isinstance(dep_id, str) and isinstance(dep_version, str):
                out.append((dep_id, dep_version))
    return out


def read_manifest(path: Path, raw: str, *, table: str) -> Result[ManifestFile, ReleaseError]:
    try:
        data_obj: object = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        return _invalid(path, f"could not parse {path}: {e}")

    data = as_str_dict(data_obj)
    if data is None:
        return _invalid(path, f"{path} root must be a TOML table")

    meta = get_table(data, table)
    if meta is None:
        return _invalid(path, f"missing [{table}] table in {path}")

    package_id = get_str(meta, "id")
    if package_id is None:
        return _invalid(path, f"missing {table}.id in {path}")

    version_text = get_str(meta, "version")
    if version_text is None:
        return _invalid(path, f"missing {table}.version in {path}")

    version = parse_version(version_text)
    if version is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"version {version_text!r} in {path} is invalid",
                hint="expected MAJOR.MINOR.PATCH",
            )
        )

    version_span = locate_and_validate(path, raw, table=table, expected=version)
    if isinstance(version_span, Err):
        return version_span

    located = locate_dependencies(raw)
    expected = structural_dependencies(data)
    if [(d.id, d.version.value) for d in located] != expected:
        return Err(
            ReleaseError(
                kind="span_mismatch",
                message=f"could not determine the dependency text ranges to replace in {path}",
                hint="order.group entries must use [[order.group]] tables or inline tables",
            )
        )

    dependencies = tuple(
        DependencyRef(id=d.id, version=d.version.value, span=d.version.span) for d in located
    )

    spans: dict[str, Span] = {"version": version_span.value}
    for i, dep in enumerate(dependencies):
        spans[f"order.group[{i}].version"] = dep.span

    return Ok(
        ManifestFile(
            document=Document(path=path, raw=raw, spans=spans),
            descriptor=PackageDescriptor(
                id=package_id,
                version=version,
                version_span=version_span.value,
                dependencies=dependencies,
            ),
        )
    )
