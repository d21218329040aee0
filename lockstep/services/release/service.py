"""Release use cases: prepare a release, aggregate changelogs, list packages,
update builders.

`prepare_release` only reads and plans; `write_release` is the single place
that touches the filesystem. Any failure while loading or planning any
package therefore leaves every file as it was.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from lockstep.core.config import ReleaseConfig
from lockstep.core.result import Err, Ok, Result
from lockstep.output.console import ConsoleProtocol, Style
from lockstep.platform.files import atomic_write_text, read_text_exact
from lockstep.services.release.builder import (
    BUILDER_FILE_NAME,
    builder_edit,
    read_builder,
    validate_uri,
)
from lockstep.services.release.changelog import read_changelog, section_for
from lockstep.services.release.discovery import find_package_dirs
from lockstep.services.release.errors import ReleaseError
from lockstep.services.release.manifest import read_manifest
from lockstep.services.release.model import BuilderFile, ReleaseBump, ReleasePlan, Section
from lockstep.services.release.patch import apply_edit
from lockstep.services.release.planner import PackageFiles, build_plan
from lockstep.services.release.report import strict_report, summary_report
from lockstep.services.release.semver import Version


@dataclass(frozen=True, slots=True)
class PreparedRelease:
    plan: ReleasePlan
    # Summary of every package's pending notes, taken before the rewrite.
    unreleased_changes: str

    def outputs(self) -> dict[str, str]:
        return {
            "from_version": str(self.plan.from_version),
            "to_version": str(self.plan.to_version),
            "unreleased_changes": self.unreleased_changes,
        }


def _read(path: Path) -> Result[str, ReleaseError]:
    try:
        return Ok(read_text_exact(path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="read_failed",
                message=f"could not read {path}: {e}",
                hint=str(path),
            )
        )


def _write(path: Path, content: str) -> Result[None, ReleaseError]:
    try:
        atomic_write_text(path, content)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="write_failed",
                message=f"could not write {path}: {e}",
                hint=str(path),
            )
        )
    return Ok(None)


def load_package(package_dir: Path, *, config: ReleaseConfig) -> Result[PackageFiles, ReleaseError]:
    manifest_path = package_dir / config.manifest
    manifest_raw = _read(manifest_path)
    if isinstance(manifest_raw, Err):
        return manifest_raw
    manifest = read_manifest(manifest_path, manifest_raw.value, table=config.table)
    if isinstance(manifest, Err):
        return manifest

    changelog_path = package_dir / config.changelog
    changelog_raw = _read(changelog_path)
    if isinstance(changelog_raw, Err):
        return changelog_raw
    changelog = read_changelog(changelog_path, changelog_raw.value)
    if isinstance(changelog, Err):
        return changelog

    return Ok(PackageFiles(manifest=manifest.value, changelog=changelog.value))


def load_packages(
    *, root: Path, config: ReleaseConfig, console: ConsoleProtocol
) -> Result[list[PackageFiles], ReleaseError]:
    console.print(f"Looking for packages under {root}", Style.DIM)
    dirs = find_package_dirs(root, config=config, console=console)
    if isinstance(dirs, Err):
        return dirs

    packages: list[PackageFiles] = []
    for package_dir in dirs.value:
        package = load_package(package_dir, config=config)
        if isinstance(package, Err):
            return package
        packages.append(package.value)

    return Ok(sorted(packages, key=lambda p: p.id))


def prepare_release(
    *,
    root: Path,
    bump: ReleaseBump,
    today: date,
    config: ReleaseConfig,
    console: ConsoleProtocol,
) -> Result[PreparedRelease, ReleaseError]:
    packages = load_packages(root=root, config=config, console=console)
    if isinstance(packages, Err):
        return packages

    plan = build_plan(packages.value, bump=bump, today=today, date_format=config.date_format)
    if isinstance(plan, Err):
        return plan

    pending: dict[str, Section | None] = {p.id: p.changelog.sections.pending for p in packages.value}
    return Ok(PreparedRelease(plan=plan.value, unreleased_changes=summary_report(pending)))


def write_release(
    prepared: PreparedRelease, *, console: ConsoleProtocol
) -> Result[None, ReleaseError]:
    plan = prepared.plan
    # Every file is rendered before the first one is written.
    rendered = [
        (package, apply_edit(package.manifest), apply_edit(package.changelog))
        for package in plan.packages
    ]

    for package, manifest_text, changelog_text in rendered:
        ok = _write(package.manifest.path, manifest_text)
        if isinstance(ok, Err):
            return ok
        console.success(
            f"Updated version {plan.from_version} → {plan.to_version}: {package.manifest.path}"
        )

        ok = _write(package.changelog.path, changelog_text)
        if isinstance(ok, Err):
            return ok
        console.success(
            f'Added changelog entry "{package.changelog_header}": {package.changelog.path}'
        )

    return Ok(None)


def generate_changelog(
    *,
    root: Path,
    version: str | None,
    config: ReleaseConfig,
    console: ConsoleProtocol,
) -> Result[str, ReleaseError]:
    """Strict report of pending notes, or of the notes released as `version`."""
    packages = load_packages(root=root, config=config, console=console)
    if isinstance(packages, Err):
        return packages

    sections = {p.id: section_for(p.changelog, version) for p in packages.value}
    return Ok(strict_report(sections))


def list_packages(
    *, root: Path, config: ReleaseConfig, console: ConsoleProtocol
) -> Result[list[PackageFiles], ReleaseError]:
    return load_packages(root=root, config=config, console=console)


def package_dirs_json(packages: Sequence[PackageFiles]) -> str:
    """JSON array of package directories."""
    return json.dumps([str(p.manifest.document.path.parent) for p in packages])


def package_matrix_json(packages: Sequence[PackageFiles]) -> str:
    """JSON array of `{"id", "path"}` objects, one job per package in a CI matrix."""
    return json.dumps(
        [{"id": p.id, "path": str(p.manifest.document.path.parent)} for p in packages]
    )


def generate_matrix(
    *, root: Path, config: ReleaseConfig, console: ConsoleProtocol
) -> Result[str, ReleaseError]:
    packages = load_packages(root=root, config=config, console=console)
    if isinstance(packages, Err):
        return packages
    return Ok(package_matrix_json(packages.value))


def update_builders(
    *,
    root: Path,
    builders: Sequence[str],
    buildpack_id: str,
    version: Version,
    uri: str,
    console: ConsoleProtocol,
) -> Result[list[Path], ReleaseError]:
    """Pin `buildpack_id` to `version` and `uri` in each builder directory.

    Every builder is read and rendered before the first write. Returns the
    files that changed.
    """
    if not builders:
        return Err(
            ReleaseError(
                kind="no_builders",
                message="no builder directories given",
                hint=f"pass the directories that hold a {BUILDER_FILE_NAME}",
            )
        )

    valid_uri = validate_uri(uri)
    if isinstance(valid_uri, Err):
        return valid_uri

    files: list[BuilderFile] = []
    for builder in builders:
        path = root / builder / BUILDER_FILE_NAME
        raw = _read(path)
        if isinstance(raw, Err):
            return raw
        parsed = read_builder(path, raw.value)
        if isinstance(parsed, Err):
            return parsed
        files.append(parsed.value)

    edits = [
        builder_edit(builder, buildpack_id=buildpack_id, version=version, uri=valid_uri.value)
        for builder in files
    ]
    rendered = [(edit, apply_edit(edit)) for edit in edits]

    written: list[Path] = []
    for edit, text in rendered:
        if not edit.replacements:
            console.warning(f"{buildpack_id} is not referenced in {edit.path}")
            continue
        if text == edit.raw:
            console.print(f"Already up to date: {edit.path}", Style.DIM)
            continue
        ok = _write(edit.path, text)
        if isinstance(ok, Err):
            return ok
        console.success(f"Updated {buildpack_id} to {version}: {edit.path}")
        written.append(edit.path)

    return Ok(written)
