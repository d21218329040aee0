from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from lockstep.core.config import DEFAULT_DATE_FORMAT
from lockstep.core.result import Err, Ok, Result
from lockstep.services.release.changelog import entry_header
from lockstep.services.release.errors import ReleaseError
from lockstep.services.release.model import (
    ChangelogFile,
    FileEdit,
    ManifestFile,
    PackageRelease,
    ReleaseBump,
    ReleasePlan,
    Replacement,
    Span,
)
from lockstep.services.release.semver import Version


@dataclass(frozen=True, slots=True)
class PackageFiles:
    manifest: ManifestFile
    changelog: ChangelogFile

    @property
    def id(self) -> str:
        return self.manifest.descriptor.id


def get_fixed_version(manifests: Sequence[ManifestFile]) -> Result[Version, ReleaseError]:
    """The one version every package currently shares."""
    if not manifests:
        return Err(
            ReleaseError(
                kind="no_packages",
                message="no packages to release",
                hint="nothing to compute a fixed version from",
            )
        )

    versions = {m.descriptor.version for m in manifests}
    if len(versions) != 1:
        listing = "\n".join(
            f"• {m.descriptor.version} ({m.document.path})"
            for m in sorted(manifests, key=lambda m: str(m.document.path))
        )
        return Err(
            ReleaseError(
                kind="version_mismatch",
                message=f"not all versions match:\n{listing}",
                hint="align every package on one version before releasing",
            )
        )

    return Ok(next(iter(versions)))


def next_version(current: Version, bump: ReleaseBump) -> Version:
    return current.bump(bump)


def manifest_edit(
    manifest: ManifestFile, *, to_version: Version, local_ids: frozenset[str]
) -> FileEdit:
    """Replace the package version and every local dependency pin.

    Local pins are overwritten whatever their current value; external
    dependencies keep theirs.
    """
    quoted = f'"{to_version}"'
    replacements = [Replacement(span=manifest.descriptor.version_span, text=quoted)]
    for dep in manifest.descriptor.dependencies:
        if dep.id in local_ids:
            replacements.append(Replacement(span=dep.span, text=quoted))

    return FileEdit(
        path=manifest.document.path,
        raw=manifest.document.raw,
        replacements=tuple(replacements),
    )


def newline_of(raw: str) -> str:
    return "\r\n" if "\r\n" in raw else "\n"


def changelog_edit(changelog: ChangelogFile, *, header: str) -> FileEdit:
    """Move the pending notes under a new release header.

    The whitespace around the pending section is widened into the replaced
    range so the new entry ends up with exactly one blank line on each side.
    Inserted line breaks follow the document's own (`\r\n` or `\n`).
    """
    raw = changelog.document.raw
    pending = changelog.sections.pending
    nl = newline_of(raw)

    before = raw[: pending.span.start].rstrip()
    after = raw[pending.span.end :].lstrip()
    entry = f"{header}{nl}{nl}{pending.render()}"

    text = f"{nl}{nl}{entry}{nl}"
    if after:
        text += nl

    return FileEdit(
        path=changelog.document.path,
        raw=raw,
        replacements=(Replacement(span=Span(len(before), len(raw) - len(after)), text=text),),
        terminate=True,
        newline=nl,
    )


def build_plan(
    packages: Sequence[PackageFiles],
    *,
    bump: ReleaseBump,
    today: date,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> Result[ReleasePlan, ReleaseError]:
    current = get_fixed_version([p.manifest for p in packages])
    if isinstance(current, Err):
        return current

    to_version = next_version(current.value, bump)
    header = entry_header(to_version, today, date_format=date_format)
    local_ids = frozenset(p.id for p in packages)

    releases = tuple(
        PackageRelease(
            id=p.id,
            manifest=manifest_edit(p.manifest, to_version=to_version, local_ids=local_ids),
            changelog=changelog_edit(p.changelog, header=header),
            changelog_header=header,
        )
        for p in sorted(packages, key=lambda p: p.id)
    )

    return Ok(ReleasePlan(from_version=current.value, to_version=to_version, packages=releases))
