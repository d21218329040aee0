from __future__ import annotations

from datetime import date
from pathlib import Path

from lockstep.core.config import DEFAULT_DATE_FORMAT
from lockstep.core.result import Err, Ok, Result
from lockstep.services.release.errors import ReleaseError
from lockstep.services.release.locator import UNRELEASED_KEY, locate_sections
from lockstep.services.release.model import ChangelogFile, Document, Section, Span
from lockstep.services.release.semver import Version


def read_changelog(path: Path, raw: str) -> Result[ChangelogFile, ReleaseError]:
    sections = locate_sections(path, raw)
    if isinstance(sections, Err):
        return sections

    spans: dict[str, Span] = {UNRELEASED_KEY: sections.value.pending.span}
    for version, section in sections.value.released.items():
        spans[version] = section.span

    return Ok(
        ChangelogFile(
            document=Document(path=path, raw=raw, spans=spans),
            sections=sections.value,
        )
    )


def entry_header(version: Version, day: date, *, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    return f"## [{version}] {day.strftime(date_format)}"


def section_for(changelog: ChangelogFile, version: str | None) -> Section | None:
    """The pending section (version None) or the section released as `version`."""
    if version is None:
        return changelog.sections.pending
    return changelog.sections.released.get(version)
