"""Aggregate changelogs across packages.

Two flavours:
- strict: only packages that actually have notes in the section;
- summary: every package that has the section, with `- No Changes` for the
  empty ones.

Packages mapped to None (no such section at all) are left out of both.
"""

from __future__ import annotations

from collections.abc import Mapping

from lockstep.services.release.model import Section


def _render(sections: Mapping[str, Section | None], *, strict: bool) -> str:
    blocks: list[str] = []
    for package_id in sorted(sections):
        section = sections[package_id]
        if section is None:
            continue
        if strict and (section.body is None or not section.body.strip()):
            continue
        blocks.append(f"## {package_id}\n\n{section.render()}")
    return "\n\n".join(blocks).strip() + "\n"


def strict_report(sections: Mapping[str, Section | None]) -> str:
    return _render(sections, strict=True)


def summary_report(sections: Mapping[str, Section | None]) -> str:
    return _render(sections, strict=False)
