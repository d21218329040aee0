"""Span splicing.

Documents are never re-serialized from a parsed model. A change is always
`(original text, span, replacement)`: everything outside the span is copied
through byte for byte, so comments, key order and formatting survive.
"""

from __future__ import annotations

from lockstep.services.release.model import FileEdit, Span


def patch(raw: str, span: Span, replacement: str) -> str:
    if not 0 <= span.start <= span.end <= len(raw):
        raise AssertionError(f"span {span.start}..{span.end} out of bounds (len {len(raw)})")
    return raw[: span.start] + replacement + raw[span.end :]


def apply_edit(edit: FileEdit) -> str:
    """Apply every replacement of an edit to its original text.

    Replacements are applied from the end of the text backwards so the
    offsets of the remaining spans stay valid as lengths change.
    """
    ordered = sorted(edit.replacements, key=lambda r: r.span, reverse=True)
    for later, earlier in zip(ordered, ordered[1:]):
        if earlier.span.end > later.span.start:
            raise AssertionError(
                f"overlapping spans in {edit.path}: "
                f"{earlier.span.start}..{earlier.span.end} and {later.span.start}..{later.span.end}"
            )

    text = edit.raw
    for r in ordered:
        text = patch(text, r.span, r.text)

    if edit.terminate:
        text = text.rstrip() + edit.newline
    return text
