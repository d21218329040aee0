"""Multi-package release bookkeeping.

Layout, leaf first:
- locator: tree-sitter span location in TOML and Markdown
- manifest / changelog / builder: documents with their located spans
- planner: fixed version, bump, per-file edits
- patch: span splicing
- report: aggregated changelogs
- service: read → plan → write use cases
"""

from __future__ import annotations
