"""Apply pre-computed fixes to source files.

Only findings that carry a ``suggested_fix`` can be applied here; generating
fixes is left to external tooling.
"""
from __future__ import annotations

import asyncio
import difflib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .errors import FixApplyError
from .models import Bug
from .status import StatusStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixOutcome:
    path: Path
    diff: str
    applied: bool


def resolve_within(root: Path, file: str) -> Path:
    """Resolve ``file`` against ``root`` and refuse anything outside it."""

    if "\0" in file:
        raise FixApplyError(f"Invalid file path: {file!r}")
    base = root.resolve()
    candidate = (base / file).resolve()
    try:
        candidate.relative_to(base)
    except ValueError:
        raise FixApplyError(
            f"Refusing to touch file outside project directory: {file}"
        ) from None
    return candidate


def splice_fix(lines: List[str], start: int, end: int, fix: str) -> List[str]:
    """Replace 1-based lines ``start..end`` with ``fix``, keeping indentation."""

    first = start - 1
    last = max(end, start) - 1
    if first < 0 or first >= len(lines):
        raise FixApplyError(f"Line {start} is outside the file ({len(lines)} lines)")
    original = lines[first]
    indent = original[: len(original) - len(original.lstrip())]
    replacement = [indent + line.lstrip() if line.strip() else line for line in fix.split("\n")]
    return lines[:first] + replacement + lines[last + 1 :]


def _apply_sync(bug: Bug, root: Path, dry_run: bool) -> FixOutcome:
    if not bug.suggested_fix:
        raise FixApplyError(
            f"{bug.id} has no suggested fix; generate one with your fix provider first"
        )
    path = resolve_within(root, bug.file)
    if not path.is_file():
        raise FixApplyError(f"File not found: {bug.file}")
    original = path.read_text(encoding="utf-8")
    lines = original.split("\n")
    updated = "\n".join(splice_fix(lines, bug.line, bug.end_line or bug.line, bug.suggested_fix))
    diff = "".join(
        difflib.unified_diff(
            original.splitlines(keepends=True),
            updated.splitlines(keepends=True),
            fromfile=f"a/{bug.file}",
            tofile=f"b/{bug.file}",
        )
    )
    if not dry_run:
        path.write_text(updated, encoding="utf-8")
    return FixOutcome(path=path, diff=diff, applied=not dry_run)


async def apply_fix(
    bug: Bug,
    *,
    root: Path,
    dry_run: bool = False,
    store: Optional[StatusStore] = None,
) -> FixOutcome:
    """Apply ``bug.suggested_fix`` in place and mark the bug fixed.

    Raises :class:`FixApplyError` when the fix cannot be applied. With
    ``dry_run`` the diff is computed but nothing is written.
    """

    outcome = await asyncio.to_thread(_apply_sync, bug, root, dry_run)
    if outcome.applied:
        bug.transition("fixed")
        if store is not None:
            store.record(bug, "fixed")
            await asyncio.to_thread(store.save)
        logger.info("Applied fix for %s to %s", bug.id, outcome.path)
    else:
        logger.info("Dry run for %s, %s left untouched", bug.id, outcome.path)
    return outcome


__all__ = ["FixOutcome", "apply_fix", "resolve_within", "splice_fix"]
