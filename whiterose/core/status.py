"""Persisted fix status for findings across scans."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .models import STATUSES, Bug
from .utils import json_dump, now_utc

logger = logging.getLogger(__name__)

STATUS_VERSION = "1"


@dataclass
class StatusEntry:
    bug_id: str
    file: str
    line: int
    title: str
    status: str
    fixed_at: Optional[str] = None
    notes: Optional[str] = None

    def matches(self, bug: Bug) -> bool:
        if self.bug_id == bug.id:
            return True
        return (self.file, self.line, self.title) == (bug.file, bug.line, bug.title)

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "bugId": self.bug_id,
            "file": self.file,
            "line": self.line,
            "title": self.title,
            "status": self.status,
        }
        if self.fixed_at is not None:
            data["fixedAt"] = self.fixed_at
        if self.notes is not None:
            data["notes"] = self.notes
        return data


def _entry_from_dict(raw: object) -> Optional[StatusEntry]:
    if not isinstance(raw, dict):
        return None
    status = raw.get("status")
    bug_id = raw.get("bugId")
    if status not in STATUSES or not isinstance(bug_id, str):
        return None
    line = raw.get("line")
    return StatusEntry(
        bug_id=bug_id,
        file=str(raw.get("file", "")),
        line=line if isinstance(line, int) else 0,
        title=str(raw.get("title", "")),
        status=status,
        fixed_at=raw.get("fixedAt") if isinstance(raw.get("fixedAt"), str) else None,
        notes=raw.get("notes") if isinstance(raw.get("notes"), str) else None,
    )


@dataclass
class StatusStore:
    """Reads and writes ``bug-status.json``. A missing or corrupt file reads as empty."""

    path: Path
    entries: List[StatusEntry] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "StatusStore":
        store = cls(path=path)
        if not path.exists():
            return store
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable status file %s: %s", path, exc)
            return store
        raw_entries = data.get("bugs") if isinstance(data, dict) else None
        if not isinstance(raw_entries, list):
            return store
        for raw in raw_entries:
            entry = _entry_from_dict(raw)
            if entry is not None:
                store.entries.append(entry)
        return store

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "version": STATUS_VERSION,
            "bugs": [entry.to_dict() for entry in self.entries],
        }
        self.path.write_text(json_dump(payload), encoding="utf-8")

    def lookup(self, bug: Bug) -> Optional[StatusEntry]:
        for entry in self.entries:
            if entry.matches(bug):
                return entry
        return None

    def record(self, bug: Bug, status: str, notes: Optional[str] = None) -> StatusEntry:
        if status not in STATUSES:
            raise ValueError(f"Unknown bug status '{status}'")
        entry = StatusEntry(
            bug_id=bug.id,
            file=bug.file,
            line=bug.line,
            title=bug.title,
            status=status,
            fixed_at=now_utc().isoformat() if status == "fixed" else None,
            notes=notes,
        )
        for idx, existing in enumerate(self.entries):
            if existing.matches(bug):
                self.entries[idx] = entry
                break
        else:
            self.entries.append(entry)
        return entry

    def apply_to(self, bugs: Sequence[Bug]) -> None:
        """Overlay persisted statuses onto freshly loaded bugs."""

        for bug in bugs:
            entry = self.lookup(bug)
            if entry is not None:
                bug.transition(entry.status)

    def counts(self) -> Dict[str, int]:
        summary = {status: 0 for status in STATUSES}
        for entry in self.entries:
            summary[entry.status] += 1
        return summary


__all__ = ["StatusEntry", "StatusStore", "STATUS_VERSION"]
