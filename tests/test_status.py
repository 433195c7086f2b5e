from pathlib import Path

import pytest

from whiterose.core.models import Bug
from whiterose.core.status import StatusStore


def _bug(bug_id: str = "WR-001", line: int = 3) -> Bug:
    return Bug(id=bug_id, title="Race on cache", description="", file="cache.py", line=line)


def test_record_save_and_reload(tmp_path: Path) -> None:
    path = tmp_path / ".whiterose" / "bug-status.json"
    store = StatusStore(path=path)
    store.record(_bug(), "false-positive", notes="guarded by lock")
    store.record(_bug(), "wont-fix")
    store.save()

    loaded = StatusStore.load(path)
    assert len(loaded.entries) == 1
    entry = loaded.entries[0]
    assert entry.status == "wont-fix"
    assert entry.fixed_at is None
    assert loaded.counts()["wont-fix"] == 1


def test_entries_match_by_location_when_ids_change(tmp_path: Path) -> None:
    store = StatusStore(path=tmp_path / "s.json")
    store.record(_bug("WR-001"), "fixed")

    renumbered = _bug("WR-007")
    moved = _bug("WR-008", line=9)
    store.apply_to([renumbered, moved])

    assert renumbered.status == "fixed"
    assert moved.status == "open"


@pytest.mark.parametrize("content", ["{broken", "[]", '{"bugs": {}}', '{"bugs": [{"status": "nope"}]}'])
def test_unusable_status_file_reads_as_empty(tmp_path: Path, content: str) -> None:
    path = tmp_path / "bug-status.json"
    path.write_text(content, encoding="utf-8")
    assert StatusStore.load(path).entries == []


def test_unknown_status_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        StatusStore(path=tmp_path / "s.json").record(_bug(), "closed")
