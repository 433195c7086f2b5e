import json
from pathlib import Path

import pytest

from whiterose.cli.main import main


def _run(root: Path, *args: str) -> int:
    return main(["--root", str(root), *args])


def test_report_requires_initialized_workspace(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    out = tmp_path / "BUGS.md"
    assert _run(tmp_path, "report", "-o", str(out)) == 1

    err = capsys.readouterr().err
    assert "Error: whiterose is not initialized in this directory." in err
    assert 'Run "whiterose init" first.' in err
    assert not out.exists()


def test_report_requires_a_scan(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    (tmp_path / ".whiterose").mkdir()
    out = tmp_path / "BUGS.md"
    assert _run(tmp_path, "report", "-o", str(out)) == 1
    assert "No scan results found." in capsys.readouterr().err
    assert not out.exists()


def test_markdown_report_to_file(workspace_root: Path, capsys: pytest.CaptureFixture) -> None:
    out = workspace_root / "BUGS.md"
    assert _run(workspace_root, "report", "-o", str(out)) == 0

    text = out.read_text(encoding="utf-8")
    assert text.startswith("# Bug Report")
    assert "Null reference bug" in text
    assert "| **Total** | **3** |" in text
    assert "Report written to" in capsys.readouterr().err


def test_sarif_report_is_the_latest_file(workspace_root: Path) -> None:
    latest = workspace_root / ".whiterose" / "reports" / "2024-06-01T00-00-00.sarif"
    out = workspace_root / "out.sarif"

    assert _run(workspace_root, "report", "--format", "sarif", "-o", str(out)) == 0
    assert out.read_bytes() == latest.read_bytes()


def test_report_to_stdout(workspace_root: Path, capsys: pytest.CaptureFixture) -> None:
    assert _run(workspace_root, "report", "--format", "json", "-o", "-") == 0
    data = json.loads(capsys.readouterr().out)
    assert data["summary"]["total"] == 3
    assert data["summary"]["high"] == 1

    assert _run(workspace_root, "report", "--format", "xml", "-o", "-") == 0
    assert capsys.readouterr().out.startswith("# Bug Report")


def test_report_applies_saved_status(workspace_root: Path) -> None:
    (workspace_root / ".whiterose" / "bug-status.json").write_text(
        json.dumps({"version": "1", "bugs": [{"bugId": "WR-101", "status": "fixed"}]}),
        encoding="utf-8",
    )
    out = workspace_root / "BUGS.md"
    assert _run(workspace_root, "report", "-o", str(out)) == 0
    assert "- **Status:** fixed" in out.read_text(encoding="utf-8")


def test_invalid_report_is_a_parse_error(workspace_root: Path, capsys: pytest.CaptureFixture) -> None:
    (workspace_root / ".whiterose" / "reports" / "2025-01-01T00-00-00.sarif").write_text(
        "not json", encoding="utf-8"
    )
    assert _run(workspace_root, "report", "-o", "-") == 1
    assert "Failed to parse SARIF report" in capsys.readouterr().err


def test_fix_unknown_bug(workspace_root: Path, capsys: pytest.CaptureFixture) -> None:
    assert _run(workspace_root, "fix", "WR-999") == 1
    err = capsys.readouterr().err
    assert "Bug WR-999 not found." in err
    assert "WR-101, WR-002, WR-003" in err


def test_fix_with_no_bugs(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    reports = tmp_path / ".whiterose" / "reports"
    reports.mkdir(parents=True)
    (reports / "scan.sarif").write_text('{"runs": [{"results": []}]}', encoding="utf-8")

    assert _run(tmp_path, "fix") == 0
    assert "No bugs to fix!" in capsys.readouterr().out


def test_status_command(workspace_root: Path, capsys: pytest.CaptureFixture) -> None:
    assert _run(workspace_root, "status") == 0
    out = capsys.readouterr().out
    assert "Last scan: 2024-06-01T00-00-00.sarif" in out
    assert "Findings: 3" in out
    assert "fixed=0" in out
