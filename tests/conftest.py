import json
from pathlib import Path

import pytest

from whiterose.core import config


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "no-config.toml")
    for name in ("WHITEROSE_VERBOSE", "WHITEROSE_DONE_DELAY", "WHITEROSE_DRY_RUN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sarif_doc() -> dict:
    return {
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "version": "2.1.0",
        "runs": [
            {
                "tool": {"driver": {"name": "whiterose"}},
                "results": [
                    {
                        "ruleId": "WR-101",
                        "level": "error",
                        "message": {
                            "text": "Null reference bug",
                            "markdown": "**Null reference bug**\n\nuser may be None",
                        },
                        "locations": [
                            {
                                "physicalLocation": {
                                    "artifactLocation": {"uri": "src/app.py"},
                                    "region": {"startLine": 2},
                                }
                            }
                        ],
                    },
                    {
                        "level": "warning",
                        "message": {"text": "Loose comparison"},
                    },
                    {
                        "message": {"text": "Unused result"},
                        "locations": [],
                    },
                ],
            }
        ],
    }


@pytest.fixture
def workspace_root(tmp_path: Path, sarif_doc: dict) -> Path:
    root = tmp_path / "project"
    reports = root / ".whiterose" / "reports"
    reports.mkdir(parents=True)
    (reports / "2024-01-01T00-00-00.sarif").write_text(json.dumps({"runs": []}), encoding="utf-8")
    (reports / "2024-06-01T00-00-00.sarif").write_text(
        json.dumps(sarif_doc, indent=2), encoding="utf-8"
    )
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text(
        "def name(user):\n    return user.name\n", encoding="utf-8"
    )
    return root
