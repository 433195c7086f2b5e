import json
from pathlib import Path

import pytest

from whiterose.core import builder
from whiterose.core.errors import ParseError
from whiterose.core.models import CONFIDENCE_LEVELS, SEVERITIES


def test_build_from_sarif_converts_every_result(sarif_doc: dict) -> None:
    result = builder.build_from_sarif(sarif_doc)

    assert len(result.bugs) == 3
    assert result.summary.total == 3
    assert result.id == "report"
    assert result.files_scanned == 0
    assert result.duration == 0

    first = result.bugs[0]
    assert first.id == "WR-101"
    assert first.title == "Null reference bug"
    assert first.description.startswith("**Null reference bug**")
    assert first.file == "src/app.py"
    assert first.line == 2
    assert first.kind == "bug"
    assert first.category == "logic-error"
    assert first.status == "open"
    assert first.confidence.overall == "high"
    assert first.confidence.adversarial_survived is True


def test_missing_fields_fall_back_to_defaults(sarif_doc: dict) -> None:
    result = builder.build_from_sarif(sarif_doc)
    second, third = result.bugs[1], result.bugs[2]

    assert second.id == "WR-002"
    assert third.id == "WR-003"
    assert second.file == "unknown"
    assert second.line == 0
    assert second.description == "Loose comparison"
    assert second.code_path == ()
    assert second.evidence == ()
    assert second.suggested_fix is None


def test_severity_mapping_never_yields_critical() -> None:
    levels = ["error", "warning", "note", "none", None, 3, "ERROR"]
    doc = {"runs": [{"results": [{"level": level} for level in levels]}]}
    severities = [bug.severity for bug in builder.build_from_sarif(doc).bugs]

    assert severities == ["high", "medium", "low", "low", "low", "low", "low"]
    assert "critical" not in severities


def test_summary_counts_match_bugs(sarif_doc: dict) -> None:
    result = builder.build_from_sarif(sarif_doc)
    summary = result.summary

    for severity in SEVERITIES:
        expected = sum(1 for bug in result.bugs if bug.severity == severity)
        assert getattr(summary, severity) == expected
    assert summary.bugs == 3
    assert summary.smells == 0


@pytest.mark.parametrize(
    "doc",
    [
        {},
        [],
        "text",
        {"runs": None},
        {"runs": [None, {"results": "nope"}]},
        {"runs": [{"results": [None, 7, {"locations": "bad", "message": []}]}]},
    ],
)
def test_malformed_substructures_do_not_raise(doc: object) -> None:
    result = builder.build_from_sarif(doc)
    assert result.summary.total == len(result.bugs)


def test_non_dict_results_still_become_bugs() -> None:
    doc = {"runs": [{"results": [None, "x", {"message": {"text": "real"}}]}]}
    bugs = builder.build_from_sarif(doc).bugs

    assert [bug.id for bug in bugs] == ["WR-001", "WR-002", "WR-003"]
    assert bugs[0].title == "Unknown bug"
    assert bugs[2].title == "real"


def test_results_from_all_runs_are_flattened() -> None:
    doc = {
        "runs": [
            {"results": [{"message": {"text": "a"}}]},
            {"results": [{"message": {"text": "b"}}, {"message": {"text": "c"}}]},
        ]
    }
    bugs = builder.build_from_sarif(doc).bugs
    assert [bug.title for bug in bugs] == ["a", "b", "c"]
    assert bugs[2].id == "WR-003"


def test_properties_and_code_flows_are_read_back() -> None:
    doc = {
        "runs": [
            {
                "results": [
                    {
                        "ruleId": "WR-009",
                        "level": "warning",
                        "message": {"text": "Smelly"},
                        "locations": [
                            {
                                "physicalLocation": {
                                    "artifactLocation": {"uri": "a.py"},
                                    "region": {"startLine": 3, "endLine": 5},
                                }
                            }
                        ],
                        "codeFlows": [
                            {
                                "threadFlows": [
                                    {
                                        "locations": [
                                            {
                                                "location": {
                                                    "physicalLocation": {
                                                        "artifactLocation": {"uri": "a.py"},
                                                        "region": {"startLine": 1},
                                                    }
                                                },
                                                "message": {"text": "starts here"},
                                            }
                                        ]
                                    }
                                ]
                            }
                        ],
                        "properties": {
                            "kind": "smell",
                            "category": "null-reference",
                            "confidence": "low",
                            "reachability": 0.4,
                            "evidence": ["seen twice", 4],
                            "suggestedFix": "return None",
                        },
                    }
                ]
            }
        ]
    }
    bug = builder.build_from_sarif(doc).bugs[0]

    assert bug.kind == "smell"
    assert bug.category == "null-reference"
    assert bug.end_line == 5
    assert bug.confidence.overall == "low"
    assert bug.confidence.reachability == 0.4
    assert bug.confidence.code_path_validity == 0.9
    assert bug.evidence == ("seen twice",)
    assert bug.suggested_fix == "return None"
    assert len(bug.code_path) == 1
    assert bug.code_path[0].explanation == "starts here"
    assert bug.code_path[0].step == 1


def test_parse_sarif_rejects_invalid_json() -> None:
    with pytest.raises(ParseError) as excinfo:
        builder.parse_sarif("{not json", origin="broken.sarif")
    assert "broken.sarif" in str(excinfo.value)


def test_load_report_keeps_source_text(tmp_path: Path, sarif_doc: dict) -> None:
    text = json.dumps(sarif_doc, indent=4).replace("\n", "\r\n")
    path = tmp_path / "scan.sarif"
    path.write_bytes(text.encode("utf-8"))

    result = builder.load_report(path)
    assert result.source == text
    assert len(result.bugs) == 3


def test_load_report_rejects_binary(tmp_path: Path) -> None:
    path = tmp_path / "scan.sarif"
    path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(ParseError):
        builder.load_report(path)


@pytest.mark.parametrize(
    "props",
    [
        {"confidence": "bogus", "codePathValidity": 7, "reachability": -3},
        {"confidence": ["high"], "codePathValidity": 1.01, "reachability": -0.1},
        {"confidence": "", "codePathValidity": True, "reachability": "0.5"},
    ],
)
def test_out_of_range_confidence_falls_back(props: dict) -> None:
    doc = {"runs": [{"results": [{"properties": props}]}]}
    confidence = builder.build_from_sarif(doc).bugs[0].confidence

    assert confidence.overall == "high"
    assert confidence.code_path_validity == 0.9
    assert confidence.reachability == 0.9


def test_confidence_bounds_are_accepted() -> None:
    props = {"confidence": "medium", "codePathValidity": 0, "reachability": 1}
    doc = {"runs": [{"results": [{"properties": props}]}]}
    confidence = builder.build_from_sarif(doc).bugs[0].confidence

    assert confidence.overall in CONFIDENCE_LEVELS
    assert confidence.overall == "medium"
    assert confidence.code_path_validity == 0.0
    assert confidence.reachability == 1.0
