"""SARIF output generation."""
from __future__ import annotations

from typing import Any, Dict, List

from .. import __version__
from ..core.models import Bug, ScanResult
from ..core.utils import json_dump, title_case

SARIF_SCHEMA = (
    "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"
)

_SEVERITY_TO_LEVEL = {
    "critical": "error",
    "high": "error",
    "medium": "warning",
    "low": "note",
}


def _location(file: str, line: int, end_line: int | None = None) -> Dict[str, Any]:
    region: Dict[str, Any] = {"startLine": line}
    if end_line is not None:
        region["endLine"] = end_line
    return {
        "physicalLocation": {
            "artifactLocation": {"uri": file},
            "region": region,
        }
    }


def _properties(bug: Bug) -> Dict[str, Any]:
    confidence = bug.confidence
    props: Dict[str, Any] = {
        "kind": bug.kind,
        "category": bug.category,
        "confidence": confidence.overall,
        "codePathValidity": confidence.code_path_validity,
        "reachability": confidence.reachability,
        "intentViolation": confidence.intent_violation,
        "staticToolSignal": confidence.static_tool_signal,
        "adversarialSurvived": confidence.adversarial_survived,
        "evidence": list(bug.evidence),
    }
    if bug.suggested_fix:
        props["suggestedFix"] = bug.suggested_fix
    return props


def _result(bug: Bug) -> Dict[str, Any]:
    markdown = [f"**{bug.title}**", "", bug.description]
    if bug.evidence:
        markdown.extend(["", "**Evidence:**"])
        markdown.extend(f"- {item}" for item in bug.evidence)
    item: Dict[str, Any] = {
        "ruleId": bug.id,
        "level": _SEVERITY_TO_LEVEL.get(bug.severity, "warning"),
        "message": {"text": bug.title, "markdown": "\n".join(markdown)},
        "locations": [_location(bug.file, bug.line, bug.end_line)],
        "properties": _properties(bug),
    }
    if bug.code_path:
        steps = []
        for step in bug.code_path:
            location = _location(step.file, step.line)
            if step.code:
                location["physicalLocation"]["region"]["snippet"] = {"text": step.code}
            steps.append({"location": location, "message": {"text": step.explanation}})
        item["codeFlows"] = [{"threadFlows": [{"locations": steps}]}]
    return item


def _rules(bugs: List[Bug]) -> List[Dict[str, Any]]:
    rules: List[Dict[str, Any]] = []
    seen = set()
    for bug in bugs:
        if bug.category in seen:
            continue
        seen.add(bug.category)
        name = title_case(bug.category)
        rules.append(
            {
                "id": bug.category,
                "name": name,
                "shortDescription": {"text": name},
                "defaultConfiguration": {"level": "warning"},
                "properties": {"category": bug.category},
            }
        )
    return rules


def build_sarif(result: ScanResult) -> Dict[str, Any]:
    """Serialize a scan result into a SARIF v2.1.0 document."""

    bugs = list(result.bugs)
    return {
        "$schema": SARIF_SCHEMA,
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "whiterose",
                        "version": __version__,
                        "rules": _rules(bugs),
                    }
                },
                "results": [_result(bug) for bug in bugs],
                "invocations": [
                    {
                        "executionSuccessful": True,
                        "startTimeUtc": result.timestamp.isoformat(),
                    }
                ],
            }
        ],
    }


def to_sarif(result: ScanResult) -> str:
    """SARIF text for ``result``.

    A result read from a SARIF file returns that file's text unchanged; only
    results without a source document are serialized from the model.
    """

    if result.source is not None:
        return result.source
    return json_dump(build_sarif(result))


__all__ = ["build_sarif", "to_sarif", "SARIF_SCHEMA"]
