"""Build scan results from SARIF documents.

Conversion is deliberately lenient: a missing or ill-typed field never raises,
it falls back to the model default. Only text that is not JSON at all is an
error (:class:`~whiterose.core.errors.ParseError`).
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator, List, Optional

from .errors import ParseError
from .models import (
    CONFIDENCE_LEVELS,
    DEFAULT_CATEGORY,
    KINDS,
    UNKNOWN_FILE,
    Bug,
    CodePathStep,
    ConfidenceScore,
    ScanResult,
)
from .utils import now_utc

logger = logging.getLogger(__name__)

_LEVEL_TO_SEVERITY = {
    "error": "high",
    "warning": "medium",
}

_DEFAULT_CONFIDENCE = ConfidenceScore()


def _dig(node: Any, *path: str | int) -> Any:
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or key >= len(node):
                return None
            node = node[key]
        else:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        if node is None:
            return None
    return node


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value:
        return value
    return default


def _int(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value:
        return value
    return default


def _ratio(value: Any, default: float) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 1:
        return float(value)
    return default


def _flag(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default


def severity_for_level(level: Any) -> str:
    """Map a SARIF ``level`` to a severity. ``critical`` is never produced."""

    if isinstance(level, str):
        return _LEVEL_TO_SEVERITY.get(level, "low")
    return "low"


def fallback_id(index: int) -> str:
    return f"WR-{index + 1:03d}"


def _level(value: Any) -> str:
    if value in CONFIDENCE_LEVELS:
        return value
    return _DEFAULT_CONFIDENCE.overall


def _confidence(props: Any) -> ConfidenceScore:
    if not isinstance(props, dict):
        return _DEFAULT_CONFIDENCE
    return ConfidenceScore(
        overall=_level(props.get("confidence")),
        code_path_validity=_ratio(
            props.get("codePathValidity"), _DEFAULT_CONFIDENCE.code_path_validity
        ),
        reachability=_ratio(props.get("reachability"), _DEFAULT_CONFIDENCE.reachability),
        intent_violation=_flag(
            props.get("intentViolation"), _DEFAULT_CONFIDENCE.intent_violation
        ),
        static_tool_signal=_flag(
            props.get("staticToolSignal"), _DEFAULT_CONFIDENCE.static_tool_signal
        ),
        adversarial_survived=_flag(
            props.get("adversarialSurvived"), _DEFAULT_CONFIDENCE.adversarial_survived
        ),
    )


def _code_path(result: Any) -> tuple[CodePathStep, ...]:
    locations = _dig(result, "codeFlows", 0, "threadFlows", 0, "locations")
    if not isinstance(locations, list):
        return ()
    steps: List[CodePathStep] = []
    for idx, entry in enumerate(locations):
        physical = _dig(entry, "location", "physicalLocation")
        steps.append(
            CodePathStep(
                step=idx + 1,
                file=_text(_dig(physical, "artifactLocation", "uri"), ""),
                line=_int(_dig(physical, "region", "startLine"), 0),
                code=_text(_dig(physical, "region", "snippet", "text"), ""),
                explanation=_text(_dig(entry, "message", "text"), ""),
            )
        )
    return tuple(steps)


def _evidence(props: Any) -> tuple[str, ...]:
    items = _dig(props, "evidence")
    if not isinstance(items, list):
        return ()
    return tuple(item for item in items if isinstance(item, str))


def bug_from_result(result: Any, index: int) -> Bug:
    """Convert one SARIF result (0-based ``index``) into a :class:`Bug`."""

    physical = _dig(result, "locations", 0, "physicalLocation")
    props = _dig(result, "properties")
    text = _text(_dig(result, "message", "text"), "")
    end_line = _int(_dig(physical, "region", "endLine"), 0)
    kind = _text(_dig(props, "kind"), "bug")
    return Bug(
        id=_text(_dig(result, "ruleId"), fallback_id(index)),
        title=text or "Unknown bug",
        description=_text(_dig(result, "message", "markdown"), text),
        file=_text(_dig(physical, "artifactLocation", "uri"), UNKNOWN_FILE),
        line=_int(_dig(physical, "region", "startLine"), 0),
        end_line=end_line or None,
        kind=kind if kind in KINDS else "bug",
        severity=severity_for_level(_dig(result, "level")),
        category=_text(_dig(props, "category"), DEFAULT_CATEGORY),
        confidence=_confidence(props),
        code_path=_code_path(result),
        evidence=_evidence(props),
        suggested_fix=_text(_dig(props, "suggestedFix"), "") or None,
    )


def _iter_results(doc: Any) -> Iterator[Any]:
    runs = _dig(doc, "runs")
    if not isinstance(runs, list):
        return
    for run in runs:
        results = _dig(run, "results")
        if isinstance(results, list):
            yield from results


def build_from_sarif(doc: Any, *, source: Optional[str] = None) -> ScanResult:
    """Normalize a decoded SARIF document into a :class:`ScanResult`.

    Scan metadata that SARIF does not carry is filled with placeholders
    (``files_scanned=0``, ``duration=0``).
    """

    bugs = [bug_from_result(result, index) for index, result in enumerate(_iter_results(doc))]
    logger.debug("Converted %d SARIF results", len(bugs))
    return ScanResult(
        id="report",
        bugs=tuple(bugs),
        timestamp=now_utc(),
        scan_type="full",
        files_scanned=0,
        duration=0,
        source=source,
    )


def parse_sarif(text: str, *, origin: Path | str = "<string>") -> ScanResult:
    try:
        doc = json.loads(text.lstrip("\ufeff"))
    except ValueError as exc:
        raise ParseError(origin, str(exc)) from exc
    return build_from_sarif(doc, source=text)


def load_report(path: Path) -> ScanResult:
    """Read a SARIF file and convert it, keeping the original text."""

    logger.debug("Loading report %s", path)
    # read_bytes keeps line endings untouched for passthrough output
    try:
        text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(path, "not UTF-8 text") from exc
    return parse_sarif(text, origin=path)


__all__ = [
    "build_from_sarif",
    "bug_from_result",
    "fallback_id",
    "load_report",
    "parse_sarif",
    "severity_for_level",
]
