"""Markdown reporting."""
from __future__ import annotations

from pathlib import PurePosixPath
from typing import List, Sequence

from ..core.models import SEVERITIES, Bug, ScanResult
from ..core.utils import title_case

_LANGUAGES = {
    ".py": "python",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".rb": "ruby",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".php": "php",
    ".kt": "kotlin",
    ".swift": "swift",
    ".sh": "bash",
}


def _language(path: str) -> str:
    return _LANGUAGES.get(PurePosixPath(path).suffix.lower(), "")


def _badge(bug: Bug) -> str:
    overall = bug.confidence.overall
    if not isinstance(overall, str) or not overall:
        return ""
    return f"`{overall.upper()} CONFIDENCE`"


def _summary_table(result: ScanResult) -> List[str]:
    summary = result.summary
    lines = ["| Severity | Count |", "| --- | --- |"]
    for severity in SEVERITIES:
        lines.append(f"| {severity.capitalize()} | {getattr(summary, severity)} |")
    lines.append(f"| **Total** | **{summary.total}** |")
    return lines


def _bug_section(bug: Bug) -> List[str]:
    badge = _badge(bug)
    heading = f"#### {bug.id}: {bug.title}"
    if badge:
        heading = f"{heading} {badge}"
    lines = [
        heading,
        "",
        f"- **Location:** `{bug.location}`",
        f"- **Category:** {title_case(bug.category)}",
        f"- **Status:** {bug.status}",
        "",
    ]
    if bug.description and bug.description != bug.title:
        lines.extend([bug.description, ""])
    if bug.code_path:
        lines.extend(["**Code Path:**", ""])
        for step in bug.code_path:
            lines.append(f"{step.step}. `{step.file}:{step.line}` {step.explanation}".rstrip())
            if step.code:
                lines.extend(["", f"   ```{_language(step.file)}", f"   {step.code}", "   ```"])
        lines.append("")
    if bug.evidence:
        lines.extend(["**Evidence:**", ""])
        lines.extend(f"- {item}" for item in bug.evidence)
        lines.append("")
    if bug.suggested_fix:
        lines.extend(
            [
                "**Suggested Fix:**",
                "",
                f"```{_language(bug.file)}",
                bug.suggested_fix,
                "```",
                "",
            ]
        )
    return lines


def _severity_groups(bugs: Sequence[Bug]) -> List[str]:
    lines: List[str] = []
    for severity in SEVERITIES:
        group = [bug for bug in bugs if bug.severity == severity]
        if not group:
            continue
        lines.extend([f"### {severity.capitalize()} ({len(group)})", ""])
        for bug in group:
            lines.extend(_bug_section(bug))
    return lines


def to_markdown(result: ScanResult) -> str:
    """Render a scan result as a Markdown bug report grouped by severity."""

    summary = result.summary
    lines: List[str] = [
        "# Bug Report",
        "",
        "> Generated by whiterose",
        "",
        "| Scan | Value |",
        "| --- | --- |",
        f"| ID | {result.id} |",
        f"| Timestamp | {result.timestamp.isoformat()} |",
        f"| Scan Type | {result.scan_type} |",
        f"| Files Scanned | {result.files_scanned} |",
        f"| Duration | {result.duration} ms |",
        "",
        "## Summary",
        "",
    ]
    lines.extend(_summary_table(result))
    lines.extend(
        ["", f"Verified bugs: {summary.bugs} · Smells: {summary.smells}", ""]
    )
    if not result.bugs:
        lines.append("No findings found. Your codebase looks clean.")
        return "\n".join(lines) + "\n"

    bugs = [bug for bug in result.bugs if bug.kind != "smell"]
    smells = [bug for bug in result.bugs if bug.kind == "smell"]
    if bugs:
        lines.extend(["## Bugs", ""])
        lines.extend(_severity_groups(bugs))
    if smells:
        lines.extend(["## Smells", ""])
        lines.extend(_severity_groups(smells))
    return "\n".join(lines).rstrip("\n") + "\n"


__all__ = ["to_markdown"]
