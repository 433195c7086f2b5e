"""Core data models for whiterose."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

SEVERITIES = ("critical", "high", "medium", "low")
KINDS = ("bug", "smell")
CONFIDENCE_LEVELS = ("high", "medium", "low")
STATUSES = ("open", "fixed", "false-positive", "wont-fix")

DEFAULT_CATEGORY = "logic-error"
UNKNOWN_FILE = "unknown"


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class ConfidenceScore:
    """How much a finding can be trusted."""

    overall: str = "high"
    code_path_validity: float = 0.9
    reachability: float = 0.9
    intent_violation: bool = False
    static_tool_signal: bool = False
    adversarial_survived: bool = True


@dataclass(frozen=True)
class CodePathStep:
    """One location on the execution path implicated by a finding."""

    step: int
    file: str
    line: int
    code: str = ""
    explanation: str = ""


@dataclass
class Bug:
    """A single finding. Only ``status`` changes after creation."""

    id: str
    title: str
    description: str
    file: str = UNKNOWN_FILE
    line: int = 0
    end_line: Optional[int] = None
    kind: str = "bug"
    severity: str = "low"
    category: str = DEFAULT_CATEGORY
    confidence: ConfidenceScore = field(default_factory=ConfidenceScore)
    code_path: Sequence[CodePathStep] = field(default_factory=tuple)
    evidence: Sequence[str] = field(default_factory=tuple)
    suggested_fix: Optional[str] = None
    created_at: datetime = field(default_factory=_utc_now)
    status: str = "open"

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"

    def transition(self, status: str) -> None:
        if status not in STATUSES:
            raise ValueError(f"Unknown bug status '{status}'")
        self.status = status


@dataclass(frozen=True)
class Summary:
    """Finding counts derived from a list of bugs."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    total: int = 0
    bugs: int = 0
    smells: int = 0

    @classmethod
    def of(cls, bugs: Sequence[Bug]) -> "Summary":
        counts: Dict[str, int] = {severity: 0 for severity in SEVERITIES}
        kinds: Dict[str, int] = {kind: 0 for kind in KINDS}
        for bug in bugs:
            if bug.severity in counts:
                counts[bug.severity] += 1
            if bug.kind in kinds:
                kinds[bug.kind] += 1
        return cls(
            total=len(bugs),
            bugs=kinds["bug"],
            smells=kinds["smell"],
            **counts,
        )


@dataclass(frozen=True)
class ScanResult:
    """Aggregate result of a scan, or of a persisted report read back."""

    id: str
    bugs: Sequence[Bug]
    timestamp: datetime = field(default_factory=_utc_now)
    scan_type: str = "full"
    files_scanned: int = 0
    duration: int = 0
    source: Optional[str] = field(default=None, repr=False, compare=False)

    @property
    def summary(self) -> Summary:
        return Summary.of(self.bugs)


__all__ = [
    "Bug",
    "CodePathStep",
    "ConfidenceScore",
    "ScanResult",
    "Summary",
    "SEVERITIES",
    "KINDS",
    "CONFIDENCE_LEVELS",
    "STATUSES",
    "DEFAULT_CATEGORY",
    "UNKNOWN_FILE",
]
