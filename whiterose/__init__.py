"""whiterose review and remediation package."""

from .core.models import Bug, CodePathStep, ConfidenceScore, ScanResult, Summary

__all__ = [
    "Bug",
    "CodePathStep",
    "ConfidenceScore",
    "ScanResult",
    "Summary",
]

__version__ = "0.1.0"
