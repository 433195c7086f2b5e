"""Locate the whiterose workspace and its stored scan reports."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .errors import PreconditionError

logger = logging.getLogger(__name__)

MARKER_DIR = ".whiterose"
REPORTS_DIR = "reports"
REPORT_SUFFIX = ".sarif"
STATUS_FILE = "bug-status.json"


@dataclass(frozen=True)
class Workspace:
    """A project directory that may hold a ``.whiterose`` marker."""

    root: Path

    @property
    def marker(self) -> Path:
        return self.root / MARKER_DIR

    @property
    def reports_dir(self) -> Path:
        return self.marker / REPORTS_DIR

    @property
    def status_path(self) -> Path:
        return self.marker / STATUS_FILE

    def is_initialized(self) -> bool:
        return self.marker.is_dir()

    def require_initialized(self) -> None:
        if not self.is_initialized():
            raise PreconditionError(
                "whiterose is not initialized in this directory.",
                hint='Run "whiterose init" first.',
            )

    def reports(self) -> List[Path]:
        """Stored reports, newest (by name) first."""

        if not self.reports_dir.is_dir():
            return []
        found = [
            path
            for path in self.reports_dir.iterdir()
            if path.name.endswith(REPORT_SUFFIX) and path.is_file()
        ]
        return sorted(found, key=lambda path: path.name, reverse=True)

    def latest_report(self) -> Path:
        self.require_initialized()
        reports = self.reports()
        if not reports:
            raise PreconditionError(
                "No scan results found.",
                hint='Run "whiterose scan" first.',
            )
        logger.debug("Selected report %s out of %d", reports[0], len(reports))
        return reports[0]


__all__ = ["Workspace", "MARKER_DIR", "REPORTS_DIR", "REPORT_SUFFIX", "STATUS_FILE"]
