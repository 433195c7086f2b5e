"""Command line interface for whiterose."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from ..core.builder import load_report
from ..core.config import RuntimeConfig, load_config
from ..core.errors import WhiteroseError
from ..core.fixer import apply_fix
from ..core.models import STATUSES, Bug, ScanResult
from ..core.status import StatusStore
from ..core.workspace import Workspace
from ..reporting import DEFAULT_FORMAT, render
from ..tui import FixApp, run_interactive

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s - %(message)s"
STDOUT = "-"


def _configure_logging(verbose: bool) -> None:
    root = logging.getLogger("whiterose")
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whiterose",
        description="whiterose - review and fix findings from the last scan",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Project directory (defaults to the current directory)",
    )
    parser.add_argument("--verbose", action="store_true", default=None)

    subparsers = parser.add_subparsers(dest="command", required=True)

    report_parser = subparsers.add_parser("report", help="Generate a report from the last scan")
    report_parser.add_argument(
        "-o",
        "--output",
        default="BUGS.md",
        help="Output path, or '-' for stdout",
    )
    report_parser.add_argument(
        "--format",
        default=DEFAULT_FORMAT,
        help="Output format: markdown, sarif or json (unknown values use markdown)",
    )

    fix_parser = subparsers.add_parser("fix", help="Fix bugs interactively or by ID")
    fix_parser.add_argument("bug_id", nargs="?")
    fix_parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        default=None,
        help="Show proposed fixes without applying",
    )

    subparsers.add_parser("status", help="Show workspace and fix status")

    return parser


def _write_output(output: str, content: str) -> None:
    if output == STDOUT:
        print(content, end="" if content.endswith("\n") else "\n")
        return
    path = Path(output)
    path.write_text(content, encoding="utf-8", newline="")
    print(f"Report written to {path}", file=sys.stderr)


def _load_latest(workspace: Workspace) -> ScanResult:
    result = load_report(workspace.latest_report())
    StatusStore.load(workspace.status_path).apply_to(result.bugs)
    return result


def _find_bug(bugs: Sequence[Bug], bug_id: str) -> Bug | None:
    for bug in bugs:
        if bug.id == bug_id or bug.id.lower() == bug_id.lower():
            return bug
    return None


def _report(args: argparse.Namespace, workspace: Workspace) -> int:
    result = _load_latest(workspace)
    _write_output(args.output, render(result, args.format))
    return 0


def _fix(args: argparse.Namespace, workspace: Workspace, config: RuntimeConfig) -> int:
    result = _load_latest(workspace)
    bugs = list(result.bugs)
    if not bugs:
        print("No bugs to fix!")
        return 0

    focus = None
    if args.bug_id:
        focus = _find_bug(bugs, args.bug_id)
        if focus is None:
            print(f"Error: Bug {args.bug_id} not found.", file=sys.stderr)
            print(f"Available bugs: {', '.join(bug.id for bug in bugs)}", file=sys.stderr)
            return 1

    store = StatusStore.load(workspace.status_path)
    previews: List[str] = []

    async def apply(bug: Bug) -> None:
        outcome = await apply_fix(bug, root=workspace.root, dry_run=config.dry_run, store=store)
        if config.dry_run and outcome.diff:
            previews.append(outcome.diff)

    app = FixApp(
        bugs,
        apply,
        dry_run=config.dry_run,
        done_delay=config.done_delay,
        focus=focus,
    )
    asyncio.run(run_interactive(app))
    for diff in previews:
        print(diff, end="" if diff.endswith("\n") else "\n")
    return 0


def _status(workspace: Workspace) -> int:
    workspace.require_initialized()
    print(f"Workspace: {workspace.marker}")
    reports = workspace.reports()
    if not reports:
        print("Last scan: none (run \"whiterose scan\")")
    else:
        latest = reports[0]
        print(f"Last scan: {latest.name}")
        try:
            result = load_report(latest)
        except WhiteroseError as exc:
            logger.warning("%s", exc)
        else:
            print(f"Findings: {result.summary.total}")
    counts = StatusStore.load(workspace.status_path).counts()
    print("Fix status: " + ", ".join(f"{status}={counts[status]}" for status in STATUSES))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(
            cli_verbose=args.verbose,
            cli_dry_run=getattr(args, "dry_run", None),
        )
        _configure_logging(config.verbose)
        workspace = Workspace(args.root or Path.cwd())

        if args.command == "report":
            return _report(args, workspace)
        if args.command == "fix":
            return _fix(args, workspace, config)
        if args.command == "status":
            return _status(workspace)

        parser.error("Unsupported command")
    except WhiteroseError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if exc.hint:
            print(exc.hint, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
