"""Interactive fix session: dashboard, bug list, bug detail and fix screens."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence

from ..core.models import SEVERITIES, Bug
from ..core.utils import title_case
from .confirm import DONE, FixConfirmation
from .navigator import BACK, SELECT, ListNavigator

logger = logging.getLogger(__name__)

DASHBOARD = "dashboard"
LIST = "list"
DETAIL = "detail"
FIX = "fix"

BugApplyFn = Callable[[Bug], Awaitable[Any]]


@dataclass(frozen=True)
class MenuItem:
    key: Optional[str]
    label: str
    count: int


def build_menu(bugs: Sequence[Bug]) -> List[MenuItem]:
    """Dashboard filters with counts: everything, kinds, severities, categories."""

    verified = [bug for bug in bugs if bug.kind == "bug"]
    items = [
        MenuItem(None, "All Findings", len(bugs)),
        MenuItem("kind:bug", "Verified Bugs", len(verified)),
        MenuItem("kind:smell", "Smells", len(bugs) - len(verified)),
    ]
    for severity in SEVERITIES:
        count = sum(1 for bug in verified if bug.severity == severity)
        items.append(MenuItem(severity, severity.capitalize(), count))
    categories: Dict[str, int] = {}
    for bug in verified:
        categories[bug.category] = categories.get(bug.category, 0) + 1
    for category, count in categories.items():
        items.append(MenuItem(f"category:{category}", title_case(category), count))
    return items


def filter_bugs(bugs: Sequence[Bug], key: Optional[str]) -> List[Bug]:
    if key is None:
        return list(bugs)
    if key.startswith("kind:"):
        kind = key.split(":", 1)[1]
        return [bug for bug in bugs if bug.kind == kind]
    if key.startswith("category:"):
        category = key.split(":", 1)[1]
        return [bug for bug in bugs if bug.category == category]
    return [bug for bug in bugs if bug.severity == key and bug.kind == "bug"]


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def _list_row(bug: Bug) -> str:
    return (
        f"{bug.id:<8} {bug.severity.upper():<9} {bug.confidence.overall.upper():<7} "
        f"{_truncate(bug.title, 50)}"
    )


class FixApp:
    """Screen state for the interactive fixer.

    With ``focus`` the session opens straight on the fix screen for that bug
    and closes as soon as the confirmation ends.
    """

    def __init__(
        self,
        bugs: Sequence[Bug],
        apply: BugApplyFn,
        *,
        dry_run: bool = False,
        done_delay: float = 1.5,
        focus: Optional[Bug] = None,
    ) -> None:
        self.bugs = list(bugs)
        self.dry_run = dry_run
        self.done_delay = done_delay
        self.on_change: Optional[Callable[[], None]] = None
        self.closed = asyncio.Event()
        self._apply = apply
        self._single = focus is not None
        self.filter_key: Optional[str] = None
        self.filtered: List[Bug] = list(self.bugs)
        self.selected = 0
        self.menu = ListNavigator(build_menu(self.bugs))
        self.navigator: ListNavigator[Bug] = ListNavigator(self.filtered)
        self.confirmation: Optional[FixConfirmation] = None
        self.screen = DASHBOARD
        if focus is not None:
            self.filtered = [focus]
            self._start_fix()

    @property
    def finished(self) -> bool:
        return self.closed.is_set()

    @property
    def current(self) -> Optional[Bug]:
        if 0 <= self.selected < len(self.filtered):
            return self.filtered[self.selected]
        return None

    def close(self) -> None:
        self.closed.set()

    async def settle(self) -> None:
        if self.confirmation is not None:
            await self.confirmation.settle()

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def handle_key(self, key: str) -> None:
        if self.finished:
            return
        if key == "q" and not (self.confirmation is not None and self.confirmation.busy):
            self.close()
            return
        handler = {
            DASHBOARD: self._dashboard_key,
            LIST: self._list_key,
            DETAIL: self._detail_key,
            FIX: self._fix_key,
        }[self.screen]
        handler(key)

    def _dashboard_key(self, key: str) -> None:
        if not self.bugs:
            return
        event = self.menu.handle_key(key)
        if event is None or event.kind != SELECT:
            return
        self.filter_key = event.item.key
        self.filtered = filter_bugs(self.bugs, self.filter_key)
        self.selected = 0
        self.navigator = ListNavigator(self.filtered)
        self.screen = LIST

    def _open_list(self) -> None:
        self.navigator = ListNavigator(
            self.filtered,
            cursor=self.selected,
            viewport_start=self.navigator.viewport_start,
        )
        self.screen = LIST

    def _list_key(self, key: str) -> None:
        event = self.navigator.handle_key(key)
        if event is None:
            return
        if event.kind == SELECT:
            self.selected = event.index
            self.screen = DETAIL
        elif event.kind == BACK:
            self.filter_key = None
            self.screen = DASHBOARD

    def _detail_key(self, key: str) -> None:
        if key == "f":
            self._start_fix()
        elif key in ("n", "down"):
            self.selected = min(self.selected + 1, len(self.filtered) - 1)
        elif key in ("p", "up"):
            self.selected = max(self.selected - 1, 0)
        elif key in ("b", "escape"):
            self._open_list()

    def _fix_key(self, key: str) -> None:
        if self.confirmation is not None:
            self.confirmation.handle_key(key)

    def _start_fix(self) -> None:
        bug = self.current
        if bug is None:
            return

        async def apply() -> Any:
            return await self._apply(bug)

        self.confirmation = FixConfirmation(
            bug,
            apply,
            dry_run=self.dry_run,
            done_delay=self.done_delay,
            on_change=self._changed,
            on_exit=self._fix_finished,
        )
        self.screen = FIX

    def _fix_finished(self, outcome: str) -> None:
        logger.debug("Fix confirmation ended: %s", outcome)
        self.confirmation = None
        if self._single:
            self.close()
            return
        if outcome == DONE:
            if self.selected < len(self.filtered) - 1:
                self.selected += 1
                self.screen = DETAIL
            else:
                self._open_list()
        else:
            self.screen = DETAIL
        self._changed()

    def _title(self) -> str:
        if self.screen == DASHBOARD:
            return "Dashboard"
        if self.screen == LIST:
            label = f" ({self.filter_key})" if self.filter_key else ""
            return f"Bugs{label}"
        if self.screen == DETAIL:
            return f"Bug {self.selected + 1}/{len(self.filtered)}"
        return "Confirm Fix"

    def render(self) -> List[str]:
        body = {
            DASHBOARD: self._render_dashboard,
            LIST: self._render_list,
            DETAIL: self._render_detail,
            FIX: self._render_fix,
        }[self.screen]()
        return (
            [f"whiterose - fix mode | {self._title()}", ""]
            + body
            + ["", "[q] Quit  [esc] Back  [↑↓] Navigate  [enter] Select  [f] Fix"]
        )

    def _render_dashboard(self) -> List[str]:
        if not self.bugs:
            return ["✓ No findings found!", "Your codebase looks clean."]
        summary = {item.key: item.count for item in self.menu.items}
        counts = "  ".join(f"{s.capitalize()}: {summary[s]}" for s in SEVERITIES)
        lines = ["Summary", counts, "", "Filter by"]
        lines.extend(self.menu.render(lambda item: f"{item.label} ({item.count})"))
        return lines

    def _render_list(self) -> List[str]:
        header = f"  {'ID':<8} {'Severity':<9} {'Conf.':<7} Title"
        lines = self.navigator.render(_list_row, empty_message="No bugs in this category.")
        if self.navigator.is_empty:
            return lines
        return [header] + lines + ["", "[↑↓] Navigate  [Enter] View details  [PgUp/PgDn] Page  [b] Back"]

    def _render_detail(self) -> List[str]:
        bug = self.current
        if bug is None:
            return ["No bug selected."]
        lines = [
            f"{bug.id}: {bug.title}",
            "",
            f"Severity:   {bug.severity}",
            f"Confidence: {bug.confidence.overall}",
            f"Category:   {title_case(bug.category)}",
            f"Location:   {bug.location}",
            f"Status:     {bug.status}",
            "",
            bug.description,
        ]
        if bug.code_path:
            lines.extend(["", "Code path:"])
            for step in bug.code_path:
                lines.append(f"  {step.step}. {step.file}:{step.line} {step.explanation}".rstrip())
        if bug.evidence:
            lines.extend(["", "Evidence:"])
            lines.extend(f"  - {item}" for item in bug.evidence)
        if bug.suggested_fix:
            lines.extend(["", "Suggested fix:"])
            lines.extend(f"  {line}" for line in bug.suggested_fix.split("\n"))
        lines.extend(["", "[f] Fix  [n] Next  [p] Prev  [b] Back"])
        return lines

    def _render_fix(self) -> List[str]:
        if self.confirmation is None:
            return []
        return self.confirmation.render()


class Display(Protocol):
    """Anything that can show a frame of text lines."""

    def draw(self, lines: List[str]) -> None:  # pragma: no cover - protocol
        ...


async def run_app(app: FixApp, keys: "asyncio.Queue[Optional[str]]", screen: Display) -> None:
    """Feed keys from ``keys`` into ``app`` until it closes or input ends.

    ``None`` on the queue marks the end of input; a fix that is still being
    applied at that point runs to completion first.
    """

    app.on_change = lambda: screen.draw(app.render())
    screen.draw(app.render())
    closed = asyncio.ensure_future(app.closed.wait())
    try:
        while not app.finished:
            getter = asyncio.ensure_future(keys.get())
            done, _ = await asyncio.wait({getter, closed}, return_when=asyncio.FIRST_COMPLETED)
            if getter not in done:
                getter.cancel()
                break
            key = getter.result()
            if key is None:
                await app.settle()
                break
            app.handle_key(key)
            if not app.finished:
                screen.draw(app.render())
    finally:
        closed.cancel()
        app.on_change = None


__all__ = [
    "DASHBOARD",
    "DETAIL",
    "FIX",
    "LIST",
    "Display",
    "FixApp",
    "MenuItem",
    "build_menu",
    "filter_bugs",
    "run_app",
]
