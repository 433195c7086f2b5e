"""Confirm-and-apply state machine for a single fix."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from ..core.models import Bug

logger = logging.getLogger(__name__)

CONFIRM = "confirm"
APPLYING = "applying"
DONE = "done"
ERROR = "error"

CANCELLED = "cancelled"

ApplyFn = Callable[[], Awaitable[Any]]


class FixConfirmation:
    """Drives ``confirm -> applying -> done | error`` for one bug.

    ``apply`` runs at most once per instance. Keys that arrive while the fix
    is applying are dropped. After ``done`` the controller exits by itself
    once ``done_delay`` seconds have passed; ``error`` waits for any key.
    Exits are reported through ``on_exit`` and :meth:`wait` as one of
    ``"cancelled"``, ``"done"`` or ``"error"``.
    """

    def __init__(
        self,
        bug: Bug,
        apply: ApplyFn,
        *,
        dry_run: bool = False,
        done_delay: float = 1.5,
        on_change: Optional[Callable[[], None]] = None,
        on_exit: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.bug = bug
        self.dry_run = dry_run
        self.done_delay = done_delay
        self.state = CONFIRM
        self.error: Optional[str] = None
        self.outcome: Optional[str] = None
        self.history: List[str] = [CONFIRM]
        self._apply = apply
        self._on_change = on_change
        self._on_exit = on_exit
        self._task: Optional[asyncio.Task[None]] = None
        self._exited = asyncio.Event()

    @property
    def busy(self) -> bool:
        return self.state == APPLYING

    def handle_key(self, key: str) -> None:
        if self.outcome is not None:
            return
        if self.state == CONFIRM:
            if key in ("y", "enter"):
                self._accept()
            elif key in ("n", "escape"):
                self._exit(CANCELLED)
        elif self.state == ERROR:
            self._exit(ERROR)

    def _accept(self) -> None:
        self._enter(APPLYING)
        self._task = asyncio.ensure_future(self._run())

    async def _run(self) -> None:
        try:
            await self._apply()
        except Exception as exc:
            self.error = str(exc) or "Unknown error"
            logger.debug("Fix for %s failed: %s", self.bug.id, self.error)
            self._enter(ERROR)
            return
        self._enter(DONE)
        await asyncio.sleep(self.done_delay)
        self._exit(DONE)

    def _enter(self, state: str) -> None:
        self.state = state
        self.history.append(state)
        if self._on_change is not None:
            self._on_change()

    def _exit(self, outcome: str) -> None:
        if self.outcome is not None:
            return
        self.outcome = outcome
        self._exited.set()
        if self._on_exit is not None:
            self._on_exit(outcome)

    async def wait(self) -> Optional[str]:
        """Block until the controller exits and return its outcome."""

        await self._exited.wait()
        return self.outcome

    async def settle(self) -> None:
        """Wait for an in-flight apply to finish, if one was started."""

        if self._task is not None:
            await self._task

    def render(self) -> List[str]:
        bug = self.bug
        lines = [f"Fix: {bug.title}", f"File: {bug.location}", "", "Proposed Fix:"]
        if bug.suggested_fix:
            lines.extend(f"  {line}" for line in bug.suggested_fix.split("\n"))
        else:
            lines.append("  No suggested fix available.")
        lines.append("")
        if self.state == CONFIRM:
            if self.dry_run:
                lines.append("DRY RUN MODE - Changes will NOT be applied")
            lines.append("Apply this fix? [y]es / [n]o")
        elif self.state == APPLYING:
            lines.append("Applying fix...")
        elif self.state == DONE:
            lines.append("✓ Dry run finished, no files changed." if self.dry_run else "✓ Fix applied successfully!")
        else:
            lines.extend(["✗ Failed to apply fix", self.error or "", "", "Press any key to go back"])
        return lines


__all__ = ["FixConfirmation", "CONFIRM", "APPLYING", "DONE", "ERROR", "CANCELLED"]
