"""Cursor and viewport state for scrolling through a list of findings."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

VIEWPORT_SIZE = 10

SELECT = "select"
BACK = "back"


@dataclass(frozen=True)
class NavigationEvent:
    """Signal emitted to the caller: ``select`` an item or go ``back``."""

    kind: str
    index: Optional[int] = None
    item: Any = None


class ListNavigator(Generic[T]):
    """Cursor over ``items`` with a fixed-size viewport.

    The viewport only moves when the cursor would otherwise leave it. An
    empty list has no cursor and only accepts ``back``. ``cursor`` and
    ``viewport_start`` let a caller resume where the list was last left.
    """

    def __init__(
        self,
        items: Sequence[T],
        *,
        cursor: int = 0,
        viewport_start: int = 0,
        viewport_size: int = VIEWPORT_SIZE,
    ) -> None:
        if viewport_size < 1:
            raise ValueError("viewport_size must be at least 1")
        self.items = items
        self.viewport_size = viewport_size
        if not items:
            self.cursor: Optional[int] = None
            self.viewport_start = 0
            return
        self.cursor = min(max(cursor, 0), len(items) - 1)
        self.viewport_start = min(max(viewport_start, 0), max(0, len(items) - viewport_size))
        self._follow_cursor()

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def current(self) -> Optional[T]:
        if self.cursor is None:
            return None
        return self.items[self.cursor]

    def _follow_cursor(self) -> None:
        if self.cursor is None:
            return
        if self.cursor < self.viewport_start:
            self.viewport_start = self.cursor
        elif self.cursor >= self.viewport_start + self.viewport_size:
            self.viewport_start = self.cursor - self.viewport_size + 1

    def _move_to(self, target: int) -> None:
        if self.cursor is None:
            return
        self.cursor = min(max(target, 0), len(self.items) - 1)
        self._follow_cursor()

    def move_up(self) -> None:
        if self.cursor is not None:
            self._move_to(self.cursor - 1)

    def move_down(self) -> None:
        if self.cursor is not None:
            self._move_to(self.cursor + 1)

    def page_up(self) -> None:
        if self.cursor is not None:
            self._move_to(self.cursor - self.viewport_size)

    def page_down(self) -> None:
        if self.cursor is not None:
            self._move_to(self.cursor + self.viewport_size)

    def select(self) -> Optional[NavigationEvent]:
        if self.cursor is None:
            return None
        return NavigationEvent(SELECT, self.cursor, self.items[self.cursor])

    def back(self) -> NavigationEvent:
        return NavigationEvent(BACK)

    def handle_key(self, key: str) -> Optional[NavigationEvent]:
        if key in ("b", "escape"):
            return self.back()
        if self.is_empty:
            return None
        moves: dict[str, Callable[[], None]] = {
            "up": self.move_up,
            "down": self.move_down,
            "pageup": self.page_up,
            "pagedown": self.page_down,
        }
        if key in moves:
            moves[key]()
            return None
        if key == "enter":
            return self.select()
        return None

    def visible(self) -> Iterator[Tuple[int, T]]:
        stop = self.viewport_start + self.viewport_size
        for index in range(self.viewport_start, min(stop, len(self.items))):
            yield index, self.items[index]

    def render(
        self,
        format_item: Callable[[T], str],
        *,
        empty_message: str = "No items.",
    ) -> List[str]:
        if self.is_empty:
            return [empty_message, "[b] Back"]
        lines = []
        for index, item in self.visible():
            marker = "▶ " if index == self.cursor else "  "
            lines.append(marker + format_item(item))
        total = len(self.items)
        if total > self.viewport_size:
            last = min(self.viewport_start + self.viewport_size, total)
            indicator = f"Showing {self.viewport_start + 1}-{last} of {total}"
            if self.viewport_start > 0:
                indicator += " [↑ more above]"
            if last < total:
                indicator += " [↓ more below]"
            lines.extend(["", indicator])
        return lines


__all__ = ["ListNavigator", "NavigationEvent", "VIEWPORT_SIZE", "SELECT", "BACK"]
