"""Terminal input and output for the interactive fixer."""
from __future__ import annotations

import asyncio
import logging
import os
import sys
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional, TextIO

from .app import FixApp, run_app

logger = logging.getLogger(__name__)

KEY_NAMES = {"up", "down", "pageup", "pagedown", "enter", "escape"}

_ALIASES = {"esc": "escape", "pgup": "pageup", "pgdn": "pagedown", "return": "enter"}

_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1b[5~": "pageup",
    "\x1b[6~": "pagedown",
}

_CLEAR = "\x1b[2J\x1b[H"


def decode_keys(data: str) -> List[str]:
    """Translate raw terminal input into key names."""

    keys: List[str] = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == "\x1b":
            for seq, name in _SEQUENCES.items():
                if data.startswith(seq, i):
                    keys.append(name)
                    i += len(seq)
                    break
            else:
                if i + 1 < len(data) and data[i + 1] in "[O":
                    # unsupported CSI/SS3 sequence; skip through its final byte
                    i += 2
                    while i < len(data) and not ("@" <= data[i] <= "~"):
                        i += 1
                    i += 1
                else:
                    keys.append("escape")
                    i += 1
            continue
        if ch in "\r\n":
            keys.append("enter")
        elif ch == "\x03":
            keys.append("q")
        elif ch.isprintable():
            keys.append(ch)
        i += 1
    return keys


def decode_line(line: str) -> List[str]:
    """Keys from one line of non-interactive input.

    Words may be key names (``down``, ``esc``); anything else is typed one
    character at a time. An empty line is ``enter``.
    """

    words = line.split()
    if not words:
        return ["enter"]
    keys: List[str] = []
    for word in words:
        name = _ALIASES.get(word.lower(), word.lower())
        if name in KEY_NAMES:
            keys.append(name)
        else:
            keys.extend(word)
    return keys


class Screen:
    """Draws full frames; clears the terminal between frames on a TTY."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream or sys.stdout
        self._last: Optional[str] = None

    def draw(self, lines: List[str]) -> None:
        frame = "\n".join(lines)
        if frame == self._last:
            return
        self._last = frame
        if self.stream.isatty():
            self.stream.write(_CLEAR)
        self.stream.write(frame + "\n")
        self.stream.flush()


class KeyReader:
    """Pushes key names onto an asyncio queue; ``None`` marks end of input."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream or sys.stdin

    @property
    def interactive(self) -> bool:
        return self.stream.isatty()

    @contextmanager
    def attach(self, queue: "asyncio.Queue[Optional[str]]") -> Iterator[None]:
        loop = asyncio.get_running_loop()
        if self.interactive:
            import termios
            import tty

            fd = self.stream.fileno()
            saved = termios.tcgetattr(fd)
            tty.setcbreak(fd)
            loop.add_reader(fd, self._on_readable, fd, queue)
            try:
                yield
            finally:
                loop.remove_reader(fd)
                termios.tcsetattr(fd, termios.TCSADRAIN, saved)
            return
        stop = threading.Event()
        pump = threading.Thread(
            target=self._pump_lines, args=(loop, queue, stop), name="whiterose-keys", daemon=True
        )
        pump.start()
        try:
            yield
        finally:
            stop.set()

    @staticmethod
    def _on_readable(fd: int, queue: "asyncio.Queue[Optional[str]]") -> None:
        data = os.read(fd, 64)
        if not data:
            asyncio.get_running_loop().remove_reader(fd)
            queue.put_nowait(None)
            return
        for key in decode_keys(data.decode("utf-8", errors="ignore")):
            queue.put_nowait(key)

    def _pump_lines(
        self,
        loop: asyncio.AbstractEventLoop,
        queue: "asyncio.Queue[Optional[str]]",
        stop: threading.Event,
    ) -> None:
        # runs on its own thread; readline blocks until a line or EOF
        for line in iter(self.stream.readline, ""):
            if stop.is_set():
                return
            for key in decode_line(line):
                self._post(loop, queue, key)
        if not stop.is_set():
            self._post(loop, queue, None)

    @staticmethod
    def _post(
        loop: asyncio.AbstractEventLoop,
        queue: "asyncio.Queue[Optional[str]]",
        key: Optional[str],
    ) -> None:
        if loop.is_closed():
            logger.debug("Session already over, dropping key %r", key)
            return
        try:
            loop.call_soon_threadsafe(queue.put_nowait, key)
        except RuntimeError as exc:
            # loop closed between the check and the call
            logger.debug("Dropping key %r: %s", key, exc)


async def run_interactive(
    app: FixApp,
    *,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> None:
    """Run ``app`` against the real terminal (or the given streams)."""

    queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()
    reader = KeyReader(stdin)
    with reader.attach(queue):
        await run_app(app, queue, Screen(stdout))


__all__ = ["KeyReader", "Screen", "decode_keys", "decode_line", "run_interactive", "KEY_NAMES"]
