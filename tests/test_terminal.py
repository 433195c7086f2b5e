import asyncio
import io
import logging

import pytest

from whiterose.core.models import Bug
from whiterose.tui.app import FixApp
from whiterose.tui.terminal import KeyReader, Screen, decode_keys, decode_line, run_interactive


def test_decode_keys_sequences() -> None:
    assert decode_keys("\x1b[A\x1b[B\x1b[5~\x1b[6~") == ["up", "down", "pageup", "pagedown"]
    assert decode_keys("\x1bOA") == ["up"]
    assert decode_keys("y\r") == ["y", "enter"]
    assert decode_keys("\x1b") == ["escape"]
    assert decode_keys("\x03") == ["q"]


def test_decode_keys_skips_unknown_sequences() -> None:
    assert decode_keys("\x1b[1;5Cb") == ["b"]
    assert decode_keys("\x1b[C") == []


def test_decode_line_words_and_characters() -> None:
    assert decode_line("\n") == ["enter"]
    assert decode_line("down DOWN enter\n") == ["down", "down", "enter"]
    assert decode_line("esc pgdn") == ["escape", "pagedown"]
    assert decode_line("fy") == ["f", "y"]


def test_screen_skips_identical_frames() -> None:
    stream = io.StringIO()
    screen = Screen(stream)
    screen.draw(["a", "b"])
    screen.draw(["a", "b"])
    screen.draw(["c"])
    assert stream.getvalue() == "a\nb\nc\n"


def test_run_interactive_with_piped_input() -> None:
    bugs = [Bug(id="WR-001", title="first", description="d")]
    stdin = io.StringIO("enter\nenter\nq\n")
    stdout = io.StringIO()

    async def run_test():
        app = FixApp(bugs, _never_called)
        await asyncio.wait_for(run_interactive(app, stdin=stdin, stdout=stdout), timeout=5)
        return app

    app = asyncio.run(run_test())
    assert app.finished
    assert "WR-001: first" in stdout.getvalue()


async def _never_called(bug: Bug) -> None:
    raise AssertionError("apply should not run")


def test_keys_after_the_session_ends_are_dropped(caplog: pytest.LogCaptureFixture) -> None:
    loop = asyncio.new_event_loop()
    queue: asyncio.Queue = asyncio.Queue()
    loop.close()

    with caplog.at_level(logging.DEBUG, logger="whiterose.tui.terminal"):
        KeyReader._post(loop, queue, "q")

    assert queue.empty()
    assert "dropping key 'q'" in caplog.text
