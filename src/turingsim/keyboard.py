import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Self, TextIO

if sys.platform == "win32":
    import msvcrt
else:
    import select
    import termios
    import tty


class KeyboardSignal:
    """Non-blocking key poll on the terminal attached to `stream`.

    On POSIX terminals the stream is switched to cbreak mode while the context
    is active so single key presses can be read without waiting for a newline.
    Streams that are not terminals never report a key.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdin
        self._saved: list[Any] | None = None

    @property
    def interactive(self) -> bool:
        try:
            return self.stream.isatty()
        except ValueError:
            return False

    def __enter__(self) -> Self:
        self._cbreak()
        return self

    def __exit__(self, *args: object) -> None:
        self._restore()

    def _cbreak(self) -> None:
        if sys.platform == "win32" or not self.interactive or self._saved is not None:
            return
        fd = self.stream.fileno()
        self._saved = termios.tcgetattr(fd)
        tty.setcbreak(fd)

    def _restore(self) -> None:
        if sys.platform == "win32" or self._saved is None:
            return
        termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self._saved)
        self._saved = None

    def poll(self) -> str | None:
        if not self.interactive:
            return None
        if sys.platform == "win32":
            return msvcrt.getwch() if msvcrt.kbhit() else None
        fd = self.stream.fileno()
        read, _, _ = select.select([fd], [], [], 0)
        if fd not in read:
            return None
        return os.read(fd, 1).decode(errors="ignore") or None

    @contextmanager
    def line_mode(self) -> Iterator[None]:
        active = self._saved is not None
        self._restore()
        try:
            yield
        finally:
            if active:
                self._cbreak()
