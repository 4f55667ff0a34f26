from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
import os
import sys
import termios
from typing import Final, TextIO

PROMPT_TEXT: Final[str] = "input string: "
TTY_PATH: Final[str] = "/dev/tty"
MASK_CHAR: Final[bytes] = b"*"
_ERASE: Final[bytes] = b"\b \b"
_BACKSPACE_BYTES: Final[frozenset[int]] = frozenset({0x08, 0x7F})
_END_BYTES: Final[frozenset[int]] = frozenset({0x0A, 0x0D, 0x04})


class PromptError(Exception):
    pass


@contextmanager
def suppressed_echo(fd: int) -> Iterator[None]:
    """Turn off echo and line buffering on ``fd`` for the duration of the block.

    The previous terminal attributes are restored on every exit path,
    KeyboardInterrupt included.
    """
    saved = termios.tcgetattr(fd)
    updated = termios.tcgetattr(fd)
    updated[3] &= ~(termios.ECHO | termios.ICANON)
    termios.tcsetattr(fd, termios.TCSAFLUSH, updated)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSAFLUSH, saved)


def read_masked(read: Callable[[], bytes], write: Callable[[bytes], object]) -> str:
    buffer = bytearray()
    while True:
        chunk = read()
        if not chunk:
            break
        byte = chunk[0]
        if byte in _END_BYTES:
            break
        if byte in _BACKSPACE_BYTES:
            if buffer:
                _drop_last_char(buffer)
                write(_ERASE)
            continue
        buffer.append(byte)
        # Continuation bytes of a multi-byte character get no mask of their own.
        if byte & 0xC0 != 0x80:
            write(MASK_CHAR)
    write(b"\n")
    try:
        return buffer.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PromptError("failed to read input") from exc


def read_input(secret: bool, stream: TextIO | None = None) -> str:
    if secret:
        text = _read_secret()
    else:
        text = _read_line(sys.stdin if stream is None else stream)
    if not text:
        raise PromptError("no input was given")
    return text


def _read_line(stream: TextIO) -> str:
    sys.stdout.write(PROMPT_TEXT)
    sys.stdout.flush()
    try:
        line = stream.readline()
    except (OSError, UnicodeDecodeError) as exc:
        raise PromptError("failed to read input") from exc
    return line.rstrip("\r\n")


def _read_secret() -> str:
    try:
        tty_fd = os.open(TTY_PATH, os.O_RDWR)
    except OSError as exc:
        raise PromptError(f"failed to open {TTY_PATH}: {exc.strerror}") from exc
    try:
        os.write(tty_fd, PROMPT_TEXT.encode("ascii"))
        with suppressed_echo(tty_fd):
            return read_masked(
                lambda: os.read(tty_fd, 1),
                lambda data: os.write(tty_fd, data),
            )
    except (OSError, termios.error) as exc:
        raise PromptError("failed to read input") from exc
    finally:
        os.close(tty_fd)


def _drop_last_char(buffer: bytearray) -> None:
    while buffer:
        byte = buffer.pop()
        if byte & 0xC0 != 0x80:
            return
