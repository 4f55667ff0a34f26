from __future__ import annotations

import io
import termios

import pytest

from virsh_ss import prompt
from virsh_ss.prompt import PromptError, read_input, read_masked


def _feed(data: bytes):
    chunks = [data[index : index + 1] for index in range(len(data))]

    def read() -> bytes:
        return chunks.pop(0) if chunks else b""

    return read


def test_read_masked_echoes_stars() -> None:
    written: list[bytes] = []

    text = read_masked(_feed(b"s3cret\n"), written.append)

    assert text == "s3cret"
    assert b"".join(written) == b"******\n"


def test_read_masked_handles_backspace() -> None:
    written: list[bytes] = []

    text = read_masked(_feed(b"abx\x7fc\r"), written.append)

    assert text == "abc"
    assert b"".join(written) == b"***\b \b*\n"


def test_read_masked_drops_whole_multibyte_char() -> None:
    data = "aé".encode("utf-8") + b"\x7f" + b"b\n"

    text = read_masked(_feed(data), lambda _data: None)

    assert text == "ab"


def test_read_masked_stops_at_end_of_file() -> None:
    assert read_masked(_feed(b"abc"), lambda _data: None) == "abc"


def test_read_input_strips_line_ending(capsys: pytest.CaptureFixture[str]) -> None:
    assert read_input(False, io.StringIO("echo hi\n")) == "echo hi"
    assert capsys.readouterr().out == prompt.PROMPT_TEXT


def test_read_input_rejects_empty_line() -> None:
    with pytest.raises(PromptError, match="no input was given"):
        read_input(False, io.StringIO("\n"))
    with pytest.raises(PromptError, match="no input was given"):
        read_input(False, io.StringIO(""))


def test_secret_input_reports_missing_tty(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_open(path: str, flags: int) -> int:
        raise FileNotFoundError(2, "No such device or address", path)

    monkeypatch.setattr(prompt.os, "open", fake_open)

    with pytest.raises(PromptError, match="/dev/tty"):
        read_input(True)


def test_suppressed_echo_restores_attributes_on_interrupt(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    lflag = termios.ECHO | termios.ICANON | termios.ISIG
    applied: list[list[object]] = []
    monkeypatch.setattr(
        prompt.termios, "tcgetattr", lambda fd: [0, 0, 0, lflag, 0, 0, []]
    )
    monkeypatch.setattr(
        prompt.termios, "tcsetattr", lambda fd, when, attrs: applied.append(attrs)
    )

    with pytest.raises(KeyboardInterrupt):
        with prompt.suppressed_echo(7):
            assert applied[-1][3] == termios.ISIG
            raise KeyboardInterrupt

    assert len(applied) == 2
    assert applied[-1][3] == lflag
