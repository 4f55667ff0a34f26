from __future__ import annotations

import argparse
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
import signal
import sys
from types import FrameType

from keystroke_logic.application.batching import (
    SendInterrupted,
    UnsupportedCharacterError,
    translate_and_send,
)
from keystroke_logic.domain.models import validate_speed
from keystroke_logic.infrastructure.virsh import VirshDispatcher, resolve_binary
from keystroke_logic.models import SendReport, TranslationConfig
from virsh_ss import PROGRAM_NAME, __version__, telemetry
from virsh_ss.config import AppConfig, load_config
from virsh_ss.prompt import PromptError, read_input

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def _speed(value: str) -> int:
    try:
        return validate_speed(int(value))
    except ValueError as exc:
        raise argparse.ArgumentTypeError("invalid speed value, must be 1-15") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Type a string into a libvirt domain via virsh send-key.",
    )
    parser.add_argument("domain", help="Libvirt domain name.")
    parser.add_argument(
        "text",
        nargs="?",
        default=None,
        help="String to send (if --prompt is not set).",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-p",
        "--prompt",
        action="store_true",
        help="Ask for the string as a prompt.",
    )
    parser.add_argument(
        "-s",
        "--secret",
        action="store_true",
        help="Disable prompt input echo.",
    )
    parser.add_argument(
        "-n",
        "--newline",
        action="store_true",
        help="Send a newline character at the end.",
    )
    parser.add_argument(
        "-l",
        "--speed",
        type=_speed,
        default=None,
        help=(
            "Max amount of characters sent per send-key command (1-15). "
            "Higher values might cause issues (default: 1)."
        ),
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Refuse to send anything if the string has unsupported characters.",
    )
    parser.add_argument(
        "-c",
        "--connect-uri",
        default=None,
        help="Libvirt connection URI passed to virsh.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print every virsh command before it runs.",
    )
    return parser


def _error(message: str) -> None:
    print(f"{PROGRAM_NAME}: {message}", file=sys.stderr)


def _warn_unsupported(_index: int, char: str) -> None:
    _error(f"unsupported key -- {char!r}")


def _raise_interrupt(signum: int, _frame: FrameType | None) -> None:
    raise KeyboardInterrupt(signum)


@contextmanager
def _interrupt_on_signals() -> Iterator[None]:
    signums = [signal.SIGTERM]
    if hasattr(signal, "SIGQUIT"):
        signums.append(signal.SIGQUIT)
    previous = {signum: signal.signal(signum, _raise_interrupt) for signum in signums}
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def _dispatcher(args: argparse.Namespace, config: AppConfig) -> VirshDispatcher:
    return VirshDispatcher(
        domain=args.domain,
        binary=resolve_binary(fallback=config.virsh_binary),
        connect_uri=args.connect_uri or config.connect_uri,
        timeout_sec=config.timeout_sec,
    )


def _report_failure(report: SendReport, text_len: int, newline: bool) -> None:
    if newline and report.chars_sent == text_len:
        _error(f"failed to send newline ({report.error})")
        print("warning: string was sent", file=sys.stderr)
        return
    _error(f"failed to send keys ({report.error})")
    if report.chars_sent > 0:
        print(f"warning: {report.chars_sent} keys have been sent", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.prompt == (args.text is not None):
        _error("invalid arguments")
        parser.print_usage(sys.stderr)
        return EXIT_FAILURE

    config = load_config()
    translation = TranslationConfig(
        max_batch_size=args.speed if args.speed is not None else config.speed,
        send_newline=args.newline,
        strict=args.strict or config.strict,
    )
    telemetry.setup_console(args.debug)

    with _interrupt_on_signals():
        try:
            text = read_input(args.secret) if args.prompt else args.text
        except PromptError as exc:
            _error(str(exc))
            return EXIT_FAILURE
        except KeyboardInterrupt:
            return EXIT_INTERRUPTED

        telemetry.log_event(
            "send.start",
            domain=args.domain,
            text_len=len(text),
            speed=translation.max_batch_size,
            newline=translation.send_newline,
        )
        try:
            report = translate_and_send(
                text,
                _dispatcher(args, config),
                translation,
                on_unsupported=_warn_unsupported,
            )
        except UnsupportedCharacterError as exc:
            _error(f"{exc}, nothing was sent")
            telemetry.log_error("send.rejected", exc, domain=args.domain)
            return EXIT_FAILURE
        except SendInterrupted as exc:
            _error("interrupted")
            if exc.chars_sent > 0:
                print(f"warning: {exc.chars_sent} keys have been sent", file=sys.stderr)
            telemetry.log_event(
                "send.interrupted", domain=args.domain, chars_sent=exc.chars_sent
            )
            return EXIT_INTERRUPTED

    if report.ok:
        telemetry.log_event(
            "send.done",
            domain=args.domain,
            chars_sent=report.chars_sent,
            groups_sent=report.groups_sent,
        )
        return EXIT_SUCCESS

    telemetry.log_error(
        "send.failed",
        report.error,
        domain=args.domain,
        chars_sent=report.chars_sent,
        text_len=len(text),
    )
    _report_failure(report, len(text), translation.send_newline)
    return EXIT_FAILURE
