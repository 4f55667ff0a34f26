from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
import logging
from typing import Protocol

from keystroke_logic.domain.keymap import (
    SHIFT_KEYCODE,
    UnmappableCharacterError,
    format_keys,
    is_supported,
    requires_shift,
)
from keystroke_logic.domain.models import (
    DispatchError,
    DispatchGroup,
    SendReport,
    SendStatus,
    TranslationConfig,
    validate_speed,
)

NEWLINE = "\n"

_LOGGER = logging.getLogger(__name__)

UnsupportedCallback = Callable[[int, str], None]


class KeyDispatcher(Protocol):
    def send(self, keycodes: Sequence[str]) -> None: ...


class UnsupportedCharacterError(Exception):
    def __init__(self, positions: Sequence[tuple[int, str]]) -> None:
        chars = "".join(sorted({char for _, char in positions}))
        super().__init__(f"unsupported characters in input: {chars!r}")
        self.positions = tuple(positions)


class SendInterrupted(KeyboardInterrupt):
    def __init__(self, chars_sent: int) -> None:
        super().__init__(chars_sent)
        self.chars_sent = chars_sent


def find_unsupported(text: str) -> list[tuple[int, str]]:
    return [(index, char) for index, char in enumerate(text) if not is_supported(char)]


def iter_groups(text: str, max_batch_size: int) -> Iterator[DispatchGroup]:
    """Yield same-shift runs of ``text`` from left to right.

    A run ends when the shift state changes, when it reaches
    ``max_batch_size`` characters, or at the end of the text.
    """
    validate_speed(max_batch_size)
    length = len(text)
    current = 0
    while current < length:
        group_shift = requires_shift(text[current])
        search = current + 1
        while (
            search - current < max_batch_size
            and search < length
            and requires_shift(text[search]) == group_shift
        ):
            search += 1
        yield DispatchGroup(
            start=current,
            length=search - current,
            requires_shift=group_shift,
        )
        current = search


def plan_groups(text: str, max_batch_size: int) -> list[DispatchGroup]:
    return list(iter_groups(text, max_batch_size))


def build_keycodes(chars: str, shifted: bool) -> tuple[str, ...]:
    keycodes = format_keys(chars, shifted)
    if shifted:
        return (SHIFT_KEYCODE, *keycodes)
    return keycodes


def translate_and_send(
    text: str,
    dispatcher: KeyDispatcher,
    config: TranslationConfig,
    *,
    on_unsupported: UnsupportedCallback | None = None,
) -> SendReport:
    unsupported = find_unsupported(text)
    for index, char in unsupported:
        _LOGGER.warning("unsupported key at offset %d: %r", index, char)
        if on_unsupported is not None:
            on_unsupported(index, char)
    if unsupported and config.strict:
        raise UnsupportedCharacterError(unsupported)

    chars_sent = 0
    groups_sent = 0
    try:
        for group in iter_groups(text, config.max_batch_size):
            try:
                dispatcher.send(build_keycodes(group.chars(text), group.requires_shift))
            except (DispatchError, UnmappableCharacterError) as exc:
                _LOGGER.error(
                    "group at offset %d failed after %d characters: %s",
                    group.start,
                    chars_sent,
                    exc,
                )
                return SendReport(
                    status=SendStatus.FAILED,
                    chars_sent=chars_sent,
                    groups_sent=groups_sent,
                    error=exc,
                )
            else:
                # A signal landing between send() returning and this line is not counted.
                chars_sent, groups_sent = group.end, groups_sent + 1

        if config.send_newline:
            try:
                dispatcher.send(build_keycodes(NEWLINE, requires_shift(NEWLINE)))
            except DispatchError as exc:
                _LOGGER.error("newline failed after %d characters: %s", chars_sent, exc)
                return SendReport(
                    status=SendStatus.FAILED,
                    chars_sent=chars_sent,
                    groups_sent=groups_sent,
                    error=exc,
                )
            groups_sent += 1
    except KeyboardInterrupt as exc:
        _LOGGER.warning("interrupted after %d characters", chars_sent)
        raise SendInterrupted(chars_sent) from exc

    _LOGGER.debug("sent %d characters in %d groups", chars_sent, groups_sent)
    return SendReport(
        status=SendStatus.SENT,
        chars_sent=chars_sent,
        groups_sent=groups_sent,
        newline_sent=config.send_newline,
    )
