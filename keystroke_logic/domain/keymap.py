from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import string
from typing import Final

SHIFT_KEYCODE: Final[str] = "KEY_LEFTSHIFT"
LETTER_KEYCODE_PREFIX: Final[str] = "KEY_"


@dataclass(frozen=True, slots=True)
class KeyEntry:
    unshifted: str
    shifted: str | None
    keycode: str


# US layout, non-letter keys. ``shifted`` is None when the key has no
# shifted character of its own.
KEYMAP: Final[tuple[KeyEntry, ...]] = (
    KeyEntry("`", "~", "KEY_GRAVE"),
    KeyEntry("1", "!", "KEY_1"),
    KeyEntry("2", "@", "KEY_2"),
    KeyEntry("3", "#", "KEY_3"),
    KeyEntry("4", "$", "KEY_4"),
    KeyEntry("5", "%", "KEY_5"),
    KeyEntry("6", "^", "KEY_6"),
    KeyEntry("7", "&", "KEY_7"),
    KeyEntry("8", "*", "KEY_8"),
    KeyEntry("9", "(", "KEY_9"),
    KeyEntry("0", ")", "KEY_0"),
    KeyEntry("-", "_", "KEY_MINUS"),
    KeyEntry("=", "+", "KEY_EQUAL"),
    KeyEntry("[", "{", "KEY_LEFTBRACE"),
    KeyEntry("]", "}", "KEY_RIGHTBRACE"),
    KeyEntry("\\", "|", "KEY_BACKSLASH"),
    KeyEntry(";", ":", "KEY_SEMICOLON"),
    KeyEntry("'", '"', "KEY_APOSTROPHE"),
    KeyEntry(",", "<", "KEY_COMMA"),
    KeyEntry(".", ">", "KEY_DOT"),
    KeyEntry("/", "?", "KEY_SLASH"),
    KeyEntry(" ", None, "KEY_SPACE"),
    KeyEntry("\n", None, "KEY_ENTER"),
)


class UnmappableCharacterError(Exception):
    def __init__(self, char: str, shifted: bool) -> None:
        state = "shifted" if shifted else "unshifted"
        super().__init__(f"no {state} keycode for character {char!r}")
        self.char = char
        self.shifted = shifted


def is_letter(char: str) -> bool:
    return len(char) == 1 and char in string.ascii_letters


def is_supported(char: str) -> bool:
    if is_letter(char):
        return True
    return any(char == entry.unshifted or char == entry.shifted for entry in KEYMAP)


def requires_shift(char: str) -> bool:
    """Return whether ``char`` is typed with the shift modifier held.

    Shifted matches are looked up across the whole table before unshifted
    ones. Anything the table does not know defaults to unshifted.
    """
    if is_letter(char):
        return char in string.ascii_uppercase
    return any(char == entry.shifted for entry in KEYMAP)


def format_key(char: str, shifted: bool) -> str:
    if is_letter(char):
        return f"{LETTER_KEYCODE_PREFIX}{char.upper()}"
    for entry in KEYMAP:
        candidate = entry.shifted if shifted else entry.unshifted
        if candidate is not None and char == candidate:
            return entry.keycode
    raise UnmappableCharacterError(char, shifted)


def format_keys(chars: Iterable[str], shifted: bool) -> tuple[str, ...]:
    return tuple(format_key(char, shifted) for char in chars)
