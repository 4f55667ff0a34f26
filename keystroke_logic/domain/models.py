from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SpeedLimit(Enum):
    MIN = 1
    MAX = 15


DEFAULT_SPEED = SpeedLimit.MIN.value


@dataclass(frozen=True, slots=True)
class DispatchGroup:
    start: int
    length: int
    requires_shift: bool

    @property
    def end(self) -> int:
        return self.start + self.length

    def chars(self, text: str) -> str:
        return text[self.start : self.end]


def validate_speed(value: int) -> int:
    if value < SpeedLimit.MIN.value or value > SpeedLimit.MAX.value:
        raise ValueError(
            f"invalid speed value, must be {SpeedLimit.MIN.value}-{SpeedLimit.MAX.value}"
        )
    return value


@dataclass(frozen=True, slots=True)
class TranslationConfig:
    max_batch_size: int = DEFAULT_SPEED
    send_newline: bool = False
    strict: bool = False

    def __post_init__(self) -> None:
        validate_speed(self.max_batch_size)


class SendStatus(Enum):
    SENT = "sent"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SendReport:
    status: SendStatus
    chars_sent: int
    groups_sent: int
    newline_sent: bool = False
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status is SendStatus.SENT


class DispatchError(Exception):
    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.returncode = returncode

    def __str__(self) -> str:
        return self.message
