from __future__ import annotations

from keystroke_logic.domain.keymap import KeyEntry
from keystroke_logic.domain.models import (
    DEFAULT_SPEED,
    DispatchError,
    DispatchGroup,
    SendReport,
    SendStatus,
    SpeedLimit,
    TranslationConfig,
)

__all__ = [
    "DEFAULT_SPEED",
    "DispatchError",
    "DispatchGroup",
    "KeyEntry",
    "SendReport",
    "SendStatus",
    "SpeedLimit",
    "TranslationConfig",
]
