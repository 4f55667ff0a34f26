from __future__ import annotations

from dataclasses import dataclass
import json
import os
from pathlib import Path
from typing import Final

from keystroke_logic.domain.models import DEFAULT_SPEED, SpeedLimit

CONFIG_DIR_NAME: Final[str] = "virsh-ss"
CONFIG_FILE_NAME: Final[str] = "config.json"


@dataclass(frozen=True, slots=True)
class AppConfig:
    speed: int
    connect_uri: str | None
    virsh_binary: str | None
    strict: bool
    timeout_sec: float | None


def config_path() -> Path:
    xdg_home = os.environ.get("XDG_CONFIG_HOME", "").strip()
    if xdg_home:
        return Path(xdg_home) / CONFIG_DIR_NAME / CONFIG_FILE_NAME
    return Path.home() / ".config" / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_config(path: Path | None = None) -> AppConfig:
    path = config_path() if path is None else path
    if not path.exists():
        return default_config()
    try:
        raw_data = path.read_text(encoding="utf-8")
        payload: object = json.loads(raw_data)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return default_config()
    return _parse_config(payload)


def default_config() -> AppConfig:
    return AppConfig(
        speed=DEFAULT_SPEED,
        connect_uri=None,
        virsh_binary=None,
        strict=False,
        timeout_sec=None,
    )


def _parse_config(payload: object) -> AppConfig:
    if not isinstance(payload, dict):
        return default_config()
    return AppConfig(
        speed=_get_speed(payload.get("speed"), DEFAULT_SPEED),
        connect_uri=_get_optional_str(payload.get("connect_uri")),
        virsh_binary=_get_optional_str(payload.get("virsh_binary")),
        strict=_get_bool(payload.get("strict"), False),
        timeout_sec=_get_optional_positive_float(payload.get("timeout_sec")),
    )


def _get_speed(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    if value < SpeedLimit.MIN.value or value > SpeedLimit.MAX.value:
        return default
    return value


def _get_optional_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _get_bool(value: object, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default


def _get_optional_positive_float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0:
        return None
    return float(value)
