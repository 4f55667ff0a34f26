from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
from typing import Final

_LOGGER_NAME: Final[str] = "virsh_ss.events"
_LOG_DIR_ENV: Final[str] = "VIRSH_SS_LOG_DIR"
_LOG_ENABLED_ENV: Final[str] = "VIRSH_SS_LOGGING"
_logger: logging.Logger | None = None


def log_path() -> Path:
    override = os.environ.get(_LOG_DIR_ENV, "").strip()
    if override:
        return Path(override) / "virsh-ss.log"
    return Path.home() / ".virsh-ss" / "logs" / "virsh-ss.log"


def setup() -> None:
    """Attach the JSON-lines file handler once per process.

    Failing to create the log file leaves logging off; sending keys never
    depends on it.
    """
    global _logger
    if _logger is not None or not _is_enabled():
        return
    path = log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError:
        return
    file_handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger(_LOGGER_NAME)
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(file_handler)
    _logger = logger


def log_event(event: str, **fields: object) -> None:
    _emit(logging.INFO, _base_payload(event), fields)


def log_error(event: str, exc: BaseException | None = None, **fields: object) -> None:
    payload = _base_payload(event)
    if exc is not None:
        payload["error_type"] = exc.__class__.__name__
        payload["error"] = str(exc)
    _emit(logging.ERROR, payload, fields)


def setup_console(debug: bool) -> None:
    """Route core debug records (one per virsh command) to stderr."""
    if not debug:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("debug: %(message)s"))
    core_logger = logging.getLogger("keystroke_logic")
    core_logger.setLevel(logging.DEBUG)
    core_logger.addHandler(handler)


def _emit(level: int, payload: dict[str, object], fields: dict[str, object]) -> None:
    if _logger is None:
        setup()
    logger = _logger
    if logger is None or not logger.isEnabledFor(level):
        return
    payload.update(_sanitize_fields(fields))
    logger.log(level, json.dumps(payload, ensure_ascii=True, separators=(",", ":")))


def _is_enabled() -> bool:
    return os.environ.get(_LOG_ENABLED_ENV, "1").strip() != "0"


def _base_payload(event: str) -> dict[str, object]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        "event": event,
        "pid": os.getpid(),
    }


def _sanitize_fields(fields: dict[str, object]) -> dict[str, object]:
    return {
        key: value if value is None or isinstance(value, (str, int, float, bool)) else str(value)
        for key, value in fields.items()
    }
