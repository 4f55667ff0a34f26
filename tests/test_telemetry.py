from __future__ import annotations

from collections.abc import Iterator
import json
import logging
from pathlib import Path

import pytest

from virsh_ss import telemetry


@pytest.fixture(autouse=True)
def _fresh_event_logger(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    monkeypatch.setenv("VIRSH_SS_LOG_DIR", str(tmp_path))
    monkeypatch.setattr(telemetry, "_logger", None)
    yield
    logger = logging.getLogger("virsh_ss.events")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_log_event_writes_json_lines(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VIRSH_SS_LOGGING", "1")

    telemetry.log_event("send.done", domain="vm", chars_sent=3, path=tmp_path)
    telemetry.log_error("send.failed", RuntimeError("boom"), domain="vm")

    lines = (tmp_path / "virsh-ss.log").read_text(encoding="utf-8").splitlines()
    first, second = (json.loads(line) for line in lines)
    assert first["event"] == "send.done"
    assert first["chars_sent"] == 3
    assert first["path"] == str(tmp_path)
    assert second["error_type"] == "RuntimeError"
    assert second["error"] == "boom"


def test_setup_runs_once(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VIRSH_SS_LOGGING", "1")

    telemetry.setup()
    telemetry.setup()

    assert len(logging.getLogger("virsh_ss.events").handlers) == 1


def test_logging_can_be_disabled(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VIRSH_SS_LOGGING", "0")

    telemetry.log_event("send.start", text_len=4)

    assert not (tmp_path / "virsh-ss.log").exists()
