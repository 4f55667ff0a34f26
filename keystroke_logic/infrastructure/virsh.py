from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import logging
import os
import subprocess
from typing import Final

from keystroke_logic.domain.models import DispatchError

DEFAULT_VIRSH_BINARY: Final[str] = "virsh"
VIRSH_BINARY_ENV: Final[str] = "VIRSH"

_LOGGER = logging.getLogger(__name__)


def resolve_binary(
    env: Mapping[str, str] | None = None,
    fallback: str | None = None,
) -> str:
    source = os.environ if env is None else env
    override = source.get(VIRSH_BINARY_ENV, "").strip()
    return override or fallback or DEFAULT_VIRSH_BINARY


@dataclass(frozen=True, slots=True)
class VirshDispatcher:
    """Sends keycodes to a libvirt domain through ``virsh send-key``.

    The command's standard output is discarded. Standard error is kept only
    to build the failure message.
    """

    domain: str
    binary: str = DEFAULT_VIRSH_BINARY
    connect_uri: str | None = None
    timeout_sec: float | None = None

    def command(self, keycodes: Sequence[str]) -> list[str]:
        command = [self.binary]
        if self.connect_uri:
            command.extend(["-c", self.connect_uri])
        command.extend(["send-key", self.domain, *keycodes])
        return command

    def send(self, keycodes: Sequence[str]) -> None:
        command = self.command(keycodes)
        _LOGGER.debug("sending command: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
                timeout=self.timeout_sec,
            )
        except subprocess.TimeoutExpired as exc:
            raise DispatchError(
                f"{self.binary} send-key timed out after {exc.timeout}s"
            ) from exc
        except OSError as exc:
            raise DispatchError(f"failed to exec {self.binary}: {exc}") from exc
        if completed.returncode == 0:
            return
        details = (completed.stderr or "").strip() or "unknown error"
        raise DispatchError(
            f"{self.binary} send-key exited with status {completed.returncode}: {details}",
            returncode=completed.returncode,
        )
