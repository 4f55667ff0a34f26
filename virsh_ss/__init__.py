from __future__ import annotations

PROGRAM_NAME = "virsh-ss"
__version__ = "0.7.0"
