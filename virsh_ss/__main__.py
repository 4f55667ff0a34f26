from __future__ import annotations

from virsh_ss.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
