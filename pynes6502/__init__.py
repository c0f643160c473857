"""Python model of the MOS 6502 CPU used by the NES.

The package hosts the CPU core, its memory bus, program loaders, and the thin
host layer used by ``run.py``.
"""

from __future__ import annotations

from . import bus, cpu, loader, system, utils

__all__: list[str] = [
    "cpu",
    "bus",
    "loader",
    "system",
    "utils",
]
