"""Command-line entry point for the NES 6502 CPU model.

Runs a program image given as a file or as hex text and exits non-zero when
execution stops on an unknown opcode.
"""

from __future__ import annotations

import sys

from pynes6502.system.cli import main


if __name__ == "__main__":
    sys.exit(main())
