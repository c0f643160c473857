"""Command-line front end shared by ``run.py`` and the console script."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pynes6502.cpu import ProgramLoadError, UnknownOpcodeError

from .host import ExecutionLimitError, Host, HostConfig


def build_arg_parser(prog: str = "run.py") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Run a program image on the NES 6502 CPU model",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--program",
        type=Path,
        help="Raw binary image, or hex text when the file ends in .hex/.txt",
    )
    source.add_argument(
        "--hex",
        dest="hex_program",
        help='Program bytes as hex text, e.g. "a9 c0 aa e8 00"',
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Abort when the program has not halted after this many instructions",
    )
    parser.add_argument(
        "--trace",
        type=int,
        default=0,
        metavar="N",
        help="Keep the last N executed instructions and print them on failure",
    )
    parser.add_argument(
        "--dump-state",
        action="store_true",
        help="Print the register file after the program halts",
    )
    return parser


def main(argv: list[str] | None = None, prog: str = "run.py") -> int:
    parser = build_arg_parser(prog)
    args = parser.parse_args(argv)

    if args.program and not args.program.exists():
        parser.error(f"Program file not found: {args.program}")
    if args.max_steps is not None and args.max_steps <= 0:
        parser.error("--max-steps must be positive")
    if args.trace < 0:
        parser.error("--trace must not be negative")

    config = HostConfig(
        program_path=args.program,
        hex_program=args.hex_program,
        max_steps=args.max_steps,
        trace_depth=args.trace,
        dump_state=args.dump_state,
    )
    host = Host(config)
    try:
        host.run()
    except (UnknownOpcodeError, ExecutionLimitError, ProgramLoadError) as exc:
        for line in host.dump_trace():
            print(line, file=sys.stderr)
        parser.exit(1, f"{prog}: {exc}\n")
    if config.dump_state:
        print(host.format_state())
    return 0
