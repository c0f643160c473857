"""Loaders for 6502 program images."""

from __future__ import annotations

from pynes6502.cpu import ProgramLoadError

from .program import AddressRegion, ProgramImage
from .raw import (
    ProgramFormatError,
    install_program,
    load_binary,
    load_binary_from_path,
    parse_hex_program,
)

__all__ = [
    "AddressRegion",
    "ProgramImage",
    "ProgramLoadError",
    "ProgramFormatError",
    "install_program",
    "load_binary",
    "load_binary_from_path",
    "parse_hex_program",
]
