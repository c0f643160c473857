"""Loaders for raw binary and hex-text program images."""

from __future__ import annotations

import re
from pathlib import Path
from typing import BinaryIO

from pynes6502.cpu import MOS6502, PROGRAM_ORIGIN, ProgramLoadError
from pynes6502.cpu.core import PROGRAM_REGION_SIZE
from pynes6502.utils import debug_log

from .program import ProgramImage


class ProgramFormatError(ProgramLoadError):
    """Raised when a program source cannot be decoded into bytes."""


HEX_SUFFIXES = frozenset({".hex", ".txt"})

_COMMENT = re.compile(r"[;#].*$")
_SEPARATORS = re.compile(r"[\s,]+")


def parse_hex_program(text: str, name: str = "") -> ProgramImage:
    """Decode whitespace or comma separated hex bytes.

    Tokens may carry a ``0x`` or ``$`` prefix. ``;`` and ``#`` start a comment
    that runs to the end of the line.
    """

    data = bytearray()
    for line_number, line in enumerate(text.splitlines(), start=1):
        body = _COMMENT.sub("", line)
        for token in _SEPARATORS.split(body.strip()):
            if not token:
                continue
            digits = token
            if digits.lower().startswith("0x"):
                digits = digits[2:]
            elif digits.startswith("$"):
                digits = digits[1:]
            if not 1 <= len(digits) <= 2:
                raise ProgramFormatError(f"line {line_number}: {token!r} is not a hex byte")
            try:
                data.append(int(digits, 16))
            except ValueError as exc:
                raise ProgramFormatError(f"line {line_number}: {token!r} is not a hex byte") from exc
    return _checked_image(bytes(data), name)


def load_binary(stream: BinaryIO, name: str = "") -> ProgramImage:
    """Read a raw program image from ``stream``."""

    return _checked_image(stream.read(), name)


def load_binary_from_path(path: Path) -> ProgramImage:
    """Load a program image from the filesystem.

    Files ending in ``.hex`` or ``.txt`` are parsed as hex text; anything else
    is taken as raw bytes. Unreadable files raise :class:`ProgramFormatError`.
    """

    try:
        if path.suffix.lower() in HEX_SUFFIXES:
            text = path.read_text(encoding="utf-8")
            image = parse_hex_program(text, name=path.name)
        else:
            with path.open("rb") as handle:
                image = load_binary(handle, name=path.name)
    except UnicodeDecodeError as exc:
        raise ProgramFormatError(f"{path}: hex program is not UTF-8 text") from exc
    except OSError as exc:
        raise ProgramFormatError(f"{path}: cannot read program ({exc.strerror or exc})") from exc
    debug_log("loader", "read %d bytes from %s", len(image), path)
    return image


def install_program(cpu: MOS6502, image: ProgramImage) -> None:
    """Write ``image`` into ``cpu`` memory and set the reset vector."""

    cpu.load(image.data)
    debug_log("loader", "installed %s (%d bytes) at %04x", image.name or "<anonymous>", len(image), PROGRAM_ORIGIN)


def _checked_image(data: bytes, name: str) -> ProgramImage:
    if len(data) > PROGRAM_REGION_SIZE:
        raise ProgramLoadError(
            f"program of {len(data)} bytes exceeds the {PROGRAM_REGION_SIZE:#x} byte region at {PROGRAM_ORIGIN:#06x}"
        )
    return ProgramImage(data=data, name=name)
