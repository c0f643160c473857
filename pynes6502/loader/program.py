"""Program metadata structures for 6502 loaders."""

from __future__ import annotations

from dataclasses import dataclass

from pynes6502.cpu import PROGRAM_ORIGIN


@dataclass
class AddressRegion:
    """Represents a contiguous address range within the CPU address space."""

    start: int
    end: int
    comment: str = ""

    def length(self) -> int:
        return self.end - self.start + 1


@dataclass
class ProgramImage:
    """Program bytes destined for the program region at ``PROGRAM_ORIGIN``."""

    data: bytes = b""
    name: str = ""

    def __len__(self) -> int:
        return len(self.data)

    def region(self) -> AddressRegion | None:
        if not self.data:
            return None
        return AddressRegion(PROGRAM_ORIGIN, PROGRAM_ORIGIN + len(self.data) - 1, self.name)
