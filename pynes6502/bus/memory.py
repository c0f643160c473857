"""CPU-visible memory for the 6502 model.

The NES CPU addresses a flat 16-bit space. Only plain RAM is modelled here;
memory-mapped devices are outside the scope of the package, so every address
resolves to the same owned byte buffer.
"""

from __future__ import annotations

from typing import Iterable

ADDRESS_SPACE_SIZE = 0x10000


def _mask16(value: int) -> int:
    """Clamp ``value`` to the 16-bit address space of the CPU."""

    return value & 0xFFFF


class MemoryError(Exception):
    """Raised when memory is used incorrectly."""


class Addressable:
    """Interface for objects exposing byte and word access to the CPU."""

    def load8(self, address: int) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    def store8(self, address: int, value: int) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def load16(self, address: int) -> int:
        # The 6502 stores words little-endian.
        low = self.load8(address)
        high = self.load8(_mask16(address + 1))
        return ((high & 0xFF) << 8) | (low & 0xFF)

    def store16(self, address: int, value: int) -> None:
        self.store8(address, value & 0xFF)
        self.store8(_mask16(address + 1), (value >> 8) & 0xFF)


class Memory(Addressable):
    """Flat 64 KiB RAM owned by a single CPU instance."""

    def __init__(self, size: int = ADDRESS_SPACE_SIZE) -> None:
        if size <= 0 or size > ADDRESS_SPACE_SIZE:
            raise MemoryError(f"size {size} out of range (1-{ADDRESS_SPACE_SIZE})")
        self._data = bytearray(size)

    def __len__(self) -> int:
        return len(self._data)

    def _offset(self, address: int) -> int:
        offset = _mask16(address)
        if offset >= len(self._data):
            raise MemoryError(f"address {offset:#06x} outside memory of {len(self._data):#x} bytes")
        return offset

    def load8(self, address: int) -> int:
        return self._data[self._offset(address)]

    def store8(self, address: int, value: int) -> None:
        self._data[self._offset(address)] = value & 0xFF

    def load_block(self, start: int, data: Iterable[int]) -> int:
        """Copy ``data`` into memory starting at ``start``; return bytes written."""

        payload = bytes(data)
        start = _mask16(start)
        end = start + len(payload)
        if end > len(self._data):
            raise MemoryError(
                f"block of {len(payload)} bytes at {start:#06x} exceeds memory of {len(self._data):#x} bytes"
            )
        self._data[start:end] = payload
        return len(payload)

    def dump(self, start: int, length: int) -> bytes:
        """Return a copy of ``length`` bytes starting at ``start``."""

        start = _mask16(start)
        if length < 0 or start + length > len(self._data):
            raise MemoryError(f"range {start:#06x}+{length} outside memory")
        return bytes(self._data[start:start + length])

    def clear(self) -> None:
        self._data[:] = bytes(len(self._data))
