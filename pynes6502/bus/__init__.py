"""Bus-related helpers for the 6502 model."""

from .memory import ADDRESS_SPACE_SIZE, Addressable, Memory, MemoryError

__all__ = [
    "ADDRESS_SPACE_SIZE",
    "Addressable",
    "Memory",
    "MemoryError",
]
