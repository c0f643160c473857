"""Processor status register for the 6502."""

from __future__ import annotations

from enum import IntFlag


class StatusFlag(IntFlag):
    """Bit positions of the processor status register (P)."""

    CARRY = 0x01
    ZERO = 0x02
    INTERRUPT_DISABLE = 0x04
    DECIMAL = 0x08
    BREAK1 = 0x10
    BREAK2 = 0x20
    OVERFLOW = 0x40
    NEGATIVE = 0x80


POWER_UP_STATUS = StatusFlag.INTERRUPT_DISABLE | StatusFlag.BREAK2


def _flag_property(flag: StatusFlag) -> property:
    def getter(self: "StatusRegister") -> bool:
        return self.get(flag)

    def setter(self: "StatusRegister", enabled: bool) -> None:
        self.set(flag, enabled)

    return property(getter, setter, doc=f"{flag.name.lower()} flag")


class StatusRegister:
    """Eight independent flags packed into one byte.

    Flags are read and written through named properties or ``get``/``set``/
    ``clear``; ``int(register)`` yields the packed value.
    """

    __slots__ = ("_bits",)

    def __init__(self, bits: int = int(POWER_UP_STATUS)) -> None:
        self._bits = bits & 0xFF

    def __int__(self) -> int:
        return self._bits

    def __index__(self) -> int:
        return self._bits

    def __eq__(self, other: object) -> bool:
        if isinstance(other, StatusRegister):
            return self._bits == other._bits
        if isinstance(other, int):
            return self._bits == (other & 0xFF)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._bits)

    def __repr__(self) -> str:
        names = "".join(
            letter if self._bits & flag else "-"
            for letter, flag in zip("NV-BDIZC", _DISPLAY_ORDER)
        )
        return f"StatusRegister({self._bits:#04x} {names})"

    @property
    def bits(self) -> int:
        return self._bits

    @bits.setter
    def bits(self, value: int) -> None:
        self._bits = value & 0xFF

    def get(self, flag: StatusFlag) -> bool:
        return (self._bits & int(flag)) != 0

    def set(self, flag: StatusFlag, enabled: bool = True) -> None:
        if enabled:
            self._bits = (self._bits | int(flag)) & 0xFF
        else:
            self._bits &= ~int(flag) & 0xFF

    def clear(self, flag: StatusFlag) -> None:
        self.set(flag, False)

    def power_up(self) -> None:
        self._bits = int(POWER_UP_STATUS)

    def copy(self) -> "StatusRegister":
        return StatusRegister(self._bits)

    carry = _flag_property(StatusFlag.CARRY)
    zero = _flag_property(StatusFlag.ZERO)
    interrupt_disable = _flag_property(StatusFlag.INTERRUPT_DISABLE)
    decimal = _flag_property(StatusFlag.DECIMAL)
    overflow = _flag_property(StatusFlag.OVERFLOW)
    negative = _flag_property(StatusFlag.NEGATIVE)


# N V - B D I Z C, as printed by most 6502 monitors.
_DISPLAY_ORDER = (
    StatusFlag.NEGATIVE,
    StatusFlag.OVERFLOW,
    StatusFlag.BREAK2,
    StatusFlag.BREAK1,
    StatusFlag.DECIMAL,
    StatusFlag.INTERRUPT_DISABLE,
    StatusFlag.ZERO,
    StatusFlag.CARRY,
)
