"""Opcode metadata for the 6502 CPU."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Final, Iterable, List, Sequence

REGISTERS: Final[tuple[str, ...]] = ("A", "X", "Y")


class AddressingMode(Enum):
    """Supported addressing modes for the 6502 instruction set."""

    IMPLIED = auto()
    ACCUMULATOR = auto()
    IMMEDIATE = auto()
    ZERO_PAGE = auto()
    ZERO_PAGE_X = auto()
    ZERO_PAGE_Y = auto()
    ABSOLUTE = auto()
    ABSOLUTE_X = auto()
    ABSOLUTE_Y = auto()
    INDIRECT_X = auto()
    INDIRECT_Y = auto()
    RELATIVE = auto()

    @property
    def operand_size(self) -> int:
        """Number of operand bytes following the opcode."""

        return _OPERAND_SIZES[self]

    @property
    def resolvable(self) -> bool:
        """Whether the mode yields an effective memory address."""

        return self not in _UNRESOLVABLE


_OPERAND_SIZES: Final[dict[AddressingMode, int]] = {
    AddressingMode.IMPLIED: 0,
    AddressingMode.ACCUMULATOR: 0,
    AddressingMode.IMMEDIATE: 1,
    AddressingMode.ZERO_PAGE: 1,
    AddressingMode.ZERO_PAGE_X: 1,
    AddressingMode.ZERO_PAGE_Y: 1,
    AddressingMode.ABSOLUTE: 2,
    AddressingMode.ABSOLUTE_X: 2,
    AddressingMode.ABSOLUTE_Y: 2,
    AddressingMode.INDIRECT_X: 1,
    AddressingMode.INDIRECT_Y: 1,
    AddressingMode.RELATIVE: 1,
}

_UNRESOLVABLE: Final[frozenset[AddressingMode]] = frozenset(
    {AddressingMode.IMPLIED, AddressingMode.ACCUMULATOR, AddressingMode.RELATIVE}
)


@dataclass(frozen=True)
class Instruction:
    """Metadata describing a single 6502 opcode.

    ``register`` names the register an instruction loads, stores, compares or
    writes; ``source`` is the register a transfer reads from.
    """

    opcode: int
    mnemonic: str
    mode: AddressingMode
    cycles: int
    handler: str
    register: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.opcode <= 0xFF:
            raise ValueError(f"opcode out of range: {self.opcode}")
        if self.cycles <= 0:
            raise ValueError("cycles must be positive")
        for name in (self.register, self.source):
            if name is not None and name not in REGISTERS:
                raise ValueError(f"unknown register {name!r} for {self.mnemonic}")

    @property
    def size(self) -> int:
        """Total encoded length in bytes, opcode included."""

        return 1 + self.mode.operand_size

    @property
    def moves_pc(self) -> bool:
        """True when the handler itself sets the program counter."""

        return self.mode is AddressingMode.RELATIVE


class OpcodeTable:
    """Mutable builder for the 256-entry instruction table."""

    _TABLE_SIZE: Final[int] = 0x100

    def __init__(self) -> None:
        self._table: List[Instruction | None] = [None] * self._TABLE_SIZE

    def register(self, instruction: Instruction) -> None:
        opcode = instruction.opcode
        if self._table[opcode] is not None:
            existing = self._table[opcode]
            raise ValueError(
                f"opcode {opcode:#04x} already registered as {existing.mnemonic}")
        self._table[opcode] = instruction

    def register_all(self, instructions: Iterable[Instruction]) -> None:
        for instruction in instructions:
            self.register(instruction)

    def freeze(self) -> Sequence[Instruction | None]:
        return tuple(self._table)


def build_instruction_table(instructions: Iterable[Instruction]) -> Sequence[Instruction | None]:
    """Build a 256-entry instruction lookup table."""

    table = OpcodeTable()
    table.register_all(instructions)
    return table.freeze()


_IMM = AddressingMode.IMMEDIATE
_ZP = AddressingMode.ZERO_PAGE
_ZPX = AddressingMode.ZERO_PAGE_X
_ZPY = AddressingMode.ZERO_PAGE_Y
_ABS = AddressingMode.ABSOLUTE
_ABSX = AddressingMode.ABSOLUTE_X
_ABSY = AddressingMode.ABSOLUTE_Y
_INDX = AddressingMode.INDIRECT_X
_INDY = AddressingMode.INDIRECT_Y
_IMP = AddressingMode.IMPLIED
_ACC = AddressingMode.ACCUMULATOR
_REL = AddressingMode.RELATIVE


def _group(
    mnemonic: str,
    handler: str,
    encodings: Iterable[tuple[int, AddressingMode, int]],
    register: str | None = None,
) -> tuple[Instruction, ...]:
    return tuple(
        Instruction(opcode, mnemonic, mode, cycles, handler, register=register)
        for opcode, mode, cycles in encodings
    )


# Opcode, mode and base cycles shared by the eight-mode ALU group.
def _alu(base: int) -> tuple[tuple[int, AddressingMode, int], ...]:
    return (
        (base + 0x09, _IMM, 2),
        (base + 0x05, _ZP, 3),
        (base + 0x15, _ZPX, 4),
        (base + 0x0D, _ABS, 4),
        (base + 0x1D, _ABSX, 4),
        (base + 0x19, _ABSY, 4),
        (base + 0x01, _INDX, 6),
        (base + 0x11, _INDY, 5),
    )


def _read_modify_write(base: int, accumulator: bool) -> tuple[tuple[int, AddressingMode, int], ...]:
    encodings = (
        (base + 0x06, _ZP, 5),
        (base + 0x16, _ZPX, 6),
        (base + 0x0E, _ABS, 6),
        (base + 0x1E, _ABSX, 7),
    )
    if accumulator:
        return ((base + 0x0A, _ACC, 2),) + encodings
    return encodings


DEFAULT_INSTRUCTIONS: Sequence[Instruction] = (
    Instruction(0x00, "BRK", _IMP, 7, "op_brk"),
    Instruction(0xEA, "NOP", _IMP, 2, "op_nop"),
    # Arithmetic and logic
    *_group("ADC", "op_adc", _alu(0x60)),
    *_group("SBC", "op_sbc", _alu(0xE0)),
    *_group("AND", "op_and", _alu(0x20)),
    *_group("ORA", "op_ora", _alu(0x00)),
    *_group("EOR", "op_eor", _alu(0x40)),
    Instruction(0x24, "BIT", _ZP, 3, "op_bit"),
    Instruction(0x2C, "BIT", _ABS, 4, "op_bit"),
    # Shifts and rotates
    *_group("ASL", "op_asl", _read_modify_write(0x00, accumulator=True)),
    *_group("LSR", "op_lsr", _read_modify_write(0x40, accumulator=True)),
    *_group("ROL", "op_rol", _read_modify_write(0x20, accumulator=True)),
    *_group("ROR", "op_ror", _read_modify_write(0x60, accumulator=True)),
    # Memory increment/decrement
    *_group("INC", "op_inc_memory", _read_modify_write(0xE0, accumulator=False)),
    *_group("DEC", "op_dec_memory", _read_modify_write(0xC0, accumulator=False)),
    # Compares
    *_group("CMP", "op_compare", _alu(0xC0), register="A"),
    *_group("CPX", "op_compare", ((0xE0, _IMM, 2), (0xE4, _ZP, 3), (0xEC, _ABS, 4)), register="X"),
    *_group("CPY", "op_compare", ((0xC0, _IMM, 2), (0xC4, _ZP, 3), (0xCC, _ABS, 4)), register="Y"),
    # Loads
    *_group("LDA", "op_load", _alu(0xA0), register="A"),
    *_group(
        "LDX",
        "op_load",
        ((0xA2, _IMM, 2), (0xA6, _ZP, 3), (0xB6, _ZPY, 4), (0xAE, _ABS, 4), (0xBE, _ABSY, 4)),
        register="X",
    ),
    *_group(
        "LDY",
        "op_load",
        ((0xA0, _IMM, 2), (0xA4, _ZP, 3), (0xB4, _ZPX, 4), (0xAC, _ABS, 4), (0xBC, _ABSX, 4)),
        register="Y",
    ),
    # Stores
    *_group(
        "STA",
        "op_store",
        (
            (0x85, _ZP, 3),
            (0x95, _ZPX, 4),
            (0x8D, _ABS, 4),
            (0x9D, _ABSX, 5),
            (0x99, _ABSY, 5),
            (0x81, _INDX, 6),
            (0x91, _INDY, 6),
        ),
        register="A",
    ),
    *_group("STX", "op_store", ((0x86, _ZP, 3), (0x96, _ZPY, 4), (0x8E, _ABS, 4)), register="X"),
    *_group("STY", "op_store", ((0x84, _ZP, 3), (0x94, _ZPX, 4), (0x8C, _ABS, 4)), register="Y"),
    # Register transfers
    Instruction(0xAA, "TAX", _IMP, 2, "op_transfer", register="X", source="A"),
    Instruction(0xA8, "TAY", _IMP, 2, "op_transfer", register="Y", source="A"),
    Instruction(0x8A, "TXA", _IMP, 2, "op_transfer", register="A", source="X"),
    Instruction(0x98, "TYA", _IMP, 2, "op_transfer", register="A", source="Y"),
    # Register increment/decrement
    Instruction(0xE8, "INX", _IMP, 2, "op_increment_register", register="X"),
    Instruction(0xC8, "INY", _IMP, 2, "op_increment_register", register="Y"),
    Instruction(0xCA, "DEX", _IMP, 2, "op_decrement_register", register="X"),
    Instruction(0x88, "DEY", _IMP, 2, "op_decrement_register", register="Y"),
    # Branches
    Instruction(0x10, "BPL", _REL, 2, "op_bpl"),
    Instruction(0x30, "BMI", _REL, 2, "op_bmi"),
    Instruction(0x50, "BVC", _REL, 2, "op_bvc"),
    Instruction(0x70, "BVS", _REL, 2, "op_bvs"),
    Instruction(0x90, "BCC", _REL, 2, "op_bcc"),
    Instruction(0xB0, "BCS", _REL, 2, "op_bcs"),
    Instruction(0xD0, "BNE", _REL, 2, "op_bne"),
    Instruction(0xF0, "BEQ", _REL, 2, "op_beq"),
    # Flag operations
    Instruction(0x18, "CLC", _IMP, 2, "op_clc"),
    Instruction(0xD8, "CLD", _IMP, 2, "op_cld"),
    Instruction(0x58, "CLI", _IMP, 2, "op_cli"),
    Instruction(0xB8, "CLV", _IMP, 2, "op_clv"),
    Instruction(0x38, "SEC", _IMP, 2, "op_sec"),
    Instruction(0xF8, "SED", _IMP, 2, "op_sed"),
    Instruction(0x78, "SEI", _IMP, 2, "op_sei"),
)


OPCODE_TABLE: Sequence[Instruction | None] = build_instruction_table(DEFAULT_INSTRUCTIONS)
