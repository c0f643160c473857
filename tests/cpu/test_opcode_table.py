"""Consistency checks for the opcode table."""

from __future__ import annotations

import pytest

from pynes6502.cpu import MOS6502, OPCODE_TABLE, AddressingMode, Instruction
from pynes6502.cpu.opcodes import DEFAULT_INSTRUCTIONS, OpcodeTable, build_instruction_table

MEMORY_HANDLERS = {
    "op_adc",
    "op_sbc",
    "op_and",
    "op_ora",
    "op_eor",
    "op_bit",
    "op_compare",
    "op_load",
    "op_store",
    "op_inc_memory",
    "op_dec_memory",
}
SHIFT_HANDLERS = {"op_asl", "op_lsr", "op_rol", "op_ror"}


def test_table_has_256_entries() -> None:
    assert len(OPCODE_TABLE) == 0x100


def test_every_handler_exists() -> None:
    for instruction in DEFAULT_INSTRUCTIONS:
        assert callable(getattr(MOS6502, instruction.handler, None)), instruction.handler


def test_memory_handlers_use_resolvable_modes() -> None:
    for instruction in DEFAULT_INSTRUCTIONS:
        if instruction.handler in MEMORY_HANDLERS:
            assert instruction.mode.resolvable, instruction
        if instruction.handler in SHIFT_HANDLERS and instruction.mode is not AddressingMode.ACCUMULATOR:
            assert instruction.mode.resolvable, instruction


def test_branches_use_relative_mode() -> None:
    branches = [entry for entry in DEFAULT_INSTRUCTIONS if entry.mnemonic.startswith("B") and entry.mnemonic not in ("BIT", "BRK")]

    assert len(branches) == 8
    assert all(entry.mode is AddressingMode.RELATIVE and entry.moves_pc for entry in branches)


@pytest.mark.parametrize(
    ("opcode", "mnemonic", "mode"),
    [
        (0x00, "BRK", AddressingMode.IMPLIED),
        (0xA9, "LDA", AddressingMode.IMMEDIATE),
        (0xA5, "LDA", AddressingMode.ZERO_PAGE),
        (0xB5, "LDA", AddressingMode.ZERO_PAGE_X),
        (0xAD, "LDA", AddressingMode.ABSOLUTE),
        (0xBD, "LDA", AddressingMode.ABSOLUTE_X),
        (0xB9, "LDA", AddressingMode.ABSOLUTE_Y),
        (0xA1, "LDA", AddressingMode.INDIRECT_X),
        (0xB1, "LDA", AddressingMode.INDIRECT_Y),
        (0x69, "ADC", AddressingMode.IMMEDIATE),
        (0x71, "ADC", AddressingMode.INDIRECT_Y),
        (0x29, "AND", AddressingMode.IMMEDIATE),
        (0x0A, "ASL", AddressingMode.ACCUMULATOR),
        (0x1E, "ASL", AddressingMode.ABSOLUTE_X),
        (0x24, "BIT", AddressingMode.ZERO_PAGE),
        (0x85, "STA", AddressingMode.ZERO_PAGE),
        (0x91, "STA", AddressingMode.INDIRECT_Y),
        (0xC9, "CMP", AddressingMode.IMMEDIATE),
        (0xB6, "LDX", AddressingMode.ZERO_PAGE_Y),
        (0xAA, "TAX", AddressingMode.IMPLIED),
        (0xE8, "INX", AddressingMode.IMPLIED),
        (0xB8, "CLV", AddressingMode.IMPLIED),
    ],
)
def test_known_encodings(opcode: int, mnemonic: str, mode: AddressingMode) -> None:
    instruction = OPCODE_TABLE[opcode]

    assert instruction is not None
    assert instruction.mnemonic == mnemonic
    assert instruction.mode is mode


def test_unassigned_opcodes_are_empty() -> None:
    assert OPCODE_TABLE[0x02] is None
    assert OPCODE_TABLE[0xFF] is None


def test_instruction_size() -> None:
    assert OPCODE_TABLE[0xAD].size == 3
    assert OPCODE_TABLE[0xA9].size == 2
    assert OPCODE_TABLE[0xAA].size == 1


def test_duplicate_registration_rejected() -> None:
    table = OpcodeTable()
    table.register(Instruction(0xEA, "NOP", AddressingMode.IMPLIED, 2, "op_nop"))

    with pytest.raises(ValueError, match="already registered"):
        table.register(Instruction(0xEA, "NOP", AddressingMode.IMPLIED, 2, "op_nop"))


def test_build_instruction_table_freezes() -> None:
    table = build_instruction_table([Instruction(0xEA, "NOP", AddressingMode.IMPLIED, 2, "op_nop")])

    assert isinstance(table, tuple)
    assert table[0xEA].mnemonic == "NOP"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"opcode": 0x100, "cycles": 2},
        {"opcode": 0xEA, "cycles": 0},
        {"opcode": 0xEA, "cycles": 2, "register": "Q"},
    ],
)
def test_instruction_validation(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        Instruction(
            kwargs["opcode"],
            "NOP",
            AddressingMode.IMPLIED,
            kwargs["cycles"],
            "op_nop",
            register=kwargs.get("register"),
        )
