"""Tests for the 6502 addressing-mode resolver."""

from __future__ import annotations

import pytest

from pynes6502.cpu import AddressingMode, InvalidAddressingModeError, MOS6502


def make_cpu(program: list[int]) -> MOS6502:
    cpu = MOS6502()
    cpu.load(program)
    cpu.reset()
    return cpu


def test_immediate_resolves_to_program_counter() -> None:
    cpu = make_cpu([0x0A])

    assert cpu.operand_address(AddressingMode.IMMEDIATE) == cpu.state.pc == 0x8000


def test_zero_page() -> None:
    cpu = make_cpu([0xAA])

    assert cpu.operand_address(AddressingMode.ZERO_PAGE) == 0x00AA


def test_zero_page_x() -> None:
    cpu = make_cpu([0x0A])
    cpu.state.x = 1

    assert cpu.operand_address(AddressingMode.ZERO_PAGE_X) == 0x000B


def test_zero_page_x_wraps_within_zero_page() -> None:
    cpu = make_cpu([0xFF])
    cpu.state.x = 2

    assert cpu.operand_address(AddressingMode.ZERO_PAGE_X) == 0x0001


def test_zero_page_y() -> None:
    cpu = make_cpu([0x0A])
    cpu.state.y = 1

    assert cpu.operand_address(AddressingMode.ZERO_PAGE_Y) == 0x000B


def test_absolute_reads_little_endian_word() -> None:
    cpu = make_cpu([0xEF, 0xBE])

    assert cpu.operand_address(AddressingMode.ABSOLUTE) == 0xBEEF


def test_absolute_with_single_operand_byte() -> None:
    cpu = make_cpu([0xAA])

    assert cpu.operand_address(AddressingMode.ABSOLUTE) == 0x00AA


def test_absolute_x() -> None:
    cpu = make_cpu([0xEF, 0xBE])
    cpu.state.x = 1

    assert cpu.operand_address(AddressingMode.ABSOLUTE_X) == 0xBEF0


def test_absolute_x_wraps_address_space() -> None:
    cpu = make_cpu([0xFF, 0xFF])
    cpu.state.x = 2

    assert cpu.operand_address(AddressingMode.ABSOLUTE_X) == 0x0001


def test_absolute_y() -> None:
    cpu = make_cpu([0xEF, 0xBE])
    cpu.state.y = 1

    assert cpu.operand_address(AddressingMode.ABSOLUTE_Y) == 0xBEF0


def test_indirect_x() -> None:
    cpu = make_cpu([])
    cpu.state.x = 1
    cpu.memory.store8(0x8000, 0xDE)
    cpu.memory.store8(0x00DF, 0xEF)
    cpu.memory.store8(0x00E0, 0xBE)

    assert cpu.operand_address(AddressingMode.INDIRECT_X) == 0xBEEF


def test_indirect_x_pointer_wraps_within_zero_page() -> None:
    cpu = make_cpu([0xFE])
    cpu.state.x = 1
    cpu.memory.store8(0x00FF, 0x34)
    cpu.memory.store8(0x0000, 0x12)
    cpu.memory.store8(0x0100, 0x99)  # must not be read

    assert cpu.operand_address(AddressingMode.INDIRECT_X) == 0x1234


def test_indirect_y() -> None:
    cpu = make_cpu([])
    cpu.state.y = 1
    cpu.memory.store8(0x8000, 0xDE)
    cpu.memory.store8(0x00DE, 0xEF)
    cpu.memory.store8(0x00DF, 0xBE)

    assert cpu.operand_address(AddressingMode.INDIRECT_Y) == 0xBEF0


def test_indirect_y_wraps_pointer_and_sum() -> None:
    cpu = make_cpu([0xFF])
    cpu.state.y = 1
    cpu.memory.store8(0x00FF, 0xFF)
    cpu.memory.store8(0x0000, 0xFF)

    assert cpu.operand_address(AddressingMode.INDIRECT_Y) == 0x0000


def test_resolver_does_not_move_program_counter() -> None:
    cpu = make_cpu([0xEF, 0xBE])

    for mode in AddressingMode:
        if mode.resolvable:
            cpu.operand_address(mode)

    assert cpu.state.pc == 0x8000


@pytest.mark.parametrize(
    "mode",
    [AddressingMode.IMPLIED, AddressingMode.ACCUMULATOR, AddressingMode.RELATIVE],
)
def test_unresolvable_modes_raise(mode: AddressingMode) -> None:
    cpu = make_cpu([0x00])

    with pytest.raises(InvalidAddressingModeError):
        cpu.operand_address(mode)


def test_operand_sizes() -> None:
    assert AddressingMode.IMPLIED.operand_size == 0
    assert AddressingMode.ACCUMULATOR.operand_size == 0
    assert AddressingMode.IMMEDIATE.operand_size == 1
    assert AddressingMode.ZERO_PAGE_Y.operand_size == 1
    assert AddressingMode.INDIRECT_Y.operand_size == 1
    assert AddressingMode.ABSOLUTE.operand_size == 2
    assert AddressingMode.ABSOLUTE_X.operand_size == 2
