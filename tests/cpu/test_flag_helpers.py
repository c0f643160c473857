"""Tests for the flag, arithmetic, compare and branch helpers."""

from __future__ import annotations

import pytest

from pynes6502.cpu import AddressingMode, MOS6502


def make_cpu(program: list[int] | None = None) -> MOS6502:
    cpu = MOS6502()
    cpu.load(program or [])
    cpu.reset()
    return cpu


@pytest.mark.parametrize("value", range(0x100))
def test_update_zero_and_negative(value: int) -> None:
    cpu = MOS6502()

    cpu.update_zero_and_negative(value)

    assert cpu.status.zero == (value == 0)
    assert cpu.status.negative == bool(value & 0x80)


def test_set_accumulator_masks_and_updates_flags() -> None:
    cpu = MOS6502()

    cpu.set_accumulator(0x180)

    assert cpu.state.a == 0x80
    assert cpu.status.negative
    assert not cpu.status.zero


def test_adc_sets_overflow_on_signed_wrap() -> None:
    cpu = MOS6502()
    cpu.state.a = 0x7F

    cpu.add_with_carry_to_accumulator(0x01)

    assert cpu.state.a == 0x80
    assert cpu.status.overflow
    assert not cpu.status.carry
    assert cpu.status.negative


def test_adc_sets_carry_on_unsigned_wrap() -> None:
    cpu = MOS6502()
    cpu.state.a = 0xFF

    cpu.add_with_carry_to_accumulator(0x01)

    assert cpu.state.a == 0x00
    assert cpu.status.carry
    assert not cpu.status.overflow
    assert cpu.status.zero


def test_adc_consumes_carry_in() -> None:
    cpu = MOS6502()
    cpu.status.carry = True

    cpu.add_with_carry_to_accumulator(0x01)

    assert cpu.state.a == 0x02
    assert not cpu.status.carry


def test_adc_clears_stale_flags() -> None:
    cpu = MOS6502()
    cpu.status.overflow = True
    cpu.status.carry = True
    cpu.state.a = 0x10

    cpu.add_with_carry_to_accumulator(0x20)

    assert cpu.state.a == 0x31
    assert not cpu.status.overflow
    assert not cpu.status.carry


def test_adc_negative_plus_negative_overflows() -> None:
    cpu = MOS6502()
    cpu.state.a = 0x80

    cpu.add_with_carry_to_accumulator(0xFF)

    assert cpu.state.a == 0x7F
    assert cpu.status.overflow
    assert cpu.status.carry


def test_compare_sets_carry_when_operand_not_greater() -> None:
    cpu = make_cpu([0x01])

    cpu.compare(0x02, AddressingMode.IMMEDIATE)

    assert cpu.status.carry
    assert not cpu.status.zero
    assert not cpu.status.negative


def test_compare_equal_sets_zero_and_carry() -> None:
    cpu = make_cpu([0x42])

    cpu.compare(0x42, AddressingMode.IMMEDIATE)

    assert cpu.status.carry
    assert cpu.status.zero


def test_compare_greater_operand_clears_carry() -> None:
    cpu = make_cpu([0x02])
    cpu.state.a = 0x01

    cpu.compare(cpu.state.a, AddressingMode.IMMEDIATE)

    assert not cpu.status.carry
    assert cpu.status.negative  # 0x01 - 0x02 == 0xFF
    assert cpu.state.a == 0x01


def test_branch_taken_skips_displacement_byte() -> None:
    cpu = make_cpu([0x0A])

    cpu.branch(True)

    assert cpu.state.pc == 0x800B


def test_branch_not_taken_consumes_displacement() -> None:
    cpu = make_cpu([0x0A])

    cpu.branch(False)

    assert cpu.state.pc == 0x8001


def test_branch_backwards() -> None:
    cpu = make_cpu([0xFC])  # -4

    cpu.branch(True)

    assert cpu.state.pc == 0x7FFD


def test_branch_wraps_address_space() -> None:
    cpu = MOS6502()
    cpu.memory.store8(0xFFFF, 0x05)
    cpu.state.pc = 0xFFFF

    cpu.branch(True)

    assert cpu.state.pc == 0x0005
