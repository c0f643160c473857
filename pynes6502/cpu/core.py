"""Core MOS 6502 CPU implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, ClassVar, Iterable, Sequence

from pynes6502.bus import Memory
from pynes6502.utils import TraceRecorder, debug_enabled, debug_log

from .opcodes import AddressingMode, Instruction, OPCODE_TABLE
from .status import StatusFlag, StatusRegister


class CPUError(Exception):
    """Base error for CPU-related failures."""


class UnknownOpcodeError(CPUError):
    """Raised when the instruction stream holds an opcode with no table entry."""

    def __init__(self, opcode: int, address: int) -> None:
        super().__init__(f"unknown opcode {opcode:#04x} at {address:#06x}")
        self.opcode = opcode
        self.address = address


class InvalidAddressingModeError(CPUError):
    """Raised when an instruction is wired to a mode with no effective address."""


class ProgramLoadError(CPUError):
    """Raised when a program image does not fit the program region."""


PROGRAM_ORIGIN = 0x8000
PROGRAM_REGION_SIZE = 0x10000 - PROGRAM_ORIGIN
RESET_VECTOR = 0xFFFC


@dataclass
class CPUState:
    """Snapshot of the 6502 register file."""

    a: int = 0x00
    x: int = 0x00
    y: int = 0x00
    pc: int = 0x0000
    status: StatusRegister = field(default_factory=StatusRegister)

    def clone(self) -> "CPUState":
        return CPUState(self.a, self.x, self.y, self.pc, self.status.copy())


@dataclass
class MOS6502:
    """NES flavoured 6502: binary arithmetic only, no interrupts."""

    memory: Memory = field(default_factory=Memory)
    instruction_table: Sequence[Instruction | None] = field(default=OPCODE_TABLE)
    tracer: TraceRecorder | None = None

    PROGRAM_ORIGIN: ClassVar[int] = PROGRAM_ORIGIN
    RESET_VECTOR: ClassVar[int] = RESET_VECTOR

    state: CPUState = field(default_factory=CPUState)
    cycle_count: int = 0
    instruction_count: int = 0
    halted: bool = False

    # ------------------------------------------------------------------
    # Lifecycle

    def load(self, program: Iterable[int]) -> None:
        """Copy ``program`` to the program origin and point the reset vector at it."""

        try:
            data = bytes(program)
        except (TypeError, ValueError) as exc:
            raise ProgramLoadError(f"program is not a byte sequence: {exc}") from exc
        if len(data) > PROGRAM_REGION_SIZE:
            raise ProgramLoadError(
                f"program of {len(data)} bytes exceeds the {PROGRAM_REGION_SIZE:#x} byte region at {PROGRAM_ORIGIN:#06x}"
            )
        self.memory.load_block(PROGRAM_ORIGIN, data)
        self.memory.store16(RESET_VECTOR, PROGRAM_ORIGIN)
        if debug_enabled("cpu"):
            debug_log("cpu", "loaded %d bytes at %04x", len(data), PROGRAM_ORIGIN)

    def reset(self) -> None:
        """Restore power-up register values and load the reset vector.

        Memory and the Y register are left untouched.
        """

        self.state.a = 0x00
        self.state.x = 0x00
        self.state.status.power_up()
        self.state.pc = self._read_word(RESET_VECTOR)
        self.cycle_count = 0
        self.instruction_count = 0
        self.halted = False

    def run(self) -> None:
        """Execute instructions until BRK halts the CPU.

        Raises :class:`UnknownOpcodeError` when the stream holds an opcode the
        table does not know. There is no step limit; callers wanting one drive
        :meth:`step` themselves.
        """

        self.halted = False
        while not self.halted:
            self.step()

    def load_and_run(self, program: Iterable[int]) -> None:
        self.load(program)
        self.reset()
        self.run()

    def step(self) -> int:
        """Execute a single instruction and return its base cycle count."""

        if self.halted:
            return 0

        pc_before = self.state.pc
        opcode = self._fetch_byte()
        instruction = self.instruction_table[opcode]
        if instruction is None:
            if self.tracer is not None:
                self.tracer.record_step(
                    self.state, opcode, 0, halted=False, pc=pc_before, note="unknown-opcode"
                )
            raise UnknownOpcodeError(opcode, pc_before)

        handler: Callable[[Instruction], None] | None = getattr(self, instruction.handler, None)
        if handler is None:
            raise CPUError(f"handler '{instruction.handler}' not implemented")

        if debug_enabled("cpu"):
            debug_log("cpu", "pc=%04x opcode=%02x %s", pc_before, opcode, instruction.mnemonic)

        handler(instruction)
        if not instruction.moves_pc:
            self._advance(instruction.mode.operand_size)

        self.cycle_count += instruction.cycles
        self.instruction_count += 1
        if self.tracer is not None:
            self.tracer.record_step(
                self.state,
                opcode,
                instruction.cycles,
                halted=self.halted,
                pc=pc_before,
                mnemonic=instruction.mnemonic,
            )
        return instruction.cycles

    # ------------------------------------------------------------------
    # Register views

    @property
    def accumulator(self) -> int:
        return self.state.a

    @property
    def index_x(self) -> int:
        return self.state.x

    @property
    def index_y(self) -> int:
        return self.state.y

    @property
    def program_counter(self) -> int:
        return self.state.pc

    @property
    def status(self) -> StatusRegister:
        return self.state.status

    # ------------------------------------------------------------------
    # Addressing

    def operand_address(self, mode: AddressingMode) -> int:
        """Return the effective address for ``mode`` without moving the counter.

        Operand bytes are read starting at the current program counter, which
        the decode loop leaves pointing just past the opcode.
        """

        pc = self.state.pc
        if mode is AddressingMode.IMMEDIATE:
            return pc
        if mode is AddressingMode.ZERO_PAGE:
            return self._read_byte(pc)
        if mode is AddressingMode.ZERO_PAGE_X:
            return (self._read_byte(pc) + self.state.x) & 0xFF
        if mode is AddressingMode.ZERO_PAGE_Y:
            return (self._read_byte(pc) + self.state.y) & 0xFF
        if mode is AddressingMode.ABSOLUTE:
            return self._read_word(pc)
        if mode is AddressingMode.ABSOLUTE_X:
            return (self._read_word(pc) + self.state.x) & 0xFFFF
        if mode is AddressingMode.ABSOLUTE_Y:
            return (self._read_word(pc) + self.state.y) & 0xFFFF
        if mode is AddressingMode.INDIRECT_X:
            pointer = (self._read_byte(pc) + self.state.x) & 0xFF
            return self._read_zero_page_word(pointer)
        if mode is AddressingMode.INDIRECT_Y:
            pointer = self._read_byte(pc)
            return (self._read_zero_page_word(pointer) + self.state.y) & 0xFFFF
        raise InvalidAddressingModeError(f"addressing mode {mode.name} cannot be resolved to an address")

    # ------------------------------------------------------------------
    # Flag and arithmetic helpers

    def update_zero_and_negative(self, value: int) -> None:
        value &= 0xFF
        self.state.status.zero = value == 0
        self.state.status.negative = (value & 0x80) != 0

    def set_accumulator(self, value: int) -> None:
        self.state.a = value & 0xFF
        self.update_zero_and_negative(self.state.a)

    def add_with_carry_to_accumulator(self, operand: int) -> None:
        operand &= 0xFF
        accumulator = self.state.a
        total = accumulator + operand + (1 if self.state.status.carry else 0)
        self.state.status.carry = total > 0xFF
        result = total & 0xFF
        self.state.status.overflow = ((operand ^ result) & (result ^ accumulator) & 0x80) != 0
        self.set_accumulator(result)

    def compare(self, register_value: int, mode: AddressingMode) -> None:
        """Compare ``register_value`` with the operand; no register changes."""

        operand = self._read_operand(mode)
        register_value &= 0xFF
        self.state.status.carry = operand <= register_value
        self.update_zero_and_negative(register_value - operand)

    def branch(self, condition: bool) -> None:
        """Consume the displacement byte and jump when ``condition`` holds."""

        displacement = self._read_byte(self.state.pc)
        if displacement & 0x80:
            displacement -= 0x100
        target = (self.state.pc + 1) & 0xFFFF
        if condition:
            target = (target + displacement) & 0xFFFF
        self.state.pc = target

    # ------------------------------------------------------------------
    # Instruction handlers

    def op_brk(self, _: Instruction) -> None:
        self.halted = True
        if debug_enabled("cpu"):
            debug_log("cpu", "halted at pc=%04x", (self.state.pc - 1) & 0xFFFF)

    def op_nop(self, _: Instruction) -> None:
        """No operation."""

    def op_adc(self, instruction: Instruction) -> None:
        self.add_with_carry_to_accumulator(self._read_operand(instruction.mode))

    def op_sbc(self, instruction: Instruction) -> None:
        # A - M - (1 - C) == A + ~M + C in binary mode.
        self.add_with_carry_to_accumulator(self._read_operand(instruction.mode) ^ 0xFF)

    def op_and(self, instruction: Instruction) -> None:
        self.set_accumulator(self.state.a & self._read_operand(instruction.mode))

    def op_ora(self, instruction: Instruction) -> None:
        self.set_accumulator(self.state.a | self._read_operand(instruction.mode))

    def op_eor(self, instruction: Instruction) -> None:
        self.set_accumulator(self.state.a ^ self._read_operand(instruction.mode))

    def op_bit(self, instruction: Instruction) -> None:
        """Test accumulator bits against memory; the accumulator is not modified."""

        operand = self._read_operand(instruction.mode)
        self.state.status.zero = (self.state.a & operand) == 0
        self.state.status.negative = (operand & 0x80) != 0
        self.state.status.overflow = (operand & 0x40) != 0

    def op_asl(self, instruction: Instruction) -> None:
        self._shift(instruction, self._op_asl)

    def op_lsr(self, instruction: Instruction) -> None:
        self._shift(instruction, self._op_lsr)

    def op_rol(self, instruction: Instruction) -> None:
        self._shift(instruction, self._op_rol)

    def op_ror(self, instruction: Instruction) -> None:
        self._shift(instruction, self._op_ror)

    def op_inc_memory(self, instruction: Instruction) -> None:
        result = self._modify_memory(instruction, lambda value: value + 1)
        self.update_zero_and_negative(result)

    def op_dec_memory(self, instruction: Instruction) -> None:
        result = self._modify_memory(instruction, lambda value: value - 1)
        self.update_zero_and_negative(result)

    def op_compare(self, instruction: Instruction) -> None:
        register = self._require_register(instruction)
        self.compare(self._get_register(register), instruction.mode)

    def op_load(self, instruction: Instruction) -> None:
        register = self._require_register(instruction)
        value = self._read_operand(instruction.mode)
        if register == "A":
            self.set_accumulator(value)
            return
        self._set_register(register, value)
        self.update_zero_and_negative(value)

    def op_store(self, instruction: Instruction) -> None:
        register = self._require_register(instruction)
        address = self.operand_address(instruction.mode)
        self._write_byte(address, self._get_register(register))

    def op_transfer(self, instruction: Instruction) -> None:
        register = self._require_register(instruction)
        if instruction.source is None:
            raise CPUError(f"instruction {instruction.mnemonic} missing source register metadata")
        value = self._get_register(instruction.source)
        self._set_register(register, value)
        self.update_zero_and_negative(value)

    def op_increment_register(self, instruction: Instruction) -> None:
        register = self._require_register(instruction)
        value = (self._get_register(register) + 1) & 0xFF
        self._set_register(register, value)
        self.update_zero_and_negative(value)

    def op_decrement_register(self, instruction: Instruction) -> None:
        register = self._require_register(instruction)
        value = (self._get_register(register) - 1) & 0xFF
        self._set_register(register, value)
        self.update_zero_and_negative(value)

    def op_bpl(self, _: Instruction) -> None:
        self.branch(not self.state.status.negative)

    def op_bmi(self, _: Instruction) -> None:
        self.branch(self.state.status.negative)

    def op_bvc(self, _: Instruction) -> None:
        self.branch(not self.state.status.overflow)

    def op_bvs(self, _: Instruction) -> None:
        self.branch(self.state.status.overflow)

    def op_bcc(self, _: Instruction) -> None:
        self.branch(not self.state.status.carry)

    def op_bcs(self, _: Instruction) -> None:
        self.branch(self.state.status.carry)

    def op_bne(self, _: Instruction) -> None:
        self.branch(not self.state.status.zero)

    def op_beq(self, _: Instruction) -> None:
        self.branch(self.state.status.zero)

    def op_clc(self, _: Instruction) -> None:
        self.state.status.clear(StatusFlag.CARRY)

    def op_cld(self, _: Instruction) -> None:
        self.state.status.clear(StatusFlag.DECIMAL)

    def op_cli(self, _: Instruction) -> None:
        self.state.status.clear(StatusFlag.INTERRUPT_DISABLE)

    def op_clv(self, _: Instruction) -> None:
        self.state.status.clear(StatusFlag.OVERFLOW)

    def op_sec(self, _: Instruction) -> None:
        self.state.status.set(StatusFlag.CARRY)

    def op_sed(self, _: Instruction) -> None:
        # Decimal arithmetic is not modelled; the flag is only stored.
        self.state.status.set(StatusFlag.DECIMAL)

    def op_sei(self, _: Instruction) -> None:
        self.state.status.set(StatusFlag.INTERRUPT_DISABLE)

    # ------------------------------------------------------------------
    # Shift helpers

    def _shift(self, instruction: Instruction, operation: Callable[[int], int]) -> None:
        if instruction.mode is AddressingMode.ACCUMULATOR:
            self.set_accumulator(operation(self.state.a))
            return
        result = self._modify_memory(instruction, operation)
        self.update_zero_and_negative(result)

    def _op_asl(self, value: int) -> int:
        self.state.status.carry = (value & 0x80) != 0
        return (value << 1) & 0xFF

    def _op_lsr(self, value: int) -> int:
        self.state.status.carry = (value & 0x01) != 0
        return value >> 1

    def _op_rol(self, value: int) -> int:
        carry_in = 1 if self.state.status.carry else 0
        self.state.status.carry = (value & 0x80) != 0
        return ((value << 1) | carry_in) & 0xFF

    def _op_ror(self, value: int) -> int:
        carry_in = 0x80 if self.state.status.carry else 0
        self.state.status.carry = (value & 0x01) != 0
        return (value >> 1) | carry_in

    # ------------------------------------------------------------------
    # Memory helpers

    def _fetch_byte(self) -> int:
        value = self._read_byte(self.state.pc)
        self._advance(1)
        return value

    def _advance(self, count: int) -> None:
        self.state.pc = (self.state.pc + count) & 0xFFFF

    def _read_byte(self, address: int) -> int:
        return self.memory.load8(address & 0xFFFF)

    def _read_word(self, address: int) -> int:
        return self.memory.load16(address & 0xFFFF)

    def _read_zero_page_word(self, pointer: int) -> int:
        low = self._read_byte(pointer & 0xFF)
        high = self._read_byte((pointer + 1) & 0xFF)
        return (high << 8) | low

    def _write_byte(self, address: int, value: int) -> None:
        self.memory.store8(address & 0xFFFF, value & 0xFF)

    def _read_operand(self, mode: AddressingMode) -> int:
        return self._read_byte(self.operand_address(mode))

    def _modify_memory(self, instruction: Instruction, mutate: Callable[[int], int]) -> int:
        address = self.operand_address(instruction.mode)
        original = self._read_byte(address)
        result = mutate(original) & 0xFF
        self._write_byte(address, result)
        return result

    # ------------------------------------------------------------------
    # Register helpers

    def _get_register(self, which: str) -> int:
        if which == "A":
            return self.state.a
        if which == "X":
            return self.state.x
        if which == "Y":
            return self.state.y
        raise CPUError(f"unknown register {which}")

    def _set_register(self, which: str, value: int) -> None:
        value &= 0xFF
        if which == "A":
            self.state.a = value
        elif which == "X":
            self.state.x = value
        elif which == "Y":
            self.state.y = value
        else:
            raise CPUError(f"unknown register {which}")

    def _require_register(self, instruction: Instruction) -> str:
        if instruction.register is None:
            raise CPUError(f"instruction {instruction.mnemonic} missing register metadata")
        return instruction.register
