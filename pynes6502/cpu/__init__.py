"""CPU package for the 6502 model."""

from .core import (
    MOS6502,
    PROGRAM_ORIGIN,
    RESET_VECTOR,
    CPUError,
    CPUState,
    InvalidAddressingModeError,
    ProgramLoadError,
    UnknownOpcodeError,
)
from .opcodes import AddressingMode, Instruction, OPCODE_TABLE
from .status import POWER_UP_STATUS, StatusFlag, StatusRegister
from . import opcodes

__all__ = [
    "MOS6502",
    "CPUState",
    "CPUError",
    "UnknownOpcodeError",
    "InvalidAddressingModeError",
    "ProgramLoadError",
    "PROGRAM_ORIGIN",
    "RESET_VECTOR",
    "AddressingMode",
    "Instruction",
    "OPCODE_TABLE",
    "POWER_UP_STATUS",
    "StatusFlag",
    "StatusRegister",
    "opcodes",
]
