"""Host glue: obtain a program, run it on a fresh CPU, report the outcome."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pynes6502.cpu import MOS6502
from pynes6502.loader import (
    ProgramImage,
    install_program,
    load_binary_from_path,
    parse_hex_program,
)
from pynes6502.utils import TraceRecorder, debug_enabled, debug_log


class ExecutionLimitError(RuntimeError):
    """Raised when a program runs past the configured step budget."""


@dataclass
class HostConfig:
    """Runtime configuration for a single host run."""

    program_path: Optional[Path] = None
    hex_program: Optional[str] = None
    max_steps: Optional[int] = None
    trace_depth: int = 0
    dump_state: bool = False

    def __post_init__(self) -> None:
        if self.max_steps is not None and self.max_steps <= 0:
            raise ValueError("max_steps must be positive")
        if self.trace_depth < 0:
            raise ValueError("trace_depth must not be negative")


class Host:
    """Builds a CPU, installs the configured program and runs it to BRK."""

    def __init__(self, config: HostConfig, cpu: MOS6502 | None = None) -> None:
        self._config = config
        tracer = TraceRecorder(config.trace_depth) if config.trace_depth else None
        if cpu is None:
            cpu = MOS6502(tracer=tracer)
        elif tracer is not None:
            cpu.tracer = tracer
        self._cpu = cpu
        self._image: ProgramImage | None = None

    @property
    def cpu(self) -> MOS6502:
        return self._cpu

    @property
    def tracer(self) -> TraceRecorder | None:
        return self._cpu.tracer

    def load_image(self) -> ProgramImage:
        config = self._config
        if config.program_path is not None:
            return load_binary_from_path(config.program_path)
        if config.hex_program is not None:
            return parse_hex_program(config.hex_program, name="<hex>")
        raise ValueError("no program source configured")

    def run(self) -> MOS6502:
        """Load, reset and execute; errors propagate to the caller.

        Memory and the trace buffer are cleared first so every run starts from
        the same machine state. Returns the CPU after BRK halts it.
        """

        image = self.load_image()
        cpu = self._cpu
        cpu.memory.clear()
        if cpu.tracer is not None:
            cpu.tracer.clear()
        install_program(cpu, image)
        self._image = image
        cpu.reset()
        if self._config.max_steps is None:
            cpu.run()
        else:
            self._run_bounded(self._config.max_steps)
        if debug_enabled("host"):
            debug_log("host", "halted after %d instructions: %s", cpu.instruction_count, self.format_state())
        return cpu

    def format_state(self) -> str:
        state = self._cpu.state
        line = (
            f"A={state.a:02X} X={state.x:02X} Y={state.y:02X} PC={state.pc:04X} "
            f"P={int(state.status):02X} cycles={self._cpu.cycle_count} "
            f"instructions={self._cpu.instruction_count}"
        )
        region = self._image.region() if self._image is not None else None
        if region is not None:
            line += f" program={region.start:04X}-{region.end:04X} ({region.length()} bytes)"
        return line

    def dump_trace(self) -> list[str]:
        """Send the retained trace to the ``host`` debug channel and return it."""

        tracer = self.tracer
        if tracer is None:
            return []
        tracer.dump("host")
        return self.trace_lines()

    def trace_lines(self) -> list[str]:
        tracer = self.tracer
        if tracer is None:
            return []
        return list(tracer.format_entries())

    def _run_bounded(self, max_steps: int) -> None:
        cpu = self._cpu
        for _ in range(max_steps):
            cpu.step()
            if cpu.halted:
                return
        raise ExecutionLimitError(
            f"program did not halt within {max_steps} steps (pc={cpu.state.pc:04x})"
        )
