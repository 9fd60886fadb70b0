"""The sextant virtual machine.

``MiniVM`` executes a loaded :class:`~sextant.program.Program` one statement
at a time. The program counter indexes the statement list; it is advanced
before the statement's effects are applied, so a failing instruction leaves
the counter past itself.

Execution states::

    READY      next statement can run
    SUSPENDED  a read syscall is waiting for ``handle_input``
    HALTED     the exit syscall ran; nothing executes any more
    FINISHED   the counter ran past the last statement

An Output interruption (print syscalls) does not block: it stays visible in
the status snapshot until the next ``step()`` or ``run()`` call, which
acknowledges it before executing.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .errors import (
    ConfigurationError,
    EntrypointNotFound,
    LoadError,
    MalformedInstruction,
    OpcodeNotImplemented,
    UnknownDataVariable,
    VMError,
)
from .interrupts import Interruption, InterruptionController, OutputInterruption
from .memory import (
    DEFAULT_MEMORY_SIZE,
    DEFAULT_STACK_SIZE,
    Memory,
    MemoryPatch,
    is_power_of_two,
    layout_data_section,
)
from .opcodes import IMM, IMPLEMENTED, LBL, MNEMONICS, OPCODES, REG
from .program import (
    Argument,
    Immediate,
    Instruction,
    Label,
    LabelRef,
    Program,
    Register,
    Statement,
    format_statement,
)
from .registers import RegisterFile
from .status import StatusUpdate

LOGGER = logging.getLogger("sextant.vm")

_ARG_TYPES = {REG: Register, IMM: Immediate, LBL: LabelRef}


class VMState(str, Enum):
    UNLOADED = "unloaded"
    READY = "ready"
    SUSPENDED = "suspended"
    HALTED = "halted"
    FINISHED = "finished"


@dataclass
class VMConfig:
    memory_size: int = DEFAULT_MEMORY_SIZE
    stack_size: int = DEFAULT_STACK_SIZE
    # Pause between statements during run(); 0 disables pacing.
    step_delay: float = 0.0
    # Stop run() after every print syscall so observers see each Output.
    stop_on_output: bool = True

    def validate(self) -> None:
        if not (is_power_of_two(self.memory_size) and is_power_of_two(self.stack_size)):
            raise ConfigurationError("memory size and stack size must be a power of 2")
        if self.step_delay < 0:
            raise ConfigurationError("step delay must not be negative")


def search_entrypoint(entrypoint: str, statements: Sequence[Statement]) -> int:
    """Return the index of the first label named ``entrypoint``."""
    for index, statement in enumerate(statements):
        if isinstance(statement, Label) and statement.name == entrypoint:
            return index
    raise EntrypointNotFound(entrypoint)


class MiniVM:
    def __init__(
        self,
        config: Optional[VMConfig] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config if config is not None else VMConfig()
        self.config.validate()
        self.registers = RegisterFile()
        self.memory = Memory(self.config.memory_size)
        # Reserved for call/return support; no implemented opcode touches it.
        self.stack = Memory(self.config.stack_size, name="stack")
        self.interrupts = InterruptionController(self.registers, self.memory)
        self.data_variables: Dict[str, int] = {}
        self.statements: Tuple[Statement, ...] = ()
        self.pc = 0
        self.memory_patch: Optional[MemoryPatch] = None
        self._loaded = False
        self._sleep = sleep
        # Implemented mnemonics resolve to ``_op_<mnemonic>``; the rest are stubs.
        self._dispatch: Dict[str, Callable[[Instruction], None]] = {
            mnemonic: getattr(self, f"_op_{mnemonic}") if mnemonic in IMPLEMENTED else self._op_not_implemented
            for mnemonic in MNEMONICS
        }

    # ------------------------------------------------------------------ state

    @property
    def io_interruption(self) -> Optional[Interruption]:
        return self.interrupts.pending

    @property
    def state(self) -> VMState:
        if not self._loaded:
            return VMState.UNLOADED
        if self.interrupts.halted:
            return VMState.HALTED
        if self.interrupts.awaiting_input:
            return VMState.SUSPENDED
        if self.pc >= len(self.statements):
            return VMState.FINISHED
        return VMState.READY

    @property
    def output(self) -> List[str]:
        """Every Output emitted so far, in order."""
        return list(self.interrupts.transcript)

    def get_status(self) -> StatusUpdate:
        return StatusUpdate(
            registers=self.registers.to_tuple(),
            pc=self.pc,
            io_interruption=self.interrupts.pending,
            state=self.state.value,
            memory_patch=self.memory_patch,
        )

    def read_mem(self, address: int, length: int) -> bytes:
        return self.memory.read(address, length)

    # ------------------------------------------------------------------ loading

    def load(self, program: Program) -> None:
        """Lay out the data section and position the counter at the entry label.

        A VM accepts exactly one load; a failed load leaves it unusable.
        """
        if self._loaded:
            raise LoadError("a program is already loaded; create a new VM")
        self._loaded = True
        offsets = layout_data_section(self.memory, program.variables)
        self.pc = search_entrypoint(program.entrypoint, program.statements)
        self.data_variables = offsets
        self.statements = tuple(program.statements)
        LOGGER.info(
            "loaded %d statement(s), %d data variable(s); entry %r at %d",
            len(self.statements),
            len(offsets),
            program.entrypoint,
            self.pc,
        )

    # ------------------------------------------------------------------ execution

    def step(self) -> bool:
        """Execute one statement; return False when nothing could run."""
        if not self._loaded:
            raise VMError("no program loaded")
        self.interrupts.acknowledge_output()
        state = self.state
        if state is not VMState.READY:
            LOGGER.debug("step ignored: vm is %s", state.value)
            return False
        statement = self.statements[self.pc]
        self.pc += 1
        if isinstance(statement, Instruction):
            LOGGER.debug("[%d] %s", self.pc - 1, format_statement(statement))
            self.execute(statement)
        return True

    def run(
        self,
        *,
        max_steps: Optional[int] = None,
        should_stop: Optional[Callable[[], bool]] = None,
        delay: Optional[float] = None,
        stop_on_output: Optional[bool] = None,
    ) -> int:
        """Step until finished, suspended, halted or (optionally) an Output.

        ``max_steps`` bounds the number of statements executed by this call
        and ``should_stop`` is polled between statements so hosts can cancel
        a long run. Returns the number of statements executed.
        """
        if not self._loaded:
            raise VMError("no program loaded")
        pause = self.config.step_delay if delay is None else delay
        stop_at_output = self.config.stop_on_output if stop_on_output is None else stop_on_output
        executed = 0
        self.interrupts.acknowledge_output()
        while self.state is VMState.READY:
            if max_steps is not None and executed >= max_steps:
                LOGGER.warning("run stopped after %d step(s): step limit reached", executed)
                break
            if should_stop is not None and should_stop():
                LOGGER.info("run cancelled after %d step(s)", executed)
                break
            self.step()
            executed += 1
            if isinstance(self.interrupts.pending, OutputInterruption):
                if stop_at_output:
                    break
                self.interrupts.acknowledge_output()
            elif self.interrupts.pending is not None:
                break
            if pause > 0 and self.state is VMState.READY:
                self._sleep(pause)
        return executed

    def handle_input(self, text: str) -> None:
        """Resume a suspended read syscall with ``text``."""
        patch = self.interrupts.resume(text)
        if patch is not None:
            self.memory_patch = patch

    def eval(self, program: Program, *, max_steps: Optional[int] = None) -> int:
        """Load ``program`` and run it without pacing until it blocks or ends."""
        self.load(program)
        return self.run(max_steps=max_steps, delay=0.0, stop_on_output=False)

    # ------------------------------------------------------------------ dispatch

    def execute(self, instruction: Instruction) -> None:
        handler = self._dispatch.get(instruction.opcode)
        if handler is None:
            raise OpcodeNotImplemented(instruction.opcode)
        handler(instruction)

    def _operands(self, instruction: Instruction) -> Tuple[Argument, ...]:
        shape = OPCODES[instruction.opcode]
        args = instruction.args
        if len(args) != len(shape) or not all(
            isinstance(arg, _ARG_TYPES[kind]) for arg, kind in zip(args, shape)
        ):
            got = ", ".join(type(arg).__name__.lower() for arg in args) or "nothing"
            raise MalformedInstruction(
                f"{instruction.opcode} expects ({', '.join(shape)}), got ({got})"
            )
        return args

    def _op_li(self, instruction: Instruction) -> None:
        register, immediate = self._operands(instruction)
        self.registers[register.name] = immediate.value

    def _op_la(self, instruction: Instruction) -> None:
        register, label = self._operands(instruction)
        try:
            address = self.data_variables[label.name]
        except KeyError:
            raise UnknownDataVariable(label.name) from None
        self.registers[register.name] = address

    def _op_move(self, instruction: Instruction) -> None:
        destination, source = self._operands(instruction)
        self.registers[destination.name] = self.registers[source.name]

    def _op_add(self, instruction: Instruction) -> None:
        destination, left, right = self._operands(instruction)
        # Unsigned wraparound; no overflow trap.
        self.registers[destination.name] = self.registers[left.name] + self.registers[right.name]

    def _op_syscall(self, instruction: Instruction) -> None:
        self._operands(instruction)
        self.interrupts.service_syscall()

    def _op_not_implemented(self, instruction: Instruction) -> None:
        raise OpcodeNotImplemented(instruction.opcode)


__all__ = ["MiniVM", "VMConfig", "VMState", "search_entrypoint"]
