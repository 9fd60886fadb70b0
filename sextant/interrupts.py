"""Syscall service and the single-slot interruption state.

A syscall either resolves immediately by emitting output (codes 1 and 4) or
suspends the program until the host supplies input (codes 5 and 8) or forever
(code 10). Only one interruption may be outstanding at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from .errors import (
    InterruptionAlreadyPending,
    InvalidInputFormat,
    InvalidResumption,
    UnhandledSyscall,
)
from .memory import Memory, MemoryPatch
from .registers import (
    SYSCALL_ARG_REGISTER,
    SYSCALL_CODE_REGISTER,
    SYSCALL_RESULT_REGISTER,
    WORD_MASK,
    RegisterFile,
)

LOGGER = logging.getLogger("sextant.interrupts")

SYS_PRINT_INT = 1
SYS_PRINT_STRING = 4
SYS_READ_INT = 5
SYS_READ_STRING = 8
SYS_EXIT = 10


class InputRequest(str, Enum):
    NUMBER = "Number"
    STRING = "String"


@dataclass(frozen=True)
class InputInterruption:
    request: InputRequest


@dataclass(frozen=True)
class OutputInterruption:
    text: str


@dataclass(frozen=True)
class HaltInterruption:
    pass


Interruption = Union[InputInterruption, OutputInterruption, HaltInterruption]

HALT = HaltInterruption()
AWAIT_NUMBER = InputInterruption(InputRequest.NUMBER)
AWAIT_STRING = InputInterruption(InputRequest.STRING)


def parse_u32(text: str) -> int:
    """Parse ``text`` as a decimal unsigned 32-bit integer.

    Surrounding whitespace (such as the newline a terminal sends) is ignored.
    Only ASCII digits are accepted after that, so a leading ``+`` is rejected
    along with ``-``, hex and anything above ``0xFFFFFFFF``.
    """
    stripped = text.strip()
    if not stripped.isdigit() or not stripped.isascii():
        raise InvalidInputFormat(f"could not parse input as number: {text!r}")
    value = int(stripped, 10)
    if value > WORD_MASK:
        raise InvalidInputFormat(f"input out of range for 32-bit register: {text!r}")
    return value


class InterruptionController:
    """Owns the pending interruption slot for one VM."""

    def __init__(self, registers: RegisterFile, memory: Memory) -> None:
        self.registers = registers
        self.memory = memory
        self.pending: Optional[Interruption] = None
        self.transcript: List[str] = []

    @property
    def awaiting_input(self) -> bool:
        return isinstance(self.pending, InputInterruption)

    @property
    def halted(self) -> bool:
        return isinstance(self.pending, HaltInterruption)

    def raise_interruption(self, interruption: Interruption) -> None:
        if self.pending is not None:
            raise InterruptionAlreadyPending(
                f"cannot raise {interruption!r}: {self.pending!r} still pending"
            )
        self.pending = interruption
        if isinstance(interruption, OutputInterruption):
            self.transcript.append(interruption.text)

    def acknowledge_output(self) -> Optional[str]:
        """Clear a pending Output interruption and return its text."""
        pending = self.pending
        if isinstance(pending, OutputInterruption):
            self.pending = None
            return pending.text
        return None

    def service_syscall(self) -> None:
        code = self.registers[SYSCALL_CODE_REGISTER]
        LOGGER.debug("syscall %d", code)
        if code == SYS_PRINT_INT:
            value = self.registers[SYSCALL_ARG_REGISTER]
            self.raise_interruption(OutputInterruption(str(value)))
        elif code == SYS_PRINT_STRING:
            address = self.registers[SYSCALL_ARG_REGISTER]
            self.raise_interruption(OutputInterruption(self.memory.read_c_string(address)))
        elif code == SYS_READ_INT:
            self.raise_interruption(AWAIT_NUMBER)
        elif code == SYS_READ_STRING:
            self.raise_interruption(AWAIT_STRING)
        elif code == SYS_EXIT:
            self.raise_interruption(HALT)
        else:
            LOGGER.error("unhandled syscall code: %d", code)
            raise UnhandledSyscall(code)

    def resume(self, text: str) -> Optional[MemoryPatch]:
        """Satisfy a pending input request with ``text``.

        Returns the memory patch written for string input, ``None`` for
        numeric input. Bad numeric input leaves the request pending.
        """
        pending = self.pending
        if not isinstance(pending, InputInterruption):
            raise InvalidResumption(f"no input request to handle (pending: {pending!r})")
        patch = None
        if pending.request is InputRequest.NUMBER:
            self.registers[SYSCALL_RESULT_REGISTER] = parse_u32(text)
        else:
            address = self.registers[SYSCALL_ARG_REGISTER]
            patch = self.memory.write(address, text.encode("utf-8"))
        self.pending = None
        return patch


__all__ = [
    "AWAIT_NUMBER",
    "AWAIT_STRING",
    "HALT",
    "HaltInterruption",
    "InputInterruption",
    "InputRequest",
    "Interruption",
    "InterruptionController",
    "OutputInterruption",
    "SYS_EXIT",
    "SYS_PRINT_INT",
    "SYS_PRINT_STRING",
    "SYS_READ_INT",
    "SYS_READ_STRING",
    "parse_u32",
]
