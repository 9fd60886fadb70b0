"""Exception hierarchy shared by the sextant VM, server and debugger."""

from __future__ import annotations


class VMError(RuntimeError):
    """Base class for every failure raised by the VM."""


class ConfigurationError(VMError):
    """Raised when the VM is constructed with unusable capacities."""


class LoadError(VMError):
    """Raised when a program cannot be installed into the VM."""


class EntrypointNotFound(LoadError):
    def __init__(self, entrypoint: str) -> None:
        super().__init__(f"entrypoint not found: {entrypoint}")
        self.entrypoint = entrypoint


class UnknownRegister(VMError):
    def __init__(self, name: str) -> None:
        super().__init__(f"register not found: {name}")
        self.name = name


class UnknownDataVariable(VMError):
    def __init__(self, name: str) -> None:
        super().__init__(f"data variable not found: {name}")
        self.name = name


class UnhandledSyscall(VMError):
    def __init__(self, code: int) -> None:
        super().__init__(f"unhandled syscall code: {code}")
        self.code = code


class OpcodeNotImplemented(VMError):
    def __init__(self, opcode: str) -> None:
        super().__init__(f"instruction not implemented: {opcode}")
        self.opcode = opcode


class MalformedInstruction(VMError):
    """Raised when an instruction carries arguments of the wrong shape."""


class MemoryFault(VMError):
    def __init__(self, address: int, length: int, size: int) -> None:
        super().__init__(f"memory access 0x{address:08X}+{length} outside {size} bytes")
        self.address = address
        self.length = length
        self.size = size


class InterruptionAlreadyPending(VMError):
    """Raised when a syscall fires while another interruption is outstanding."""


class InvalidResumption(VMError):
    """Raised when input is supplied while no input request is pending."""


class InvalidInputFormat(VMError):
    """Raised when numeric input cannot be parsed; the request stays pending."""


class ProgramFormatError(ValueError):
    """Raised when a program document does not describe a valid program."""


__all__ = [
    "ConfigurationError",
    "EntrypointNotFound",
    "InterruptionAlreadyPending",
    "InvalidInputFormat",
    "InvalidResumption",
    "LoadError",
    "MalformedInstruction",
    "MemoryFault",
    "OpcodeNotImplemented",
    "ProgramFormatError",
    "UnhandledSyscall",
    "UnknownDataVariable",
    "UnknownRegister",
    "VMError",
]
