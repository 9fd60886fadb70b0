"""
sextant - an interactive interpreter for a MIPS-like instruction subset.

    registers.py  → register name table and register file
    opcodes.py    → instruction mnemonics and operand shapes
    program.py    → parsed program model and JSON program documents
    memory.py     → flat memory and data-section layout
    interrupts.py → syscall service and the pending interruption slot
    vm.py         → loader, dispatcher and step/run controller
    status.py     → status snapshots
    protocol.py   → JSON message protocol
    server.py     → per-connection session server
    vmclient.py   → client for the session server
    dbg/          → interactive debugger
"""

from .errors import (  # noqa: F401
    ConfigurationError,
    EntrypointNotFound,
    InterruptionAlreadyPending,
    InvalidInputFormat,
    InvalidResumption,
    LoadError,
    MalformedInstruction,
    MemoryFault,
    OpcodeNotImplemented,
    ProgramFormatError,
    UnhandledSyscall,
    UnknownDataVariable,
    UnknownRegister,
    VMError,
)
from .interrupts import (  # noqa: F401
    HaltInterruption,
    InputInterruption,
    InputRequest,
    OutputInterruption,
)
from .program import (  # noqa: F401
    Immediate,
    Instruction,
    Label,
    LabelRef,
    Program,
    Register,
    Variable,
    load_program,
    program_from_dict,
)
from .status import StatusUpdate  # noqa: F401
from .vm import MiniVM, VMConfig, VMState  # noqa: F401

__all__ = [
    "ConfigurationError",
    "EntrypointNotFound",
    "HaltInterruption",
    "Immediate",
    "InputInterruption",
    "InputRequest",
    "Instruction",
    "InterruptionAlreadyPending",
    "InvalidInputFormat",
    "InvalidResumption",
    "Label",
    "LabelRef",
    "LoadError",
    "MalformedInstruction",
    "MemoryFault",
    "MiniVM",
    "OpcodeNotImplemented",
    "OutputInterruption",
    "Program",
    "ProgramFormatError",
    "Register",
    "StatusUpdate",
    "UnhandledSyscall",
    "UnknownDataVariable",
    "UnknownRegister",
    "VMConfig",
    "VMError",
    "VMState",
    "Variable",
    "load_program",
    "program_from_dict",
]

__version__ = "0.1.0"
