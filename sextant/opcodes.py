"""Instruction set definitions for the sextant VM.

Keeping the canonical mnemonic list in one module prevents drift between the
program decoder, the dispatcher and the debugger listing. Operand shapes are
recorded next to each mnemonic so malformed instructions are rejected with the
same rules everywhere.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

# Operand kinds.
REG = "register"
IMM = "immediate"
LBL = "label"

# Ordered list so docs and tooling can iterate in a stable order.
OPCODE_LIST: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("li", (REG, IMM)),
    ("la", (REG, LBL)),
    ("move", (REG, REG)),
    ("add", (REG, REG, REG)),
    ("sub", (REG, REG, REG)),
    ("addi", (REG, REG, IMM)),
    ("andi", (REG, REG, IMM)),
    ("beq", (REG, REG, LBL)),
    ("j", (LBL,)),
    ("jal", (LBL,)),
    ("jr", (REG,)),
    ("syscall", ()),
)

OPCODES: Dict[str, Tuple[str, ...]] = {mnemonic: shape for mnemonic, shape in OPCODE_LIST}
MNEMONICS: Tuple[str, ...] = tuple(mnemonic for mnemonic, _ in OPCODE_LIST)

# Subset the dispatcher executes; every other mnemonic raises OpcodeNotImplemented.
IMPLEMENTED: FrozenSet[str] = frozenset({"li", "la", "move", "add", "syscall"})

__all__ = [
    "IMM",
    "IMPLEMENTED",
    "LBL",
    "MNEMONICS",
    "OPCODES",
    "OPCODE_LIST",
    "REG",
]
