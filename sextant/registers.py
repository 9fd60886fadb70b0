"""Register file naming for the sextant VM.

The canonical name table lives here so the VM, the debugger completer and
the status renderers agree on register order.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

from .errors import UnknownRegister

REGISTER_COUNT = 32
WORD_MASK = 0xFFFFFFFF

# Ordered by index so status dumps can iterate in register order.
REGISTER_LIST: Tuple[Tuple[str, int], ...] = (
    ("$zero", 0),
    ("$at", 1),
    ("$v0", 2),
    ("$v1", 3),
    ("$a0", 4),
    ("$a1", 5),
    ("$a2", 6),
    ("$a3", 7),
    ("$t0", 8),
    ("$t1", 9),
    ("$t2", 10),
    ("$t3", 11),
    ("$t4", 12),
    ("$t5", 13),
    ("$t6", 14),
    ("$t7", 15),
    ("$s0", 16),
    ("$s1", 17),
    ("$s2", 18),
    ("$s3", 19),
    ("$s4", 20),
    ("$s5", 21),
    ("$s6", 22),
    ("$s7", 23),
    ("$t8", 24),
    ("$t9", 25),
    ("$k0", 26),
    ("$k1", 27),
    ("$gp", 28),
    ("$sp", 29),
    ("$s8", 30),
    ("$ra", 31),
)

REGISTERS: Mapping[str, int] = MappingProxyType({name: index for name, index in REGISTER_LIST})
REGISTER_NAMES: Tuple[str, ...] = tuple(name for name, _ in REGISTER_LIST)

# Fixed syscall registers.
SYSCALL_CODE_REGISTER = "$v0"
SYSCALL_ARG_REGISTER = "$a0"
SYSCALL_RESULT_REGISTER = "$v0"

__all__ = [
    "REGISTER_COUNT",
    "REGISTER_LIST",
    "REGISTER_NAMES",
    "REGISTERS",
    "SYSCALL_ARG_REGISTER",
    "SYSCALL_CODE_REGISTER",
    "SYSCALL_RESULT_REGISTER",
    "WORD_MASK",
    "RegisterFile",
    "register_index",
]


def register_index(name: str) -> int:
    """Return the slot index for ``name`` or raise :class:`UnknownRegister`."""

    try:
        return REGISTERS[name]
    except KeyError:
        raise UnknownRegister(name) from None


class RegisterFile:
    """32 unsigned 32-bit cells addressed by symbolic name or index."""

    def __init__(self) -> None:
        self._values = [0] * REGISTER_COUNT

    def __len__(self) -> int:
        return REGISTER_COUNT

    def __getitem__(self, key) -> int:
        if isinstance(key, str):
            key = register_index(key)
        return self._values[key]

    def __setitem__(self, key, value: int) -> None:
        if isinstance(key, str):
            key = register_index(key)
        self._values[key] = int(value) & WORD_MASK

    def __iter__(self):
        return iter(self._values)

    def to_tuple(self) -> Tuple[int, ...]:
        return tuple(self._values)
