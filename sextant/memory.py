"""Flat byte-addressed memory and data-section layout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable

from .errors import ConfigurationError, LoadError, MemoryFault
from .program import Variable

DEFAULT_MEMORY_SIZE = 1024 * 1024
DEFAULT_STACK_SIZE = 1024 * 1024


def is_power_of_two(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class MemoryPatch:
    """Record of the most recent run-time memory write."""

    address: int
    data: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "data": self.data.hex()}


class Memory:
    """Zero-initialised byte buffer whose capacity is a power of two."""

    def __init__(self, size: int = DEFAULT_MEMORY_SIZE, *, name: str = "memory") -> None:
        if not is_power_of_two(size):
            raise ConfigurationError(f"{name} size must be a power of 2 (got {size!r})")
        self.name = name
        self.data = bytearray(size)

    def __len__(self) -> int:
        return len(self.data)

    @property
    def size(self) -> int:
        return len(self.data)

    def _check_range(self, address: int, length: int) -> None:
        if address < 0 or length < 0 or address + length > len(self.data):
            raise MemoryFault(address, length, len(self.data))

    def read(self, address: int, length: int) -> bytes:
        if length <= 0:
            return b""
        self._check_range(address, length)
        return bytes(self.data[address : address + length])

    def write(self, address: int, payload: bytes) -> MemoryPatch:
        payload = bytes(payload)
        self._check_range(address, len(payload))
        self.data[address : address + len(payload)] = payload
        return MemoryPatch(address, payload)

    def read_c_string(self, address: int) -> str:
        """Decode bytes from ``address`` up to the first zero byte.

        A string running into the end of the buffer stops there.
        """
        self._check_range(address, 0)
        end = self.data.find(0, address)
        if end < 0:
            end = len(self.data)
        return bytes(self.data[address:end]).decode("utf-8", errors="replace")


def layout_data_section(memory: Memory, variables: Iterable[Variable]) -> Dict[str, int]:
    """Copy ``variables`` into ``memory`` back to back from offset 0.

    Returns the name to offset table. Variables are packed without padding or
    alignment and without terminators.
    """
    offsets: Dict[str, int] = {}
    offset = 0
    for variable in variables:
        payload = variable.to_bytes()
        if offset + len(payload) > memory.size:
            raise LoadError(
                f"data section overflows memory at {variable.name!r} "
                f"(needs {offset + len(payload)} bytes, have {memory.size})"
            )
        memory.data[offset : offset + len(payload)] = payload
        offsets[variable.name] = offset
        offset += len(payload)
    return offsets


__all__ = [
    "DEFAULT_MEMORY_SIZE",
    "DEFAULT_STACK_SIZE",
    "Memory",
    "MemoryPatch",
    "is_power_of_two",
    "layout_data_section",
]
