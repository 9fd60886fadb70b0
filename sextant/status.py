"""Immutable status snapshots published to observers of a VM."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .interrupts import Interruption
from .memory import MemoryPatch
from .registers import register_index


@dataclass(frozen=True)
class StatusUpdate:
    registers: Tuple[int, ...]
    pc: int
    io_interruption: Optional[Interruption]
    state: str
    memory_patch: Optional[MemoryPatch] = None

    def register(self, name: str) -> int:
        return self.registers[register_index(name)]

    def to_dict(self) -> Dict[str, Any]:
        # Imported lazily: protocol depends on this module for decoding.
        from .protocol import encode_interruption

        return {
            "registers": list(self.registers),
            "pc": self.pc,
            "io_interruption": encode_interruption(self.io_interruption),
            "state": self.state,
            "memory_patch": self.memory_patch.to_dict() if self.memory_patch else None,
        }


__all__ = ["StatusUpdate"]
