"""Command base class for sextant-dbg."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from ..context import DebuggerContext


@dataclass
class Command:
    name: str
    description: str
    aliases: Sequence[str] = field(default_factory=tuple)

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        raise NotImplementedError("Command must implement run()")

    def format_help(self) -> str:
        return f"{self.name:<12} {self.description}"
