"""``exit``: leave the debugger, reporting where the program stopped."""

from __future__ import annotations

from typing import List

from .base import Command
from ..context import DebuggerContext
from ..output import render_status

_STOP_NOTES = {
    "ready": "program was still runnable",
    "suspended": "program was waiting for input",
    "halted": "program had halted",
    "finished": "program ran off the end",
}


class ExitCommand(Command):
    def __init__(self) -> None:
        super().__init__("exit", "Report the final VM state and leave the debugger", aliases=("quit", "q"))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        if ctx.backend is not None:
            status = ctx.backend.status()
            note = _STOP_NOTES.get(status.state, status.state)
            render_status(ctx, status, message=f"Leaving: {note}")
        ctx.disconnect()
        raise SystemExit(0)
