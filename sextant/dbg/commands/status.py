"""Status and register commands."""

from __future__ import annotations

from typing import List

from .base import Command
from ..backend import DebuggerBackendError
from ..context import DebuggerContext
from ..output import emit_error, emit_result, render_registers, render_status
from ...registers import REGISTER_NAMES


class StatusCommand(Command):
    def __init__(self) -> None:
        super().__init__("status", "Show program counter and pending interruption", aliases=("info",))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            status = ctx.ensure_backend().status()
        except DebuggerBackendError as exc:
            emit_error(ctx, message=str(exc))
            return 1
        render_status(ctx, status)
        return 0


class RegistersCommand(Command):
    def __init__(self) -> None:
        super().__init__("regs", "Dump the register file", aliases=("registers",))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            status = ctx.ensure_backend().status()
        except DebuggerBackendError as exc:
            emit_error(ctx, message=str(exc))
            return 1
        wanted = [name for name in argv if name]
        unknown = [name for name in wanted if name not in REGISTER_NAMES]
        if unknown:
            emit_error(ctx, message=f"unknown register(s): {', '.join(unknown)}")
            return 1
        values = {name: status.register(name) for name in (wanted or REGISTER_NAMES)}
        if ctx.json_output or wanted:
            message = "\n".join(f"{name} = {value} (0x{value:08X})" for name, value in values.items())
            emit_result(ctx, message=message, data={"registers": values})
            return 0
        print(f"registers (pc={status.pc}):")
        render_registers(status)
        return 0
