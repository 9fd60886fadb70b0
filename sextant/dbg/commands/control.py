"""Execution control commands (step/run/input)."""

from __future__ import annotations

import argparse
from typing import List

from .base import Command
from ..backend import DebuggerBackendError
from ..context import DebuggerContext
from ..output import emit_error, render_status
from ...errors import VMError
from ...vmclient import VMClientError

_BLOCKED_STATES = {"suspended", "halted", "finished"}
_FAILURES = (VMError, VMClientError, DebuggerBackendError, OSError)


class StepCommand(Command):
    def __init__(self) -> None:
        super().__init__("step", "Execute one or more statements", aliases=("s", "next"))
        self._parser = argparse.ArgumentParser(prog="step", add_help=False)
        self._parser.add_argument("count", nargs="?", type=int, default=1, help="Statement count (default 1)")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            args = self._parser.parse_args(argv)
        except SystemExit:
            return 1
        executed = 0
        try:
            backend = ctx.ensure_backend()
            status = backend.status()
            for _ in range(max(1, args.count)):
                if status.state in _BLOCKED_STATES:
                    break
                status = backend.step()
                executed += 1
                if status.io_interruption is not None:
                    break
        except _FAILURES as exc:
            emit_error(ctx, message=f"step failed: {exc}")
            return 1
        render_status(ctx, status, message=f"Stepped {executed} statement(s)")
        return 0


class RunCommand(Command):
    def __init__(self) -> None:
        super().__init__("run", "Run until output, input request, halt or end", aliases=("r", "continue", "c"))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            status = ctx.ensure_backend().run(max_steps=ctx.max_run_steps)
        except _FAILURES as exc:
            emit_error(ctx, message=f"run failed: {exc}")
            return 1
        render_status(ctx, status)
        return 0


class InputCommand(Command):
    def __init__(self) -> None:
        super().__init__("input", "Answer a pending read syscall", aliases=("in",))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        # Everything after the command word is the input text.
        text = " ".join(argv)
        try:
            status = ctx.ensure_backend().send_input(text)
        except _FAILURES as exc:
            emit_error(ctx, message=f"input rejected: {exc}")
            return 1
        render_status(ctx, status, message=f"Sent input {text!r}")
        return 0
