"""Interactive REPL for sextant-dbg."""

from __future__ import annotations

import logging
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, History, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from .commands import CommandRegistry
from .completion import DebuggerCompleter
from .context import DebuggerContext
from .parser import CommandLineError, split_command

LOGGER = logging.getLogger("sextant.dbg.repl")


def dispatch_line(ctx: DebuggerContext, registry: CommandRegistry, line: str) -> int:
    """Run one command line; returns the command's exit code."""
    try:
        cmd_name, cmd_args = split_command(line)
    except CommandLineError as exc:
        print(f"Parse error: {exc}")
        return 1
    if not cmd_name:
        return 0
    cmd_name = ctx.resolve_alias(cmd_name)
    command = registry.get(cmd_name)
    if not command:
        print(f"Unknown command: {cmd_name}")
        return 1
    return command.run(ctx, cmd_args)


class DebuggerREPL:
    def __init__(
        self,
        ctx: DebuggerContext,
        registry: CommandRegistry,
        *,
        history_path: Optional[str] = None,
    ) -> None:
        self.ctx = ctx
        self.registry = registry
        self.history: History = FileHistory(history_path) if history_path else InMemoryHistory()

    def run(self) -> int:
        session: PromptSession = PromptSession(
            "(sextant) ",
            history=self.history,
            completer=DebuggerCompleter(self.ctx, self.registry),
            complete_while_typing=True,
        )
        while True:
            try:
                with patch_stdout():
                    line = session.prompt()
            except (EOFError, KeyboardInterrupt):
                print()
                return 0
            try:
                dispatch_line(self.ctx, self.registry, line)
            except SystemExit:
                raise
            except Exception as exc:  # pragma: no cover
                LOGGER.exception("command failed")
                print(f"Command failed: {exc}")
