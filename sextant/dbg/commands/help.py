"""``help [command]``: list commands or describe one of them."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from .base import Command
from ..context import DebuggerContext
from ..output import emit_error, emit_result

if TYPE_CHECKING:  # pragma: no cover
    from . import CommandRegistry


def describe_command(command: Command) -> str:
    parser = getattr(command, "_parser", None)
    usage = parser.format_usage().strip() if parser is not None else f"usage: {command.name}"
    lines = [usage, f"  {command.description}"]
    if command.aliases:
        lines.append(f"  aliases: {', '.join(command.aliases)}")
    return "\n".join(lines)


class HelpCommand(Command):
    def __init__(self) -> None:
        super().__init__("help", "Show available commands, or details for one", aliases=("?",))
        self._registry: Optional[CommandRegistry] = None

    def bind(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        registry = self._registry
        if registry is None:
            emit_error(ctx, message="help is not bound to a command registry")
            return 1
        if argv:
            command = registry.get(ctx.resolve_alias(argv[0]))
            if command is None:
                emit_error(ctx, message=f"no such command: {argv[0]}")
                return 1
            emit_result(
                ctx,
                message=describe_command(command),
                data={"name": command.name, "description": command.description, "aliases": list(command.aliases)},
            )
            return 0
        commands = list(registry.list_commands())
        emit_result(
            ctx,
            message="\n".join(command.format_help() for command in commands),
            data={"commands": [command.name for command in commands]},
        )
        return 0
