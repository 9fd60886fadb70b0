"""prompt_toolkit completer for sextant-dbg."""

from __future__ import annotations

import shlex
from typing import Iterable, List

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

from ..registers import REGISTER_NAMES
from .commands import CommandRegistry
from .context import DebuggerContext

REGISTER_COMMANDS = {"regs"}
ADDRESS_COMMANDS = {"mem"}


def _normalise_tokens(text: str) -> List[str]:
    if not text:
        return []
    try:
        tokens = shlex.split(text, posix=True)
        trailing = text[-1].isspace()
    except ValueError:
        tokens = text.strip().split()
        trailing = text.endswith((" ", "\t"))
    if trailing:
        tokens.append("")
    return tokens


class DebuggerCompleter(Completer):
    """Completes command names, register names and data variable names."""

    def __init__(self, ctx: DebuggerContext, registry: CommandRegistry) -> None:
        self.ctx = ctx
        self.registry = registry

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        tokens = _normalise_tokens(document.text_before_cursor)
        prefix = tokens[-1] if tokens else ""
        if len(tokens) <= 1:
            candidates = self._command_names()
        else:
            command = self.registry.get(self.ctx.resolve_alias(tokens[0]))
            name = command.name if command else ""
            if name in REGISTER_COMMANDS:
                candidates = list(REGISTER_NAMES)
            elif name in ADDRESS_COMMANDS and len(tokens) == 2:
                candidates = self._variable_names()
            else:
                candidates = []
        for entry in self._filter(candidates, prefix):
            yield Completion(entry, start_position=-len(prefix))

    def _command_names(self) -> List[str]:
        names: List[str] = []
        for command in self.registry.list_commands():
            names.append(command.name)
            names.extend(command.aliases)
        return names

    def _variable_names(self) -> List[str]:
        backend = self.ctx.backend
        if backend is None:
            return []
        return list(backend.data_variables())

    @staticmethod
    def _filter(candidates: Iterable[str], prefix: str) -> List[str]:
        needle = prefix.lower()
        return sorted({c for c in candidates if c.lower().startswith(needle)})
