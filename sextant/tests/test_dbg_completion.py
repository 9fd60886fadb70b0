"""Completion tests for sextant-dbg."""

from __future__ import annotations

from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document

from sextant.dbg.backend import LocalBackend
from sextant.dbg.commands import build_registry
from sextant.dbg.completion import DebuggerCompleter
from sextant.dbg.context import DebuggerContext
from sextant.demos import echo_program
from sextant.vm import VMConfig


def _complete(ctx: DebuggerContext, text: str) -> set:
    completer = DebuggerCompleter(ctx, build_registry())
    doc = Document(text, cursor_position=len(text))
    return {c.text for c in completer.get_completions(doc, CompleteEvent())}


def _local_ctx() -> DebuggerContext:
    return DebuggerContext(backend=LocalBackend(echo_program(), VMConfig(memory_size=1024, stack_size=1024)))


def test_command_completion_includes_aliases():
    results = _complete(DebuggerContext(), "r")
    assert {"run", "regs", "registers", "r"} <= results
    assert "step" not in results


def test_register_completion_for_regs():
    results = _complete(DebuggerContext(), "regs $t")
    assert "$t0" in results
    assert "$t9" in results
    assert "$v0" not in results


def test_register_completion_after_alias():
    assert "$ra" in _complete(DebuggerContext(), "registers $r")


def test_variable_completion_for_mem():
    ctx = _local_ctx()
    assert _complete(ctx, "mem ") == {"greeting", "buffer"}
    assert _complete(ctx, "x b") == {"buffer"}
    # Only the address position completes variables.
    assert _complete(ctx, "mem buffer ") == set()


def test_no_variables_without_backend():
    assert _complete(DebuggerContext(), "mem ") == set()
