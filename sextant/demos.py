"""Built-in demo programs."""

from __future__ import annotations

from typing import Callable, Dict

from .program import Immediate, Instruction, Label, LabelRef, Program, Register, Variable


def _ins(opcode: str, *args) -> Instruction:
    converted = []
    for arg in args:
        if isinstance(arg, int):
            converted.append(Immediate(arg))
        elif arg.startswith("$"):
            converted.append(Register(arg))
        else:
            converted.append(LabelRef(arg))
    return Instruction(opcode, tuple(converted))


def sum_program() -> Program:
    """Read two numbers, print a prompt and their sum, then exit."""
    return Program(
        variables=(Variable("prompt", "asciiz", "The sum of is: "),),
        statements=(
            Label("main"),
            # read number 1
            _ins("li", "$v0", 5),
            _ins("syscall"),
            _ins("move", "$t0", "$v0"),
            # read number 2
            _ins("li", "$v0", 5),
            _ins("syscall"),
            _ins("move", "$t1", "$v0"),
            _ins("add", "$t2", "$t0", "$t1"),
            # print prompt
            _ins("li", "$v0", 4),
            _ins("la", "$a0", "prompt"),
            _ins("syscall"),
            # print sum
            _ins("li", "$v0", 1),
            _ins("move", "$a0", "$t2"),
            _ins("syscall"),
            _ins("li", "$v0", 0xA),
            _ins("syscall"),
        ),
        entrypoint="main",
    )


def echo_program() -> Program:
    """Read a string into a buffer after the greeting and print both."""
    return Program(
        variables=(Variable("greeting", "asciiz", "Hello, "), Variable("buffer", "asciiz", "\0")),
        statements=(
            Label("main"),
            _ins("li", "$v0", 8),
            _ins("la", "$a0", "buffer"),
            _ins("syscall"),
            _ins("li", "$v0", 4),
            _ins("la", "$a0", "greeting"),
            _ins("syscall"),
            _ins("la", "$a0", "buffer"),
            _ins("syscall"),
            _ins("li", "$v0", 10),
            _ins("syscall"),
        ),
    )


DEMOS: Dict[str, Callable[[], Program]] = {
    "sum": sum_program,
    "echo": echo_program,
}

__all__ = ["DEMOS", "echo_program", "sum_program"]
