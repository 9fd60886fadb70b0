"""Structured program representation consumed by the VM.

Programs arrive already parsed: an ordered data section of typed variables
and an ordered text section of labels and instructions with a declared entry
label. This module defines those shapes and decodes them from the JSON
program documents accepted by ``sextant-server`` and ``sextant-dbg``::

    {
      "data": [{"name": "prompt", "type": "asciiz", "value": "Sum: "}],
      "text": {
        "entrypoint": "main",
        "statements": [{"label": "main"}, {"op": "li", "args": ["$v0", 5]}]
      }
    }

Operands are written compactly: ``"$name"`` is a register, an integer (or a
numeric string such as ``"0xA"``) is an immediate and any other string is a
label reference.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union

from .errors import ProgramFormatError
from .opcodes import OPCODES

DATA_TYPES = ("asciiz",)
DEFAULT_ENTRYPOINT = "main"

_NUMERIC_RE = re.compile(r"^[+-]?(0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|[0-9]+)$")
_LABEL_RE = re.compile(r"^[A-Za-z_.][A-Za-z0-9_.]*$")


@dataclass(frozen=True)
class Register:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Immediate:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class LabelRef:
    name: str

    def __str__(self) -> str:
        return self.name


Argument = Union[Register, Immediate, LabelRef]


@dataclass(frozen=True)
class Label:
    name: str


@dataclass(frozen=True)
class Instruction:
    opcode: str
    args: Tuple[Argument, ...] = ()


Statement = Union[Label, Instruction]


@dataclass(frozen=True)
class Variable:
    """A named data-section payload."""

    name: str
    type: str
    value: str

    def to_bytes(self) -> bytes:
        # asciiz payloads are stored without a terminator; the zeroed memory
        # after the data section terminates the final string.
        return self.value.encode("utf-8")

    def size(self) -> int:
        return len(self.to_bytes())


@dataclass(frozen=True)
class Program:
    variables: Tuple[Variable, ...] = ()
    statements: Tuple[Statement, ...] = ()
    entrypoint: str = DEFAULT_ENTRYPOINT


def format_argument(arg: Argument) -> str:
    return str(arg)


def format_statement(statement: Statement) -> str:
    """Render ``statement`` as a line of assembly text."""
    if isinstance(statement, Label):
        return f"{statement.name}:"
    if not statement.args:
        return statement.opcode
    operands = ", ".join(format_argument(arg) for arg in statement.args)
    return f"{statement.opcode} {operands}"


def _decode_argument(value: Any, where: str) -> Argument:
    if isinstance(value, bool):
        raise ProgramFormatError(f"{where}: boolean is not a valid operand")
    if isinstance(value, int):
        return Immediate(value)
    if isinstance(value, Mapping):
        if len(value) != 1:
            raise ProgramFormatError(f"{where}: operand object must have exactly one key")
        kind, inner = next(iter(value.items()))
        if kind == "register":
            return Register(str(inner))
        if kind == "immediate":
            return Immediate(_coerce_int(inner, where))
        if kind == "label":
            return LabelRef(str(inner))
        raise ProgramFormatError(f"{where}: unknown operand kind {kind!r}")
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("$"):
            return Register(text)
        if _NUMERIC_RE.match(text):
            return Immediate(_coerce_int(text, where))
        if _LABEL_RE.match(text):
            return LabelRef(text)
        raise ProgramFormatError(f"{where}: cannot interpret operand {value!r}")
    raise ProgramFormatError(f"{where}: unsupported operand {value!r}")


def _coerce_int(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise ProgramFormatError(f"{where}: boolean is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 0)
        except ValueError:
            pass
        try:
            return int(text, 10)
        except ValueError:
            raise ProgramFormatError(f"{where}: invalid integer {value!r}") from None
    raise ProgramFormatError(f"{where}: invalid integer {value!r}")


def _decode_statement(entry: Any, index: int) -> Statement:
    where = f"text.statements[{index}]"
    if not isinstance(entry, Mapping):
        raise ProgramFormatError(f"{where}: statement must be an object")
    if "label" in entry:
        name = entry["label"]
        if not isinstance(name, str) or not name:
            raise ProgramFormatError(f"{where}: label must be a non-empty string")
        return Label(name)
    opcode = entry.get("op")
    if not isinstance(opcode, str):
        raise ProgramFormatError(f"{where}: missing 'op' or 'label'")
    opcode = opcode.lower()
    if opcode not in OPCODES:
        raise ProgramFormatError(f"{where}: unknown instruction {opcode!r}")
    raw_args = entry.get("args", [])
    if not isinstance(raw_args, list):
        raise ProgramFormatError(f"{where}: 'args' must be a list")
    args = tuple(_decode_argument(arg, f"{where}.args[{pos}]") for pos, arg in enumerate(raw_args))
    return Instruction(opcode, args)


def _decode_variable(entry: Any, index: int) -> Variable:
    where = f"data[{index}]"
    if not isinstance(entry, Mapping):
        raise ProgramFormatError(f"{where}: variable must be an object")
    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise ProgramFormatError(f"{where}: 'name' must be a non-empty string")
    type_ = str(entry.get("type", "")).lower().lstrip(".")
    if type_ not in DATA_TYPES:
        raise ProgramFormatError(f"{where}: unsupported data type {entry.get('type')!r}")
    value = entry.get("value")
    if not isinstance(value, str):
        raise ProgramFormatError(f"{where}: {type_} value must be a string")
    return Variable(name, type_, value)


def program_from_dict(document: Mapping[str, Any]) -> Program:
    """Decode a program document into a :class:`Program`."""
    if not isinstance(document, Mapping):
        raise ProgramFormatError("program document must be an object")
    data = document.get("data", [])
    if not isinstance(data, list):
        raise ProgramFormatError("'data' must be a list")
    text = document.get("text")
    if not isinstance(text, Mapping):
        raise ProgramFormatError("'text' section missing")
    statements = text.get("statements")
    if not isinstance(statements, list):
        raise ProgramFormatError("'text.statements' must be a list")
    entrypoint = text.get("entrypoint", DEFAULT_ENTRYPOINT)
    if not isinstance(entrypoint, str) or not entrypoint:
        raise ProgramFormatError("'text.entrypoint' must be a non-empty string")
    return Program(
        variables=tuple(_decode_variable(entry, idx) for idx, entry in enumerate(data)),
        statements=tuple(_decode_statement(entry, idx) for idx, entry in enumerate(statements)),
        entrypoint=entrypoint,
    )


def _encode_argument(arg: Argument) -> Any:
    if isinstance(arg, Immediate):
        return arg.value
    return str(arg)


def program_to_dict(program: Program) -> Dict[str, Any]:
    statements: list = []
    for statement in program.statements:
        if isinstance(statement, Label):
            statements.append({"label": statement.name})
        elif statement.args:
            statements.append({"op": statement.opcode, "args": [_encode_argument(a) for a in statement.args]})
        else:
            statements.append({"op": statement.opcode})
    return {
        "data": [{"name": v.name, "type": v.type, "value": v.value} for v in program.variables],
        "text": {"entrypoint": program.entrypoint, "statements": statements},
    }


def load_program(path: Union[str, Path]) -> Program:
    """Read a JSON program document from ``path``."""
    source = Path(path)
    try:
        document = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ProgramFormatError(f"{source}: invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    return program_from_dict(document)


__all__ = [
    "Argument",
    "DATA_TYPES",
    "DEFAULT_ENTRYPOINT",
    "Immediate",
    "Instruction",
    "Label",
    "LabelRef",
    "Program",
    "Register",
    "Statement",
    "Variable",
    "format_statement",
    "load_program",
    "program_from_dict",
    "program_to_dict",
]
