"""Memory inspection and program listing commands."""

from __future__ import annotations

import argparse
from typing import List, Optional

from .base import Command
from ..backend import DebuggerBackendError
from ..context import DebuggerContext
from ..output import emit_error, emit_result, render_hexdump
from ...errors import VMError
from ...program import format_statement


class MemoryCommand(Command):
    def __init__(self) -> None:
        super().__init__("mem", "Hex-dump memory at an address or data variable", aliases=("memory", "x"))
        parser = argparse.ArgumentParser(prog="mem", add_help=False)
        parser.add_argument("address", type=str)
        parser.add_argument("count", nargs="?", type=int, default=32)
        self._parser = parser

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            args = self._parser.parse_args(argv)
        except SystemExit:
            return 1
        try:
            backend = ctx.ensure_backend()
            address = self._resolve_address(args.address, backend.data_variables())
            if address is None:
                emit_error(ctx, message=f"unknown address or variable: {args.address}")
                return 1
            data = backend.read_mem(address, max(1, args.count))
        except (VMError, DebuggerBackendError) as exc:
            emit_error(ctx, message=f"memory read failed: {exc}")
            return 1
        if ctx.json_output:
            emit_result(ctx, message="memory", data={"address": address, "data": data.hex()})
        else:
            render_hexdump(data, address)
        return 0

    @staticmethod
    def _resolve_address(spec: str, variables: dict) -> Optional[int]:
        if spec in variables:
            return variables[spec]
        try:
            return int(spec, 0)
        except ValueError:
            return None


class ListCommand(Command):
    def __init__(self) -> None:
        super().__init__("list", "List program statements around the program counter", aliases=("l",))
        self._parser = argparse.ArgumentParser(prog="list", add_help=False)
        self._parser.add_argument("--all", action="store_true", help="List the whole program")
        self._parser.add_argument("--context", type=int, default=5, help="Lines around pc (default 5)")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            args = self._parser.parse_args(argv)
        except SystemExit:
            return 1
        try:
            backend = ctx.ensure_backend()
            statements = backend.statements()
            pc = backend.status().pc
        except DebuggerBackendError as exc:
            emit_error(ctx, message=str(exc))
            return 1
        if args.all:
            start, end = 0, len(statements)
        else:
            start = max(0, pc - args.context)
            end = min(len(statements), pc + args.context + 1)
        lines = []
        for index in range(start, end):
            marker = "=>" if index == pc else "  "
            lines.append(f"{marker} {index:4} {format_statement(statements[index])}")
        emit_result(ctx, message="\n".join(lines) or "(empty program)", data={"pc": pc, "listing": lines})
        return 0
