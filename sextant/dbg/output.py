"""Output helpers for sextant-dbg."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from ..interrupts import HaltInterruption, InputInterruption, InputRequest, OutputInterruption
from ..registers import REGISTER_NAMES
from ..status import StatusUpdate
from .context import DebuggerContext


def _json_dump(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def emit_result(ctx: DebuggerContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit a successful command result."""
    if ctx.json_output:
        payload: Dict[str, Any] = {"status": "ok"}
        if data is not None:
            payload["result"] = data
        else:
            payload["message"] = message
        print(_json_dump(payload))
    else:
        print(message)


def emit_error(ctx: DebuggerContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit an error message respecting JSON mode."""
    payload: Dict[str, Any] = {"status": "error", "error": message}
    if data:
        payload["details"] = dict(data)
    if ctx.json_output:
        print(_json_dump(payload))
    else:
        print(f"error: {message}")


def describe_interruption(status: StatusUpdate) -> Optional[str]:
    pending = status.io_interruption
    if isinstance(pending, OutputInterruption):
        return f"output: {pending.text}"
    if isinstance(pending, InputInterruption):
        kind = "a number" if pending.request is InputRequest.NUMBER else "a string"
        return f"waiting for {kind} (use: input <text>)"
    if isinstance(pending, HaltInterruption):
        return "program halted"
    return None


def summarise_status(status: StatusUpdate) -> str:
    line = f"pc={status.pc} state={status.state}"
    pending = describe_interruption(status)
    if pending:
        line += f"\n  {pending}"
    return line


def render_status(ctx: DebuggerContext, status: StatusUpdate, *, message: str = "") -> None:
    text = summarise_status(status)
    emit_result(ctx, message=f"{message}\n{text}" if message else text, data={"status": status.to_dict()})


def render_registers(status: StatusUpdate, *, columns: int = 4) -> None:
    cells = [f"{name:>5} 0x{value & 0xFFFFFFFF:08X}" for name, value in zip(REGISTER_NAMES, status.registers)]
    for start in range(0, len(cells), columns):
        print("  " + "  ".join(cells[start : start + columns]))


def render_hexdump(data: bytes, start: int, *, width: int = 16) -> None:
    for offset in range(0, len(data), width):
        chunk = data[offset : offset + width]
        hex_text = " ".join(f"{byte:02X}" for byte in chunk)
        padding = width - len(chunk)
        if padding > 0:
            hex_text += "   " * padding
        ascii_text = "".join(chr(byte) if 32 <= byte < 127 else "." for byte in chunk)
        print(f"0x{(start + offset) & 0xFFFFFFFF:08X}: {hex_text}  {ascii_text}")


__all__ = [
    "describe_interruption",
    "emit_error",
    "emit_result",
    "render_hexdump",
    "render_registers",
    "render_status",
    "summarise_status",
]
