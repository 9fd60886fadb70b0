"""JSON message protocol between the session server and its clients.

Each message is one JSON object per line, tagged with its kind::

    {"type": "Command", "payload": {"command": "Step"}}
    {"type": "Input", "payload": "42"}
    {"type": "StatusUpdate", "payload": {"registers": [...], "pc": 3, ...}}
    {"type": "Error", "payload": {"message": "..."}}

Interruptions are encoded as ``{"Input": "Number"}``, ``{"Input": "String"}``,
``{"Output": "text"}``, ``"Halt"`` or ``null``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from .interrupts import (
    HALT,
    InputInterruption,
    InputRequest,
    Interruption,
    OutputInterruption,
)
from .memory import MemoryPatch
from .status import StatusUpdate


class ProtocolError(ValueError):
    """Raised when a message cannot be decoded."""


class VMCommand(str, Enum):
    STEP = "Step"
    RUN = "Run"


@dataclass(frozen=True)
class CommandMessage:
    command: VMCommand


@dataclass(frozen=True)
class InputMessage:
    text: str


@dataclass(frozen=True)
class StatusUpdateMessage:
    status: StatusUpdate


@dataclass(frozen=True)
class ErrorMessage:
    message: str


SocketMessage = Union[CommandMessage, InputMessage, StatusUpdateMessage, ErrorMessage]


def _json_dumps(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"))


def encode_interruption(interruption: Optional[Interruption]) -> Any:
    if interruption is None:
        return None
    if isinstance(interruption, InputInterruption):
        return {"Input": interruption.request.value}
    if isinstance(interruption, OutputInterruption):
        return {"Output": interruption.text}
    return "Halt"


def decode_interruption(value: Any) -> Optional[Interruption]:
    if value is None:
        return None
    if value == "Halt":
        return HALT
    if isinstance(value, Mapping) and len(value) == 1:
        kind, inner = next(iter(value.items()))
        if kind == "Input":
            try:
                return InputInterruption(InputRequest(inner))
            except ValueError:
                raise ProtocolError(f"unknown input request {inner!r}") from None
        if kind == "Output" and isinstance(inner, str):
            return OutputInterruption(inner)
    raise ProtocolError(f"invalid io_interruption {value!r}")


def status_from_dict(payload: Mapping[str, Any]) -> StatusUpdate:
    try:
        registers = tuple(int(value) & 0xFFFFFFFF for value in payload["registers"])
        pc = int(payload["pc"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ProtocolError(f"invalid status payload: {exc}") from exc
    patch = payload.get("memory_patch")
    memory_patch = None
    if patch:
        try:
            memory_patch = MemoryPatch(int(patch["address"]), bytes.fromhex(patch["data"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ProtocolError(f"invalid memory_patch: {exc}") from exc
    return StatusUpdate(
        registers=registers,
        pc=pc,
        io_interruption=decode_interruption(payload.get("io_interruption")),
        state=str(payload.get("state", "")),
        memory_patch=memory_patch,
    )


def message_to_dict(message: SocketMessage) -> Dict[str, Any]:
    if isinstance(message, CommandMessage):
        return {"type": "Command", "payload": {"command": message.command.value}}
    if isinstance(message, InputMessage):
        return {"type": "Input", "payload": message.text}
    if isinstance(message, StatusUpdateMessage):
        return {"type": "StatusUpdate", "payload": message.status.to_dict()}
    if isinstance(message, ErrorMessage):
        return {"type": "Error", "payload": {"message": message.message}}
    raise TypeError(f"not a protocol message: {message!r}")


def message_from_dict(data: Any) -> SocketMessage:
    if not isinstance(data, Mapping):
        raise ProtocolError("message must be an object")
    kind = data.get("type")
    payload = data.get("payload")
    if kind == "Command":
        command = payload.get("command") if isinstance(payload, Mapping) else None
        try:
            return CommandMessage(VMCommand(command))
        except ValueError:
            raise ProtocolError(f"unknown command {command!r}") from None
    if kind == "Input":
        if not isinstance(payload, str):
            raise ProtocolError("Input payload must be a string")
        return InputMessage(payload)
    if kind == "StatusUpdate":
        if not isinstance(payload, Mapping):
            raise ProtocolError("StatusUpdate payload must be an object")
        return StatusUpdateMessage(status_from_dict(payload))
    if kind == "Error":
        message = payload.get("message") if isinstance(payload, Mapping) else None
        if not isinstance(message, str):
            raise ProtocolError("Error payload must carry a message")
        return ErrorMessage(message)
    raise ProtocolError(f"unknown message type {kind!r}")


def encode_message(message: SocketMessage) -> str:
    """Serialise ``message`` as a single line (without the newline)."""
    return _json_dumps(message_to_dict(message))


def decode_message(line: Union[str, bytes]) -> SocketMessage:
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError(f"invalid UTF-8: {exc.reason}") from exc
    try:
        data = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"invalid JSON: {exc.msg}") from exc
    return message_from_dict(data)


__all__ = [
    "CommandMessage",
    "ErrorMessage",
    "InputMessage",
    "ProtocolError",
    "SocketMessage",
    "StatusUpdateMessage",
    "VMCommand",
    "decode_interruption",
    "decode_message",
    "encode_interruption",
    "encode_message",
    "message_from_dict",
    "message_to_dict",
    "status_from_dict",
]
