"""Debugger backends: an in-process VM or a remote session server."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from ..program import Program, Statement
from ..status import StatusUpdate
from ..vm import MiniVM, VMConfig
from ..vmclient import VMClient


class DebuggerBackendError(RuntimeError):
    """Raised when a backend cannot serve a request."""


class LocalBackend:
    """Drives a VM living in the debugger process."""

    def __init__(self, program: Program, config: Optional[VMConfig] = None) -> None:
        self.vm = MiniVM(config)
        self.vm.load(program)

    def status(self) -> StatusUpdate:
        return self.vm.get_status()

    def step(self) -> StatusUpdate:
        self.vm.step()
        return self.vm.get_status()

    def run(self, max_steps: Optional[int] = None) -> StatusUpdate:
        self.vm.run(max_steps=max_steps)
        return self.vm.get_status()

    def send_input(self, text: str) -> StatusUpdate:
        self.vm.handle_input(text)
        return self.vm.get_status()

    def read_mem(self, address: int, length: int) -> bytes:
        return self.vm.read_mem(address, length)

    def data_variables(self) -> Dict[str, int]:
        return dict(self.vm.data_variables)

    def statements(self) -> Tuple[Statement, ...]:
        return self.vm.statements

    def close(self) -> None:
        pass


class RemoteBackend:
    """Talks to ``sextant-server`` over its JSON-lines protocol."""

    def __init__(self, host: str, port: int, *, timeout: float = 30.0, client: Optional[VMClient] = None) -> None:
        self.host = host
        self.port = port
        self.client = client if client is not None else VMClient(host, port, timeout=timeout)
        self._status = self.client.hello()

    def status(self) -> StatusUpdate:
        return self._status

    def step(self) -> StatusUpdate:
        self._status = self.client.step()
        return self._status

    def run(self, max_steps: Optional[int] = None) -> StatusUpdate:
        # The server applies its own per-command step limit.
        self._status = self.client.run()
        return self._status

    def send_input(self, text: str) -> StatusUpdate:
        self._status = self.client.send_input(text)
        return self._status

    def read_mem(self, address: int, length: int) -> bytes:
        raise DebuggerBackendError("memory inspection needs a local session")

    def data_variables(self) -> Dict[str, int]:
        return {}

    def statements(self) -> Sequence[Statement]:
        raise DebuggerBackendError("program listing needs a local session")

    def close(self) -> None:
        self.client.close()


def parse_endpoint(text: str, default_port: int = 3000) -> Tuple[str, int]:
    """Split ``host:port`` (either part optional)."""
    host, sep, port = text.rpartition(":")
    if not sep:
        return text or "127.0.0.1", default_port
    try:
        return host or "127.0.0.1", int(port)
    except ValueError:
        raise DebuggerBackendError(f"invalid port in {text!r}") from None


__all__ = ["DebuggerBackendError", "LocalBackend", "RemoteBackend", "parse_endpoint"]
