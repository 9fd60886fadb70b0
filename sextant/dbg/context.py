"""Debugger context shared by all commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .backend import DebuggerBackendError, LocalBackend, RemoteBackend

LOGGER = logging.getLogger("sextant.dbg.context")

Backend = Union[LocalBackend, RemoteBackend]


@dataclass
class DebuggerContext:
    """Holds shared CLI debugger state."""

    json_output: bool = False
    backend: Optional[Backend] = None
    max_run_steps: Optional[int] = 100_000
    aliases: Dict[str, str] = field(default_factory=dict)

    def ensure_backend(self) -> Backend:
        if self.backend is None:
            raise DebuggerBackendError("no VM session (start with --program, --demo or --connect)")
        return self.backend

    def disconnect(self) -> None:
        backend = self.backend
        if backend is None:
            return
        try:
            backend.close()
        except OSError as exc:
            LOGGER.debug("backend close failed: %s", exc)
        self.backend = None

    def resolve_alias(self, name: str) -> str:
        return self.aliases.get(name, name)
