"""
sextant-dbg: interactive debugger for the sextant VM.

Debugs a program in-process (``--program``/``--demo``) or attaches to a
running ``sextant-server`` (``--connect``). Launch with ``sextant-dbg`` or
``python -m sextant.dbg``.
"""

from __future__ import annotations

from .cli import main

__all__ = ["main"]
