"""Command-line tokenising for sextant-dbg."""

from __future__ import annotations

import shlex
from typing import List, Tuple


class CommandLineError(ValueError):
    """Raised when a debugger command line cannot be tokenised."""


def split_command(line: str) -> Tuple[str, List[str]]:
    """Return ``(command, args)`` for ``line``; ``("", [])`` when it is blank.

    Tokens follow shell quoting, so ``input "two words"`` passes a single
    argument. Unbalanced quotes raise :class:`CommandLineError`.
    """
    try:
        tokens = shlex.split(line, comments=False, posix=True)
    except ValueError as exc:
        raise CommandLineError(f"{exc} in {line.strip()!r}") from None
    if not tokens:
        return "", []
    return tokens[0], tokens[1:]
