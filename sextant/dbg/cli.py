"""sextant-dbg CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from ..demos import DEMOS
from ..errors import ProgramFormatError, VMError
from ..program import Program, load_program
from ..vm import VMConfig
from ..vmclient import VMClientError
from .backend import DebuggerBackendError, LocalBackend, RemoteBackend, parse_endpoint
from .commands import build_registry
from .context import DebuggerContext
from .repl import DebuggerREPL, dispatch_line

LOG = logging.getLogger("sextant.dbg.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="sextant interactive debugger")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--program", type=Path, help="JSON program document to debug locally")
    target.add_argument("--demo", choices=sorted(DEMOS), help="debug a built-in program locally")
    target.add_argument("--connect", metavar="HOST:PORT", help="attach to a running sextant-server")
    parser.add_argument("--json", action="store_true", help="Emit JSON output when supported")
    parser.add_argument("--max-run-steps", type=int, default=100_000, help="statement cap per local run (<=0 disables)")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("SEXTANT_DBG_LOG", "WARNING"),
        help="Logging level (default WARNING)",
    )
    parser.add_argument(
        "-c",
        "--command",
        action="append",
        help="Execute a command non-interactively (repeatable, quote the command string)",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=Path.home() / ".sextant-dbg-history",
        help="Path to the command history file",
    )
    return parser


def _open_backend(args: argparse.Namespace):
    if args.connect:
        host, port = parse_endpoint(args.connect)
        return RemoteBackend(host, port)
    program: Optional[Program] = None
    if args.program is not None:
        program = load_program(args.program)
    elif args.demo:
        program = DEMOS[args.demo]()
    if program is None:
        return None
    return LocalBackend(program, VMConfig())


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    try:
        backend = _open_backend(args)
    except (OSError, VMError, VMClientError, ProgramFormatError, DebuggerBackendError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    ctx = DebuggerContext(
        json_output=args.json,
        backend=backend,
        max_run_steps=args.max_run_steps if args.max_run_steps > 0 else None,
    )
    registry = build_registry()
    try:
        if args.command:
            rc = 0
            for line in args.command:
                rc = dispatch_line(ctx, registry, line)
                if rc:
                    break
            return rc
        repl = DebuggerREPL(ctx, registry, history_path=str(args.history))
        return repl.run()
    except SystemExit as exc:
        return int(exc.code or 0)
    except KeyboardInterrupt:
        print()
        return 0
    finally:
        ctx.disconnect()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
