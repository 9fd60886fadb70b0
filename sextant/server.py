#!/usr/bin/env python3
"""Session server: one VM per TCP connection, JSON messages one per line.

On connect the server builds a fresh VM, loads the configured program and
sends an initial ``StatusUpdate``. Construction or load failures are reported
as an ``Error`` and the connection is closed. Afterwards every ``Command``
(Step/Run) and ``Input`` message is answered with a ``StatusUpdate`` or, when
the VM rejects it, an ``Error``; the session stays open in both cases.
"""

from __future__ import annotations

import argparse
import logging
import os
import socketserver
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .demos import DEMOS
from .errors import ProgramFormatError, VMError
from .program import Program, load_program
from .protocol import (
    CommandMessage,
    ErrorMessage,
    InputMessage,
    ProtocolError,
    SocketMessage,
    StatusUpdateMessage,
    VMCommand,
    decode_message,
    encode_message,
)
from .vm import MiniVM, VMConfig

LOGGER = logging.getLogger("sextant.server")

DEFAULT_PORT = 3000


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    vm: VMConfig = field(default_factory=lambda: VMConfig(step_delay=0.1))
    # Upper bound on statements executed by a single Run command.
    max_steps: Optional[int] = 100_000


class _SessionHandler(socketserver.StreamRequestHandler):
    server: "VMServer"

    def handle(self) -> None:
        peer = "%s:%s" % self.client_address[:2]
        LOGGER.info("session opened from %s", peer)
        try:
            vm = MiniVM(self.server.config.vm)
            vm.load(self.server.program_factory())
        except (VMError, ProgramFormatError) as exc:
            LOGGER.error("session %s failed to start: %s", peer, exc)
            self._send(ErrorMessage(str(exc)))
            return
        self._send(StatusUpdateMessage(vm.get_status()))
        while not self.server.shutdown_event.is_set():
            line = self.rfile.readline()
            if not line:
                break
            if not line.strip():
                continue
            try:
                message = decode_message(line)
            except ProtocolError as exc:
                LOGGER.warning("session %s sent an invalid message: %s", peer, exc)
                self._send(ErrorMessage(str(exc)))
                continue
            LOGGER.debug("session %s received %r", peer, message)
            self._send(self.dispatch(vm, message))
        LOGGER.info("session closed for %s", peer)

    def dispatch(self, vm: MiniVM, message: SocketMessage) -> SocketMessage:
        try:
            if isinstance(message, CommandMessage):
                if message.command is VMCommand.STEP:
                    vm.step()
                else:
                    vm.run(
                        max_steps=self.server.config.max_steps,
                        should_stop=self.server.shutdown_event.is_set,
                    )
            elif isinstance(message, InputMessage):
                vm.handle_input(message.text)
            else:
                return ErrorMessage(f"unexpected {type(message).__name__} from client")
        except VMError as exc:
            LOGGER.warning("vm error: %s", exc)
            return ErrorMessage(str(exc))
        return StatusUpdateMessage(vm.get_status())

    def _send(self, message: SocketMessage) -> None:
        data = encode_message(message).encode("utf-8") + b"\n"
        self.wfile.write(data)
        self.wfile.flush()


class VMServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, config: ServerConfig, program_factory: Callable[[], Program]) -> None:
        self.config = config
        self.program_factory = program_factory
        self.shutdown_event = threading.Event()
        super().__init__((config.host, config.port), _SessionHandler)

    def shutdown(self) -> None:
        self.shutdown_event.set()
        super().shutdown()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="sextant VM session server")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--program", type=Path, help="JSON program document to serve")
    source.add_argument("--demo", choices=sorted(DEMOS), default="sum", help="built-in program (default: sum)")
    parser.add_argument("--listen-host", default="127.0.0.1", help="interface to bind (default: 127.0.0.1)")
    parser.add_argument("--listen", type=int, default=DEFAULT_PORT, help=f"TCP port (default: {DEFAULT_PORT})")
    parser.add_argument("--step-delay", type=float, default=0.1, help="seconds between statements during run")
    parser.add_argument("--max-steps", type=int, default=100_000, help="statement cap per run command (<=0 disables)")
    parser.add_argument("--memory-size", type=int, default=VMConfig.memory_size, help="memory bytes (power of 2)")
    parser.add_argument("--stack-size", type=int, default=VMConfig.stack_size, help="stack bytes (power of 2)")
    parser.add_argument("--log-level", default=os.environ.get("SEXTANT_LOG", "INFO"), help="logging level (default INFO)")
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    if args.program is not None:
        try:
            program = load_program(args.program)
        except (OSError, ProgramFormatError) as exc:
            parser.error(f"cannot load {args.program}: {exc}")
        factory: Callable[[], Program] = lambda: program
    else:
        factory = DEMOS[args.demo]

    config = ServerConfig(
        host=args.listen_host,
        port=args.listen,
        vm=VMConfig(
            memory_size=args.memory_size,
            stack_size=args.stack_size,
            step_delay=max(0.0, args.step_delay),
        ),
        max_steps=args.max_steps if args.max_steps > 0 else None,
    )
    try:
        config.vm.validate()
    except VMError as exc:
        parser.error(str(exc))

    server = VMServer(config, factory)
    LOGGER.info("listening on %s:%d", *server.server_address[:2])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        LOGGER.info("shutting down")
    finally:
        server.shutdown_event.set()
        server.server_close()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
