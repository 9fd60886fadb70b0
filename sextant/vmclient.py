import socket
from typing import Optional

from .protocol import (
    CommandMessage,
    ErrorMessage,
    InputMessage,
    SocketMessage,
    StatusUpdateMessage,
    VMCommand,
    decode_message,
    encode_message,
)
from .status import StatusUpdate


class VMClientError(RuntimeError):
    """Raised when the server answers with an Error message."""


def _check_status(message: SocketMessage) -> StatusUpdate:
    if isinstance(message, ErrorMessage):
        raise VMClientError(message.message)
    if not isinstance(message, StatusUpdateMessage):
        raise VMClientError(f"unexpected reply {message!r}")
    return message.status


class VMClient:
    def __init__(self, host: str, port: int, timeout: float = 5.0) -> None:
        self._sock = socket.create_connection((host, port), timeout=timeout)
        self._rfile = self._sock.makefile("r", encoding="utf-8", newline="\n")
        self._wfile = self._sock.makefile("w", encoding="utf-8", newline="\n")
        self.last_status: Optional[StatusUpdate] = None

    def close(self) -> None:
        try:
            self._rfile.close()
            self._wfile.close()
        finally:
            self._sock.close()

    def __enter__(self) -> "VMClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def send(self, message: SocketMessage) -> None:
        self._wfile.write(encode_message(message) + "\n")
        self._wfile.flush()

    def receive(self) -> SocketMessage:
        line = self._rfile.readline()
        if not line:
            raise VMClientError("VM connection closed")
        return decode_message(line)

    def request(self, message: SocketMessage) -> StatusUpdate:
        self.send(message)
        status = _check_status(self.receive())
        self.last_status = status
        return status

    def hello(self) -> StatusUpdate:
        """Read the status the server sends when a session opens."""
        status = _check_status(self.receive())
        self.last_status = status
        return status

    def step(self) -> StatusUpdate:
        return self.request(CommandMessage(VMCommand.STEP))

    def run(self) -> StatusUpdate:
        return self.request(CommandMessage(VMCommand.RUN))

    def send_input(self, text: str) -> StatusUpdate:
        return self.request(InputMessage(text))
