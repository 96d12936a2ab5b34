"""Loopback channel used to hand argument vectors to the primary instance.

The primary listens on an ephemeral loopback port recorded in a port file.
A later invocation connects, sends one JSON line ``{"argv": [...], "cwd":
"..."}`` and waits for an ``ok`` acknowledgement. A stale port file or an
unrelated listener simply fails the hand-off, and the caller becomes the
primary itself.
"""

from __future__ import annotations

import json
import os
import socket
import threading
from collections.abc import Callable
from pathlib import Path

from ..log import get_logger

logger = get_logger("ipc")

LOOPBACK_HOST = "127.0.0.1"
HANDOFF_TIMEOUT_SECONDS = 2.0
ACK = b"ok\n"
MAX_MESSAGE_BYTES = 1 << 20

ReinvocationHandler = Callable[[list[str], Path | None], None]


def encode_message(argv: list[str], cwd: Path | None) -> bytes:
    payload = {"argv": [str(arg) for arg in argv], "cwd": str(cwd) if cwd is not None else None}
    return (json.dumps(payload) + "\n").encode("utf-8")


def decode_message(raw: bytes) -> tuple[list[str], Path | None]:
    """Decode one hand-off line; raises ``ValueError`` when malformed."""
    data = json.loads(raw.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError("hand-off message must be a JSON object")
    argv = data.get("argv")
    if not isinstance(argv, list) or not all(isinstance(arg, str) for arg in argv):
        raise ValueError("hand-off message needs an 'argv' list of strings")
    cwd = data.get("cwd")
    if cwd is not None and not isinstance(cwd, str):
        raise ValueError("hand-off 'cwd' must be a string")
    return argv, (Path(cwd) if cwd else None)


def _read_line(conn: socket.socket) -> bytes:
    chunks: list[bytes] = []
    size = 0
    while True:
        chunk = conn.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
        size += len(chunk)
        if b"\n" in chunk or size > MAX_MESSAGE_BYTES:
            break
    return b"".join(chunks).split(b"\n", 1)[0]


class InstanceChannel:
    def __init__(self, port_file: Path, host: str = LOOPBACK_HOST) -> None:
        self._port_file = port_file
        self._host = host
        self._server: socket.socket | None = None
        self._port: int | None = None
        self._closed = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int | None:
        return self._port

    def _recorded_port(self) -> int | None:
        try:
            port = int(self._port_file.read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            return None
        return port if 0 < port < 65536 else None

    def forward(self, argv: list[str], cwd: Path | None) -> bool:
        """Hand ``argv`` to a running primary; ``True`` once it acknowledged."""
        port = self._recorded_port()
        if port is None:
            return False
        try:
            with socket.create_connection((self._host, port), timeout=HANDOFF_TIMEOUT_SECONDS) as conn:
                conn.sendall(encode_message(argv, cwd))
                conn.shutdown(socket.SHUT_WR)
                reply = _read_line(conn)
        except OSError as exc:
            logger.debug("No primary instance on port %s: %s", port, exc)
            return False
        return reply + b"\n" == ACK

    def listen(self) -> int:
        """Become the primary: bind, listen, and record the port."""
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            server.bind((self._host, 0))
            server.listen()
        except OSError:
            server.close()
            raise
        self._server = server
        self._port = server.getsockname()[1]

        try:
            self._port_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._port_file.with_name(f"{self._port_file.name}.{os.getpid()}.tmp")
            tmp_path.write_text(f"{self._port}\n", encoding="utf-8")
            os.replace(tmp_path, self._port_file)
        except OSError as exc:
            logger.warning("Could not record instance port in %s: %s", self._port_file, exc)
        return self._port

    def start_accepting(self, handler: ReinvocationHandler) -> None:
        """Serve hand-offs on a daemon thread, calling ``handler`` for each."""
        if self._server is None:
            raise RuntimeError("listen() must succeed before start_accepting()")
        self._thread = threading.Thread(
            target=self._accept_loop,
            args=(self._server, handler),
            name="mudkip-instance-channel",
            daemon=True,
        )
        self._thread.start()

    def _accept_loop(self, server: socket.socket, handler: ReinvocationHandler) -> None:
        while not self._closed.is_set():
            try:
                conn, _addr = server.accept()
            except OSError:
                if self._closed.is_set():
                    return
                logger.warning("Instance channel accept failed", exc_info=True)
                continue
            with conn:
                self._handle_connection(conn, handler)

    def _handle_connection(self, conn: socket.socket, handler: ReinvocationHandler) -> None:
        try:
            conn.settimeout(HANDOFF_TIMEOUT_SECONDS)
            raw = _read_line(conn)
            argv, cwd = decode_message(raw)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring malformed instance hand-off: %s", exc)
            return
        try:
            conn.sendall(ACK)
        except OSError as exc:
            logger.debug("Could not acknowledge hand-off: %s", exc)
        try:
            handler(argv, cwd)
        except Exception:
            logger.exception("Failed to apply instance hand-off")

    def close(self) -> None:
        """Stop serving and remove the port file when it still points at us."""
        self._closed.set()
        server, self._server = self._server, None
        if server is None:
            return
        try:
            # Wakes a blocked accept() on Linux, where close() alone does not.
            server.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        server.close()
        if self._recorded_port() == self._port:
            try:
                self._port_file.unlink()
            except OSError:
                pass


__all__ = [
    "HANDOFF_TIMEOUT_SECONDS",
    "InstanceChannel",
    "ReinvocationHandler",
    "decode_message",
    "encode_message",
]
