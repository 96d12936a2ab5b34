"""JSON-lines bridge between the primary instance and its GUI shell.

Requests arrive on stdin, one object per line::

    {"id": 7, "command": "read-file", "args": {"path": "README.md"}}

Responses and events leave on stdout, one object per line::

    {"id": 7, "ok": true, "result": {...}}
    {"id": 7, "ok": false, "error": "Failed to resolve file path ..."}
    {"event": "file:changed", "payload": {...}}

Window control is expressed as ``window:show`` / ``window:focus`` events.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from ..events import EventChannel
from ..log import get_logger
from .commands import CommandDispatcher, CommandResponse
from .instance import ShellWindow

logger = get_logger("bridge")

WINDOW_SHOW = "window:show"
WINDOW_FOCUS = "window:focus"


def wire_value(value: object) -> object:
    """Convert payload objects into JSON-ready values."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    to_wire = getattr(value, "to_wire", None)
    if callable(to_wire):
        return to_wire()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [wire_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): wire_value(item) for key, item in value.items()}
    raise TypeError(f"cannot send {type(value).__name__} to the shell")


class StdioShell:
    """``ShellWindow`` that speaks the JSON-lines protocol on a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def write_message(self, message: dict[str, object]) -> None:
        line = json.dumps(message, ensure_ascii=False)
        with self._lock:
            self._stream.write(line + "\n")
            self._stream.flush()

    def emit(self, name: str, payload: object) -> None:
        self.write_message({"event": name, "payload": wire_value(payload)})

    def show(self) -> None:
        self.emit(WINDOW_SHOW, None)

    def focus(self) -> None:
        self.emit(WINDOW_FOCUS, None)

    def respond(self, request_id: object, response: CommandResponse) -> None:
        message: dict[str, object] = {"id": request_id, "ok": response.ok}
        if response.ok:
            message["result"] = wire_value(response.result)
        else:
            message["error"] = response.error
        try:
            self.write_message(message)
        except UnicodeEncodeError as exc:
            logger.warning("Response to request %r could not be encoded", request_id, exc_info=True)
            self.write_message({"id": request_id, "ok": False, "error": f"Response could not be encoded: {exc}"})


class EventPump:
    """Delivers channel events to the window on one daemon thread, in order."""

    def __init__(self, events: EventChannel, window: ShellWindow) -> None:
        self._events = events
        self._window = window
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._worker, name="mudkip-event-pump", daemon=True)
        self._thread.start()

    def _worker(self) -> None:
        while True:
            event = self._events.get()
            if event is None:
                return
            try:
                self._window.emit(event.name, event.payload)
            except (OSError, TypeError, ValueError):
                logger.warning("Failed to deliver %s event", event.name, exc_info=True)

    def join(self) -> None:
        if self._thread is not None:
            self._thread.join()


def parse_request(line: str) -> tuple[object, str, object]:
    """Split one request line into ``(id, command, args)``; ``ValueError`` if malformed."""
    data = json.loads(line)
    if not isinstance(data, dict):
        raise ValueError("request must be a JSON object")
    command = data.get("command")
    if not isinstance(command, str) or not command:
        raise ValueError("request needs a 'command' string")
    request_id = data.get("id")
    if isinstance(request_id, (dict, list)):
        raise ValueError("request 'id' must be a scalar")
    return request_id, command, data.get("args")


def serve(dispatcher: CommandDispatcher, events: EventChannel, shell: StdioShell, requests: Iterable[str]) -> None:
    """Answer requests until the input ends, pumping events meanwhile."""
    pump = EventPump(events, shell)
    pump.start()
    try:
        for raw_line in requests:
            line = raw_line.strip()
            if not line:
                continue
            try:
                request_id, command, args = parse_request(line)
            except ValueError as exc:
                shell.respond(None, CommandResponse(ok=False, error=f"Malformed request: {exc}"))
                continue
            shell.respond(request_id, dispatcher.dispatch(command, args))
    finally:
        events.close()
        pump.join()


__all__ = [
    "WINDOW_FOCUS",
    "WINDOW_SHOW",
    "EventPump",
    "StdioShell",
    "parse_request",
    "serve",
    "wire_value",
]
