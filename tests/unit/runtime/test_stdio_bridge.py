"""Tests for the JSON-lines bridge spoken with the GUI shell."""

from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from mudkip.args import StartupOptions, parse_launch_args
from mudkip.desktop import Desktop
from mudkip.events import FILE_OPEN_ON_LAUNCH
from mudkip.runtime.app import run_app
from mudkip.runtime.bridge import WINDOW_FOCUS, WINDOW_SHOW, StdioShell, parse_request, serve, wire_value
from mudkip.runtime.commands import CommandDispatcher, CommandResponse
from mudkip.runtime.context import AppContext
from mudkip.runtime.instance import SingleInstanceCoordinator
from mudkip.targets import OpenTargetPayload


class _NullHandle:
    def close(self) -> None:
        pass


def _null_attach(_path, _callback) -> _NullHandle:
    return _NullHandle()


def _messages(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class WireValueTests(unittest.TestCase):
    def test_payload_objects_use_their_wire_form(self) -> None:
        self.assertEqual(
            wire_value(OpenTargetPayload(target_type="file", path="/a.md")),
            {"targetType": "file", "path": "/a.md"},
        )
        self.assertEqual(wire_value(StartupOptions(toc_open=False)), {"tocOpen": False})
        self.assertEqual(wire_value([Path("/x"), None, 3]), ["/x", None, 3])

    def test_unknown_objects_are_rejected(self) -> None:
        with self.assertRaises(TypeError):
            wire_value(object())


class ParseRequestTests(unittest.TestCase):
    def test_valid_request(self) -> None:
        self.assertEqual(
            parse_request('{"id": 4, "command": "read-file", "args": {"path": "a.md"}}'),
            (4, "read-file", {"path": "a.md"}),
        )

    def test_malformed_requests_raise_value_error(self) -> None:
        for line in ("not json", "[1, 2]", '{"id": 1}', '{"id": [1], "command": "x"}'):
            with self.subTest(line=line), self.assertRaises(ValueError):
                parse_request(line)


class StdioShellTests(unittest.TestCase):
    def test_window_control_and_responses(self) -> None:
        out = io.StringIO()
        shell = StdioShell(out)

        shell.show()
        shell.focus()
        shell.respond(1, CommandResponse(ok=True, result=StartupOptions(theme="vscode-dark")))
        shell.respond(2, CommandResponse(ok=False, error="nope"))

        self.assertEqual(
            _messages(out),
            [
                {"event": WINDOW_SHOW, "payload": None},
                {"event": WINDOW_FOCUS, "payload": None},
                {"id": 1, "ok": True, "result": {"theme": "vscode-dark"}},
                {"id": 2, "ok": False, "error": "nope"},
            ],
        )


class ServeTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.doc = self.root / "readme.md"
        self.doc.write_text("hello", encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_serve_answers_requests_and_flushes_events_before_returning(self) -> None:
        out = io.StringIO()
        shell = StdioShell(out)
        context = AppContext.create(StartupOptions(), attach_watch=_null_attach)
        instance = SingleInstanceCoordinator(context.pending, context.events, shell)
        dispatcher = CommandDispatcher(context, instance)
        instance.handle_cold_start(parse_launch_args([str(self.doc)]))

        requests = [
            json.dumps({"id": 1, "command": "consume-pending-target"}) + "\n",
            "\n",
            "garbage\n",
            json.dumps({"id": "two", "command": "read-file", "args": {"path": str(self.doc)}}) + "\n",
        ]
        serve(dispatcher, context.events, shell, requests)

        messages = _messages(out)
        responses = [message for message in messages if "id" in message]
        events = [message for message in messages if "event" in message]
        self.assertEqual(responses[0], {"id": 1, "ok": True, "result": {"targetType": "file", "path": str(self.doc)}})
        self.assertIsNone(responses[1]["id"])
        self.assertTrue(responses[1]["error"].startswith("Malformed request:"))
        self.assertEqual(responses[2]["result"]["content"], "hello")
        self.assertEqual(events, [{"event": FILE_OPEN_ON_LAUNCH, "payload": {"targetType": "file", "path": str(self.doc)}}])
        self.assertTrue(context.events.closed)


class UndecodableNameTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        (self.root / "ok.md").write_text("x", encoding="utf-8")
        try:
            (self.root / os.fsdecode(b"bad\xff.md")).write_text("x", encoding="utf-8")
        except OSError:
            self._tmp.cleanup()
            self.skipTest("filesystem rejects names that are not valid UTF-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_read_folder_keeps_the_bridge_alive_on_strict_utf8_stdout(self) -> None:
        raw = io.BytesIO()
        out = io.TextIOWrapper(raw, encoding="utf-8", newline="\n")
        shell = StdioShell(out)
        context = AppContext.create(
            StartupOptions(),
            desktop=Desktop(detect_system_theme=lambda: "vscode-dark"),
            attach_watch=_null_attach,
        )
        dispatcher = CommandDispatcher(context, SingleInstanceCoordinator(context.pending, context.events, shell))

        requests = [
            json.dumps({"id": 1, "command": "read-folder", "args": {"path": str(self.root)}}),
            json.dumps({"id": 2, "command": "get-system-theme"}),
        ]
        serve(dispatcher, context.events, shell, requests)
        out.flush()

        responses = [json.loads(line) for line in raw.getvalue().decode("utf-8").splitlines()]
        self.assertEqual(
            [entry["fileName"] for entry in responses[0]["result"]["files"]],
            ["bad\ufffd.md", "ok.md"],
        )
        self.assertEqual(responses[1], {"id": 2, "ok": True, "result": "vscode-dark"})


class ResponseEncodingTests(unittest.TestCase):
    def test_unencodable_response_becomes_an_error_response(self) -> None:
        raw = io.BytesIO()
        out = io.TextIOWrapper(raw, encoding="utf-8", newline="\n")
        shell = StdioShell(out)

        with self.assertLogs("mudkip.bridge", level="WARNING"):
            shell.respond(5, CommandResponse(ok=True, result="bad\udcff.md"))
        shell.respond(6, CommandResponse(ok=True, result="fine"))
        out.flush()

        responses = [json.loads(line) for line in raw.getvalue().decode("utf-8").splitlines()]
        self.assertEqual(responses[0]["id"], 5)
        self.assertFalse(responses[0]["ok"])
        self.assertTrue(responses[0]["error"].startswith("Response could not be encoded:"))
        self.assertEqual(responses[1], {"id": 6, "ok": True, "result": "fine"})


class _HandOffOnAccept:
    """Instance channel that delivers one forwarded launch as soon as accepting starts."""

    port = 4242

    def __init__(self, argv: list[str]) -> None:
        self.argv = argv
        self.closed = False

    def start_accepting(self, handler) -> None:
        handler(self.argv, None)

    def close(self) -> None:
        self.closed = True


class RunAppTests(unittest.TestCase):
    def test_run_app_shows_window_and_serves_until_stdin_closes(self) -> None:
        out = io.StringIO()
        stdin = io.StringIO(json.dumps({"id": 1, "command": "get-system-theme"}) + "\n")
        desktop = Desktop(detect_system_theme=lambda: "vscode-dark")

        with tempfile.TemporaryDirectory() as tmp:
            missing_config = str(Path(tmp) / "config.json")
            with mock.patch.dict(os.environ, {"MUDKIP_CONFIG": missing_config}):
                status = run_app(
                    parse_launch_args([]), None, stdin, out, desktop=desktop, attach_watch=_null_attach
                )

        self.assertEqual(status, 0)
        messages = _messages(out)
        self.assertEqual(messages[0], {"event": WINDOW_SHOW, "payload": None})
        self.assertIn({"id": 1, "ok": True, "result": "vscode-dark"}, messages)

    def test_launch_target_is_queued_before_forwarded_targets(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            first = root / "first.md"
            forwarded = root / "forwarded.md"
            first.write_text("x", encoding="utf-8")
            forwarded.write_text("y", encoding="utf-8")
            channel = _HandOffOnAccept([str(forwarded)])
            out = io.StringIO()
            stdin = io.StringIO(
                json.dumps({"id": 1, "command": "consume-pending-target"})
                + "\n"
                + json.dumps({"id": 2, "command": "consume-pending-target"})
                + "\n"
            )

            with mock.patch.dict(os.environ, {"MUDKIP_CONFIG": str(root / "config.json")}):
                run_app(parse_launch_args([str(first)]), channel, stdin, out, attach_watch=_null_attach)

        responses = [message for message in _messages(out) if "id" in message]
        self.assertEqual([response["result"]["path"] for response in responses], [str(first), str(forwarded)])
        self.assertTrue(channel.closed)


if __name__ == "__main__":
    unittest.main()
