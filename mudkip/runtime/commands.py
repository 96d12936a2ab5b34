"""Command surface exposed to the GUI shell.

Every handler runs behind ``CommandDispatcher.dispatch``, which turns all
failures into display-ready error strings. Nothing raises across the
shell boundary.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..args import StartupOptions
from ..log import get_logger
from ..payloads import (
    MarkdownFilePayload,
    MarkdownFolderPayload,
    PayloadError,
    build_file_payload,
    build_folder_payload,
)
from ..targets import OpenTargetPayload, is_markdown_path
from ..watch import WatchError
from .context import AppContext
from .instance import SingleInstanceCoordinator

logger = get_logger("commands")

CommandArgs = dict[str, object]


class CommandError(Exception):
    """A command was called with bad arguments or its collaborator failed."""


@dataclass(frozen=True)
class CommandResponse:
    ok: bool
    result: object = None
    error: str | None = None


def _require_str(args: CommandArgs, key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value:
        raise CommandError(f"Missing or invalid '{key}' argument.")
    return value


def _optional_line(args: CommandArgs, key: str) -> int:
    value = args.get(key, 1)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise CommandError(f"Invalid '{key}' argument: expected a non-negative integer.")
    return value


class CommandDispatcher:
    def __init__(self, context: AppContext, instance: SingleInstanceCoordinator) -> None:
        self._context = context
        self._instance = instance
        self._handlers: dict[str, Callable[[CommandArgs], object]] = {
            "pick-file": self.pick_file,
            "pick-folder": self.pick_folder,
            "read-file": self.read_file,
            "read-folder": self.read_folder,
            "open-in-editor": self.open_in_editor,
            "get-system-theme": self.get_system_theme,
            "watch-file-start": self.watch_file_start,
            "watch-file-stop": self.watch_file_stop,
            "watch-folder-start": self.watch_folder_start,
            "watch-folder-stop": self.watch_folder_stop,
            "consume-pending-target": self.consume_pending_target,
            "get-startup-options": self.get_startup_options,
            "app-opened-urls": self.app_opened_urls,
        }

    @property
    def command_names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def dispatch(self, name: str, args: object = None) -> CommandResponse:
        handler = self._handlers.get(name)
        if handler is None:
            return CommandResponse(ok=False, error=f"Unknown command '{name}'.")
        if args is None:
            args = {}
        if not isinstance(args, dict):
            return CommandResponse(ok=False, error=f"Arguments for '{name}' must be an object.")

        try:
            result = handler(args)
        except (CommandError, PayloadError, WatchError) as exc:
            return CommandResponse(ok=False, error=str(exc))
        except Exception as exc:
            logger.exception("Command '%s' failed", name)
            return CommandResponse(ok=False, error=f"Command '{name}' failed: {exc}")
        return CommandResponse(ok=True, result=result)

    def pick_file(self, _args: CommandArgs) -> MarkdownFilePayload | None:
        selected = self._context.desktop.pick_file()
        if selected is None:
            return None
        if not is_markdown_path(selected):
            raise CommandError("Selected file does not look like markdown.")
        return build_file_payload(selected)

    def pick_folder(self, _args: CommandArgs) -> MarkdownFolderPayload | None:
        selected = self._context.desktop.pick_folder()
        if selected is None:
            return None
        return build_folder_payload(selected)

    def read_file(self, args: CommandArgs) -> MarkdownFilePayload:
        return build_file_payload(Path(_require_str(args, "path")))

    def read_folder(self, args: CommandArgs) -> MarkdownFolderPayload:
        return build_folder_payload(Path(_require_str(args, "path")))

    def open_in_editor(self, args: CommandArgs) -> None:
        path = _require_str(args, "path")
        line = _optional_line(args, "line")
        error = self._context.desktop.launch_editor(path, line, command=self._context.editor_command)
        if error is not None:
            raise CommandError(error)

    def get_system_theme(self, _args: CommandArgs) -> str:
        return self._context.desktop.detect_system_theme()

    def watch_file_start(self, args: CommandArgs) -> None:
        self._context.file_watch.start(_require_str(args, "path"))

    def watch_file_stop(self, _args: CommandArgs) -> None:
        self._context.file_watch.stop()

    def watch_folder_start(self, args: CommandArgs) -> None:
        self._context.folder_watch.start(_require_str(args, "path"))

    def watch_folder_stop(self, _args: CommandArgs) -> None:
        self._context.folder_watch.stop()

    def consume_pending_target(self, _args: CommandArgs) -> OpenTargetPayload | None:
        return self._context.pending.pop()

    def get_startup_options(self, _args: CommandArgs) -> StartupOptions:
        return self._context.startup_options

    def app_opened_urls(self, args: CommandArgs) -> int:
        urls = args.get("urls")
        if not isinstance(urls, list) or not all(isinstance(url, str) for url in urls):
            raise CommandError("Missing or invalid 'urls' argument.")
        return self._instance.handle_opened_urls(urls)


__all__ = ["CommandDispatcher", "CommandError", "CommandResponse"]
