"""Single-instance coordination.

The first process owns the window. Later invocations (and OS "open with"
requests) are funnelled here: their arguments are re-parsed exactly as at
cold start, targets are queued for the shell, and the live window is
notified and focused.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from ..args import ParsedLaunchArgs, parse_launch_args
from ..events import APP_STARTUP_OPTIONS, FILE_OPEN_ON_LAUNCH, FILE_OPENED_EXTERNAL, EventChannel
from ..log import get_logger
from ..pending import PendingOpenTargets
from ..targets import LaunchTarget, classify_file_url

logger = get_logger("instance")


class ShellWindow(Protocol):
    """The GUI window owned by the primary instance."""

    def show(self) -> None: ...

    def focus(self) -> None: ...

    def emit(self, name: str, payload: object) -> None: ...


class SingleInstanceCoordinator:
    def __init__(self, pending: PendingOpenTargets, events: EventChannel, window: ShellWindow) -> None:
        self._pending = pending
        self._events = events
        self._window = window

    def _focus_window(self) -> None:
        self._window.show()
        self._window.focus()

    def _queue_external_open(self, target: LaunchTarget) -> None:
        payload = target.to_payload()
        self._pending.push(payload)
        self._events.publish(FILE_OPENED_EXTERNAL, payload)
        self._focus_window()

    def handle_cold_start(self, parsed: ParsedLaunchArgs) -> None:
        """Seed the queue with the launch target of the first instance.

        No opened-external notification is sent: the shell picks the target
        up through ``file:open-on-launch`` once its window is ready.
        """
        if parsed.exit_after_print or parsed.launch_target is None:
            return
        payload = parsed.launch_target.to_payload()
        self._pending.push(payload)
        self._events.publish(FILE_OPEN_ON_LAUNCH, payload)

    def handle_reinvocation(self, argv: Iterable[str], cwd: Path | None = None) -> ParsedLaunchArgs:
        """Apply the argument vector of a later launch to the live window.

        Startup options sent this way are transient: they are broadcast to the
        window but never replace the first instance's startup snapshot.
        """
        parsed = parse_launch_args(argv, cwd=cwd)
        if parsed.exit_after_print:
            return parsed

        if not parsed.startup_options.is_empty():
            self._events.publish(APP_STARTUP_OPTIONS, parsed.startup_options)

        if parsed.launch_target is not None:
            logger.info("Opening %s from another invocation", parsed.launch_target.path)
            self._queue_external_open(parsed.launch_target)
        elif not parsed.startup_options.is_empty():
            self._focus_window()
        return parsed

    def handle_opened_urls(self, urls: Iterable[str]) -> int:
        """Queue every ``file://`` URL the OS asked us to open; returns the count."""
        opened = 0
        for url in urls:
            target = classify_file_url(url)
            if target is None:
                logger.debug("Ignoring unopenable URL %s", url)
                continue
            self._queue_external_open(target)
            opened += 1
        return opened


__all__ = ["ShellWindow", "SingleInstanceCoordinator"]
