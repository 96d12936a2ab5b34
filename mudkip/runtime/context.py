"""Process-wide state owned by the primary instance.

Everything command handlers share lives on one explicitly constructed
``AppContext``: the two watch coordinators, the pending-target queue, the
event channel, the startup-options snapshot, and the desktop collaborators.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..args import StartupOptions
from ..desktop import Desktop
from ..events import EventChannel
from ..pending import PendingOpenTargets
from ..watch import AttachWatch, FileWatchCoordinator, FolderWatchCoordinator


@dataclass
class AppContext:
    startup_options: StartupOptions
    events: EventChannel
    pending: PendingOpenTargets
    file_watch: FileWatchCoordinator
    folder_watch: FolderWatchCoordinator
    desktop: Desktop
    editor_command: Sequence[str] | None = None

    @classmethod
    def create(
        cls,
        cli_options: StartupOptions,
        default_options: StartupOptions | None = None,
        *,
        desktop: Desktop | None = None,
        attach_watch: AttachWatch | None = None,
        editor_command: Sequence[str] | None = None,
    ) -> "AppContext":
        """Build the context once at process start.

        The startup snapshot is the first invocation's options layered over
        the configured defaults; later invocations never modify it.
        """
        events = EventChannel()
        startup_options = cli_options.merged_over(default_options or StartupOptions())
        return cls(
            startup_options=startup_options,
            events=events,
            pending=PendingOpenTargets(),
            file_watch=FileWatchCoordinator(events, attach_watch),
            folder_watch=FolderWatchCoordinator(events, attach_watch),
            desktop=desktop or Desktop(),
            editor_command=editor_command,
        )

    def close(self) -> None:
        """Stop both watches and close the event channel."""
        self.file_watch.stop()
        self.folder_watch.stop()
        self.events.close()


__all__ = ["AppContext"]
