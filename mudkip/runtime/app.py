"""Primary-instance runtime: wire state, accept hand-offs, serve the shell."""

from __future__ import annotations

from typing import TextIO

from ..args import ParsedLaunchArgs
from ..config import load_default_startup_options, load_editor_command
from ..desktop import Desktop
from ..log import get_logger
from ..watch import AttachWatch
from .bridge import StdioShell, serve
from .commands import CommandDispatcher
from .context import AppContext
from .instance import SingleInstanceCoordinator
from .ipc import InstanceChannel

logger = get_logger("app")


def run_app(
    parsed: ParsedLaunchArgs,
    channel: InstanceChannel | None,
    stdin: TextIO,
    stdout: TextIO,
    *,
    desktop: Desktop | None = None,
    attach_watch: AttachWatch | None = None,
) -> int:
    """Run as the window-owning instance until the shell closes stdin."""
    shell = StdioShell(stdout)
    context = AppContext.create(
        parsed.startup_options,
        load_default_startup_options(),
        desktop=desktop,
        attach_watch=attach_watch,
        editor_command=load_editor_command(),
    )
    instance = SingleInstanceCoordinator(context.pending, context.events, shell)
    dispatcher = CommandDispatcher(context, instance)

    shell.show()
    # The launch target must be queued before any forwarded one.
    instance.handle_cold_start(parsed)
    if channel is not None and channel.port is not None:
        channel.start_accepting(instance.handle_reinvocation)

    try:
        serve(dispatcher, context.events, shell, stdin)
    finally:
        if channel is not None:
            channel.close()
        context.close()
    logger.debug("Shell closed the bridge; exiting")
    return 0


__all__ = ["run_app"]
