"""Command-line front door for mudkip.

Parses launch arguments, prints help/version when asked, and either hands
the invocation to an already running instance or becomes that instance.
"""

from __future__ import annotations

import sys
from pathlib import Path

from .args import parse_launch_args
from .config import instance_port_path, load_log_level
from .log import get_logger, resolve_level, setup_base_logger
from .runtime import run_app
from .runtime.ipc import InstanceChannel

logger = get_logger("cli")


def main(argv: list[str] | None = None) -> int:
    """Run one invocation of ``mudkip [OPTIONS] [FILE_OR_FOLDER]``.

    ``argv`` excludes the program name and defaults to ``sys.argv[1:]``.
    Returns the process exit status.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    setup_base_logger(level=resolve_level(load_log_level()))

    parsed = parse_launch_args(args)
    if parsed.exit_after_print:
        if parsed.output:
            sys.stdout.write(parsed.output + "\n")
        return 0

    channel = InstanceChannel(instance_port_path())
    if channel.forward(args, Path.cwd()):
        logger.info("Handed launch arguments to the running instance.")
        return 0

    try:
        channel.listen()
    except OSError as exc:
        logger.warning("Single-instance channel unavailable, running standalone: %s", exc)

    return run_app(parsed, channel, sys.stdin, sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
