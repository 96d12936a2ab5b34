"""Editor launch helper for jumping from a rendered line to its source.

Spawns the editor detached from the sidecar and returns an error message
string instead of raising, for UI-friendly handling.
"""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

DEFAULT_EDITOR_COMMAND = ("code", "-n", "-g", "{path}:{line}")
MACOS_FALLBACK_COMMAND = ("open", "-a", "Visual Studio Code", "--args", "-n", "-g", "{path}:{line}")


def _expand(template: Sequence[str], path: Path | str, line: int) -> list[str]:
    return [part.replace("{path}", str(path)).replace("{line}", str(line)) for part in template]


def _try_spawn(cmd: list[str]) -> bool:
    try:
        subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except (OSError, ValueError):
        return False
    return True


def launch_editor(
    target: Path | str,
    line: int,
    command: Sequence[str] | None = None,
    spawn: Callable[[list[str]], bool] = _try_spawn,
    platform: str | None = None,
) -> str | None:
    """Open ``target`` at ``line`` in the configured editor.

    ``line`` 0 means "top of file" and is sent as 1. A custom ``command``
    template replaces the VS Code default and gets no fallback.
    """
    line_number = line if line > 0 else 1
    if command is not None:
        if spawn(_expand(command, target, line_number)):
            return None
        return f"Unable to launch editor command '{command[0]}'."

    if spawn(_expand(DEFAULT_EDITOR_COMMAND, target, line_number)):
        return None
    if (platform or sys.platform) == "darwin":
        if spawn(_expand(MACOS_FALLBACK_COMMAND, target, line_number)):
            return None
        return (
            "Unable to launch Visual Studio Code. Install the `code` shell command "
            "or ensure VS Code is installed."
        )
    return "Unable to launch Visual Studio Code using the `code` command. Ensure VS Code CLI is installed."


__all__ = ["DEFAULT_EDITOR_COMMAND", "MACOS_FALLBACK_COMMAND", "launch_editor"]
