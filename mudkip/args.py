"""Launch-argument parsing.

Turns a raw argument vector into a launch request: at most one launch target,
the startup options the user asked for, and whether the invocation only
printed help/version text.

The scan is hand-written rather than ``argparse`` because it must tolerate
arbitrary argument vectors forwarded from other instances and OS launchers:
unknown flags are skipped, malformed values only warn, and a value-taking
flag never swallows a following flag.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from . import __version__
from .log import get_logger
from .targets import LaunchTarget, classify

logger = get_logger("args")

PROG_NAME = "mudkip"

THEME_DARK = "vscode-dark"
THEME_LIGHT = "vscode-light"

_THEME_VALUES = {
    "dark": THEME_DARK,
    "vscode-dark": THEME_DARK,
    "light": THEME_LIGHT,
    "vscode-light": THEME_LIGHT,
}
_TRUTHY = frozenset({"1", "true", "yes", "on", "open", "enabled"})
_FALSY = frozenset({"0", "false", "no", "off", "closed", "close", "disabled"})

_HELP_FLAGS = ("-h", "--help")
_VERSION_FLAGS = ("-V", "--version")
_TOC_CLOSED_FLAGS = ("--toc-closed", "--toc-close", "--no-toc")
_WATCH_OFF_FLAGS = ("--no-watch", "--watch-off", "--no-auto-refresh")
_WATCH_FLAGS = ("--watch", "--auto-refresh")


def parse_theme_value(value: str) -> str | None:
    """Map a user-facing theme word onto a theme id, or ``None``."""
    return _THEME_VALUES.get(value.lower())


def parse_toggle_value(value: str) -> bool | None:
    """Map an on/off word onto a bool, or ``None`` when unrecognised."""
    lowered = value.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    return None


@dataclass(frozen=True)
class StartupOptions:
    """Initial UI state requested at launch; ``None`` means "not requested"."""

    theme: str | None = None
    toc_open: bool | None = None
    auto_refresh: bool | None = None

    def is_empty(self) -> bool:
        return self.theme is None and self.toc_open is None and self.auto_refresh is None

    def merged_over(self, defaults: "StartupOptions") -> "StartupOptions":
        """Return options where fields set here win over ``defaults``."""
        return StartupOptions(
            theme=self.theme if self.theme is not None else defaults.theme,
            toc_open=self.toc_open if self.toc_open is not None else defaults.toc_open,
            auto_refresh=self.auto_refresh if self.auto_refresh is not None else defaults.auto_refresh,
        )

    def to_wire(self) -> dict[str, object]:
        out: dict[str, object] = {}
        if self.theme is not None:
            out["theme"] = self.theme
        if self.toc_open is not None:
            out["tocOpen"] = self.toc_open
        if self.auto_refresh is not None:
            out["autoRefresh"] = self.auto_refresh
        return out


@dataclass(frozen=True)
class ParsedLaunchArgs:
    launch_target: LaunchTarget | None = None
    startup_options: StartupOptions = field(default_factory=StartupOptions)
    exit_after_print: bool = False
    output: str | None = None


def version_text() -> str:
    return f"{PROG_NAME} {__version__}"


def help_text() -> str:
    return (
        f"{version_text()}\n"
        "\n"
        "Usage:\n"
        f"  {PROG_NAME} [OPTIONS] [FILE_OR_FOLDER]\n"
        "\n"
        "Options:\n"
        "  --theme <dark|light>      Set startup theme.\n"
        "  --dark                    Alias for --theme dark.\n"
        "  --light                   Alias for --theme light.\n"
        "  --toc[=<open|closed>]     Open TOC drawer on launch (default when no value: open).\n"
        "  --toc-open                Open TOC drawer on launch.\n"
        "  --toc-closed              Close TOC drawer on launch.\n"
        "  --watch[=<on|off>]        Enable auto-refresh watch on launch (default when no value: on).\n"
        "  --no-watch                Disable auto-refresh watch on launch.\n"
        "  -h, --help                Show this help and exit.\n"
        "  -V, --version             Show version and exit."
    )


class _LaunchArgScanner:
    """Mutable scan state for one ``parse_launch_args`` call."""

    def __init__(self, args: list[str], cwd: Path | None) -> None:
        self.args = args
        self.cwd = cwd
        self.index = 0
        self.positional_only = False
        self.launch_target: LaunchTarget | None = None
        self.theme: str | None = None
        self.toc_open: bool | None = None
        self.auto_refresh: bool | None = None
        self.exit_after_print = False
        self.output: str | None = None

    def lookahead(self) -> str | None:
        next_index = self.index + 1
        return self.args[next_index] if next_index < len(self.args) else None

    def print_and_exit(self, text: str) -> None:
        # First print request wins; the caller stops after this invocation.
        if self.output is None:
            self.output = text
        self.exit_after_print = True

    def set_theme(self, value: str) -> None:
        theme = parse_theme_value(value)
        if theme is None:
            logger.warning("Ignoring unsupported --theme value '%s'. Expected dark or light.", value)
            return
        self.theme = theme

    def scan_flag(self, arg: str) -> int | None:
        """Apply ``arg`` as a flag and return how many tokens it used.

        Returns ``None`` when ``arg`` should be treated as a positional.
        """
        if arg in _HELP_FLAGS:
            self.print_and_exit(help_text())
            return 1
        if arg in _VERSION_FLAGS:
            self.print_and_exit(version_text())
            return 1
        if arg == "--dark":
            self.theme = THEME_DARK
            return 1
        if arg == "--light":
            self.theme = THEME_LIGHT
            return 1
        if arg == "--toc-open":
            self.toc_open = True
            return 1
        if arg in _TOC_CLOSED_FLAGS:
            self.toc_open = False
            return 1
        if arg in _WATCH_OFF_FLAGS:
            self.auto_refresh = False
            return 1

        if arg == "--theme":
            value = self.lookahead()
            if value is None or value.startswith("-"):
                logger.warning("Ignoring --theme without a value.")
                return 1
            self.set_theme(value)
            return 2

        if arg == "--toc" or arg in _WATCH_FLAGS:
            value = self.lookahead()
            toggle = parse_toggle_value(value) if value is not None else None
            if arg == "--toc":
                self.toc_open = True if toggle is None else toggle
            else:
                self.auto_refresh = True if toggle is None else toggle
            return 1 if toggle is None else 2

        if arg.startswith("--theme="):
            self.set_theme(arg[len("--theme="):])
            return 1

        if arg.startswith("--toc="):
            value = arg[len("--toc="):]
            toggle = parse_toggle_value(value)
            if toggle is None:
                logger.warning("Ignoring unsupported --toc value '%s'. Expected open/closed/on/off.", value)
            else:
                self.toc_open = toggle
            return 1

        for prefix in ("--watch=", "--auto-refresh="):
            if arg.startswith(prefix):
                value = arg[len(prefix):]
                toggle = parse_toggle_value(value)
                if toggle is None:
                    logger.warning("Ignoring unsupported watch value '%s'. Expected on/off/true/false.", value)
                else:
                    self.auto_refresh = toggle
                return 1

        if arg.startswith("-"):
            logger.debug("Skipping unrecognised option '%s'.", arg)
            return 1
        return None

    def scan_positional(self, arg: str) -> None:
        if self.launch_target is not None:
            return
        self.launch_target = classify(arg, self.cwd)

    def run(self) -> ParsedLaunchArgs:
        while self.index < len(self.args):
            if self.exit_after_print:
                # The caller stops after printing; nothing later can take effect.
                break
            arg = self.args[self.index]
            if not self.positional_only:
                if arg == "--":
                    self.positional_only = True
                    self.index += 1
                    continue
                consumed = self.scan_flag(arg)
                if consumed is not None:
                    self.index += consumed
                    continue
            self.scan_positional(arg)
            self.index += 1

        return ParsedLaunchArgs(
            launch_target=self.launch_target,
            startup_options=StartupOptions(
                theme=self.theme,
                toc_open=self.toc_open,
                auto_refresh=self.auto_refresh,
            ),
            exit_after_print=self.exit_after_print,
            output=self.output,
        )


def parse_launch_args(args: Iterable[str], cwd: Path | None = None) -> ParsedLaunchArgs:
    """Parse launch arguments (without the program name).

    ``cwd`` anchors relative paths; forwarded vectors from another instance
    pass that instance's working directory.
    """
    return _LaunchArgScanner([str(arg) for arg in args], cwd).run()


__all__ = [
    "PROG_NAME",
    "THEME_DARK",
    "THEME_LIGHT",
    "ParsedLaunchArgs",
    "StartupOptions",
    "help_text",
    "parse_launch_args",
    "parse_theme_value",
    "parse_toggle_value",
    "version_text",
]
