"""Thin adapters over native desktop services.

Pickers use ``tkinter.filedialog``; theme detection probes the platform's
own settings tools. Every adapter is swappable through ``Desktop`` so the
command layer can be exercised without a display.
"""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .args import THEME_DARK, THEME_LIGHT
from .editor import launch_editor
from .targets import MARKDOWN_EXTENSIONS


def _with_hidden_root(ask: Callable[..., str], **options: object) -> Path | None:
    import tkinter

    root = tkinter.Tk()
    root.withdraw()
    try:
        root.attributes("-topmost", True)
        chosen = ask(parent=root, **options)
    finally:
        root.destroy()
    # Cancel yields "" or an empty tuple depending on the Tk build.
    if not chosen or not isinstance(chosen, str):
        return None
    return Path(chosen)


def pick_file() -> Path | None:
    """Ask the user for one markdown file; ``None`` when cancelled."""
    from tkinter import filedialog

    patterns = " ".join(f"*.{ext}" for ext in MARKDOWN_EXTENSIONS)
    return _with_hidden_root(
        filedialog.askopenfilename,
        title="Open Markdown File",
        filetypes=[("Markdown", patterns), ("All Files", "*")],
    )


def pick_folder() -> Path | None:
    """Ask the user for one folder; ``None`` when cancelled."""
    from tkinter import filedialog

    return _with_hidden_root(filedialog.askdirectory, title="Open Folder", mustexist=True)


def _probe(cmd: list[str]) -> str | None:
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError:
        return None
    if proc.returncode != 0:
        return None
    return proc.stdout.strip()


def _windows_prefers_light() -> bool | None:
    try:
        import winreg

        with winreg.OpenKey(
            winreg.HKEY_CURRENT_USER,
            r"Software\Microsoft\Windows\CurrentVersion\Themes\Personalize",
        ) as key:
            value, _value_type = winreg.QueryValueEx(key, "AppsUseLightTheme")
    except OSError:
        return None
    return bool(value)


def _linux_prefers_light() -> bool | None:
    scheme = _probe(["gsettings", "get", "org.gnome.desktop.interface", "color-scheme"])
    if scheme:
        if "dark" in scheme.lower():
            return False
        if "light" in scheme.lower():
            return True
    gtk_theme = _probe(["gsettings", "get", "org.gnome.desktop.interface", "gtk-theme"])
    if gtk_theme:
        return "dark" not in gtk_theme.lower()
    return None


def detect_system_theme(platform: str | None = None) -> str:
    """Return ``vscode-light`` only when the OS positively reports light mode."""
    platform = platform or sys.platform
    if platform == "darwin":
        # The key only exists while dark mode is on.
        style = _probe(["defaults", "read", "-g", "AppleInterfaceStyle"])
        prefers_light: bool | None = style is None or "dark" not in style.lower()
    elif platform.startswith("win"):
        prefers_light = _windows_prefers_light()
    else:
        prefers_light = _linux_prefers_light()
    return THEME_LIGHT if prefers_light else THEME_DARK


@dataclass(frozen=True)
class Desktop:
    """Native collaborators consumed by the command layer."""

    pick_file: Callable[[], Path | None] = pick_file
    pick_folder: Callable[[], Path | None] = pick_folder
    detect_system_theme: Callable[[], str] = detect_system_theme
    launch_editor: Callable[..., str | None] = launch_editor


__all__ = ["Desktop", "detect_system_theme", "pick_file", "pick_folder"]
