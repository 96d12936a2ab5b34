"""Launch-target classification.

Decides whether a filesystem path is something mudkip can open: a markdown
file or a folder. The extension allow-list here is shared by the picker, the
watchers and the folder listing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlsplit
from urllib.request import url2pathname

MARKDOWN_EXTENSIONS: tuple[str, ...] = ("md", "markdown", "mdown", "mkd", "txt")

TARGET_TYPE_FILE = "file"
TARGET_TYPE_FOLDER = "folder"


def is_markdown_path(path: Path | str) -> bool:
    """Return whether ``path`` carries an allow-listed extension (any case)."""
    suffix = Path(path).suffix
    if not suffix:
        return False
    return suffix[1:].lower() in MARKDOWN_EXTENSIONS


def display_path(path: Path | str) -> str:
    """Return ``path`` as text safe to send to the shell.

    Bytes that are not valid UTF-8 become U+FFFD instead of lone surrogates.
    """
    text = os.fspath(path)
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="replace")
    try:
        raw = text.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError:
        # Surrogates outside the escape range cannot come from a POSIX name.
        raw = text.encode("utf-8", errors="replace")
    return raw.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class OpenTargetPayload:
    """Wire form of a launch target handed to the shell."""

    target_type: str
    path: str

    def to_wire(self) -> dict[str, str]:
        return {"targetType": self.target_type, "path": self.path}

    @classmethod
    def from_wire(cls, data: object) -> "OpenTargetPayload":
        if not isinstance(data, dict):
            raise ValueError("open target payload must be an object")
        target_type = data.get("targetType")
        path = data.get("path")
        if target_type not in (TARGET_TYPE_FILE, TARGET_TYPE_FOLDER):
            raise ValueError(f"unknown target type: {target_type!r}")
        if not isinstance(path, str) or not path:
            raise ValueError("open target payload needs a non-empty path")
        return cls(target_type=target_type, path=path)


@dataclass(frozen=True)
class FileTarget:
    """A canonical, existing markdown file."""

    path: Path

    def to_payload(self) -> OpenTargetPayload:
        return OpenTargetPayload(target_type=TARGET_TYPE_FILE, path=display_path(self.path))


@dataclass(frozen=True)
class FolderTarget:
    """A canonical, existing directory."""

    path: Path

    def to_payload(self) -> OpenTargetPayload:
        return OpenTargetPayload(target_type=TARGET_TYPE_FOLDER, path=display_path(self.path))


LaunchTarget = FileTarget | FolderTarget


def canonicalize(path: Path | str, cwd: Path | None = None) -> Path:
    """Resolve ``path`` to an absolute, symlink-free path that must exist.

    Relative paths are anchored at ``cwd`` when given. Raises ``OSError`` when
    the path cannot be resolved.
    """
    candidate = Path(path).expanduser()
    if not candidate.is_absolute() and cwd is not None:
        candidate = Path(cwd) / candidate
    return candidate.resolve(strict=True)


def classify(path: Path | str, cwd: Path | None = None) -> LaunchTarget | None:
    """Classify ``path`` as a file target, folder target, or nothing.

    Unresolvable paths are not errors: they simply are not targets.
    """
    if not str(path):
        return None
    try:
        canonical = canonicalize(path, cwd)
    except (OSError, RuntimeError, ValueError):
        return None

    if canonical.is_dir():
        return FolderTarget(canonical)
    if canonical.is_file() and is_markdown_path(canonical):
        return FileTarget(canonical)
    return None


def file_url_to_path(url: str) -> Path | None:
    """Convert a ``file://`` URL into a local path, or ``None`` for other schemes."""
    parts = urlsplit(url)
    if parts.scheme.lower() != "file":
        return None
    if parts.netloc and parts.netloc.lower() != "localhost":
        # UNC share on Windows; other hosts are not local.
        if os.name != "nt":
            return None
        return Path(url2pathname(f"//{parts.netloc}{parts.path}"))
    if not parts.path:
        return None
    if os.name == "nt":
        return Path(url2pathname(parts.path))
    return Path(unquote(parts.path))


def classify_file_url(url: str) -> LaunchTarget | None:
    """Classify the path behind an OS "open with" URL."""
    path = file_url_to_path(url)
    if path is None:
        return None
    return classify(path)


__all__ = [
    "MARKDOWN_EXTENSIONS",
    "TARGET_TYPE_FILE",
    "TARGET_TYPE_FOLDER",
    "FileTarget",
    "FolderTarget",
    "LaunchTarget",
    "OpenTargetPayload",
    "canonicalize",
    "classify",
    "classify_file_url",
    "display_path",
    "file_url_to_path",
    "is_markdown_path",
]
