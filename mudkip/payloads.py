"""Immutable content snapshots for markdown files and folders.

A payload is taken at one point in time. When the underlying file or folder
changes the payload is rebuilt from scratch, never patched.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .targets import display_path, is_markdown_path


class PayloadError(ValueError):
    """A requested path could not be turned into a payload.

    The message is meant for direct display and names the offending path.
    """


@dataclass(frozen=True)
class MarkdownFilePayload:
    file_path: str
    file_name: str
    base_href: str
    content: str

    def to_wire(self) -> dict[str, str]:
        return {
            "filePath": self.file_path,
            "fileName": self.file_name,
            "baseHref": self.base_href,
            "content": self.content,
        }


@dataclass(frozen=True)
class MarkdownFolderEntry:
    file_path: str
    file_name: str

    def to_wire(self) -> dict[str, str]:
        return {"filePath": self.file_path, "fileName": self.file_name}


@dataclass(frozen=True)
class MarkdownFolderPayload:
    folder_path: str
    files: tuple[MarkdownFolderEntry, ...] = ()

    def to_wire(self) -> dict[str, object]:
        return {
            "folderPath": self.folder_path,
            "files": [entry.to_wire() for entry in self.files],
        }


def _resolve(path: Path, kind: str) -> Path:
    try:
        return Path(path).expanduser().resolve(strict=True)
    except (OSError, RuntimeError, ValueError) as exc:
        raise PayloadError(f"Failed to resolve {kind} path '{display_path(path)}': {exc}") from exc


def directory_base_href(directory: Path) -> str:
    """Return a ``file://`` URL for ``directory`` ending in ``/``.

    Relative links inside a document resolve against this URL.
    """
    if not directory.is_absolute():
        raise PayloadError(f"Unable to convert parent directory '{directory}' to a file URL.")
    uri = directory.as_uri()
    return uri if uri.endswith("/") else f"{uri}/"


def build_file_payload(path: Path | str) -> MarkdownFilePayload:
    """Snapshot one markdown file.

    Content is decoded as UTF-8 with replacement characters for invalid
    sequences, so arbitrary bytes never fail the read.
    """
    canonical_path = _resolve(Path(path), "file")
    if not is_markdown_path(canonical_path):
        raise PayloadError(f"Requested path does not look like markdown: '{display_path(canonical_path)}'")

    try:
        raw = canonical_path.read_bytes()
    except OSError as exc:
        raise PayloadError(f"Failed to read file '{display_path(canonical_path)}': {exc}") from exc
    content = raw.decode("utf-8", errors="replace")

    file_name = canonical_path.name
    if not file_name:
        raise PayloadError(f"Unable to determine file name for '{display_path(canonical_path)}'.")

    parent = canonical_path.parent
    if parent == canonical_path:
        raise PayloadError(f"Unable to determine parent directory for '{display_path(canonical_path)}'.")

    return MarkdownFilePayload(
        file_path=display_path(canonical_path),
        file_name=display_path(file_name),
        base_href=directory_base_href(parent),
        content=content,
    )


def _folder_sort_key(entry: MarkdownFolderEntry) -> tuple[str, str]:
    return (entry.file_name.lower(), entry.file_name)


def list_markdown_files(folder: Path) -> tuple[MarkdownFolderEntry, ...]:
    """List markdown files directly inside ``folder`` in display order.

    Only a failure to enumerate ``folder`` itself raises. Entries that vanish
    mid-scan, cannot be inspected, are not regular files, or fail the
    allow-list after canonicalisation are left out.
    """
    entries: list[MarkdownFolderEntry] = []
    try:
        with os.scandir(folder) as scan:
            for child in scan:
                try:
                    if not child.is_file(follow_symlinks=False):
                        continue
                except OSError:
                    continue
                if not is_markdown_path(child.name):
                    continue

                try:
                    canonical_child = Path(child.path).resolve(strict=True)
                except (OSError, RuntimeError, ValueError):
                    continue
                if not canonical_child.is_file() or not is_markdown_path(canonical_child):
                    continue

                entries.append(
                    MarkdownFolderEntry(
                        file_path=display_path(canonical_child),
                        file_name=display_path(canonical_child.name),
                    )
                )
    except OSError as exc:
        raise PayloadError(f"Failed to read folder '{display_path(folder)}': {exc}") from exc

    entries.sort(key=_folder_sort_key)
    return tuple(entries)


def build_folder_payload(path: Path | str) -> MarkdownFolderPayload:
    """Snapshot the markdown listing of one folder."""
    canonical_path = _resolve(Path(path), "folder")
    if not canonical_path.is_dir():
        raise PayloadError(f"Requested path is not a folder: '{display_path(canonical_path)}'")
    return MarkdownFolderPayload(
        folder_path=display_path(canonical_path),
        files=list_markdown_files(canonical_path),
    )


__all__ = [
    "MarkdownFilePayload",
    "MarkdownFolderEntry",
    "MarkdownFolderPayload",
    "PayloadError",
    "build_file_payload",
    "build_folder_payload",
    "directory_base_href",
    "list_markdown_files",
]
