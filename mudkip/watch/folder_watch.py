"""Live watch on the folder whose markdown listing is currently shown."""

from __future__ import annotations

from pathlib import Path

from ..events import FOLDER_CHANGED
from ..payloads import MarkdownFolderPayload, build_folder_payload
from ..targets import canonicalize, display_path
from .coordinator import ChangeKind, WatchCoordinator, WatchError


class FolderWatchCoordinator(WatchCoordinator):
    """Republishes ``folder:changed`` when entries appear, change or go away."""

    target_label = "folder"
    event_name = FOLDER_CHANGED
    reacts_to = frozenset({ChangeKind.CREATE, ChangeKind.MODIFY, ChangeKind.REMOVE})

    def resolve_target(self, path: Path | str) -> Path:
        try:
            canonical_path = canonicalize(path)
        except (OSError, RuntimeError, ValueError) as exc:
            raise WatchError(f"Failed to resolve folder path '{display_path(path)}': {exc}") from exc
        if not canonical_path.is_dir():
            raise WatchError(f"Can only watch folders: '{display_path(canonical_path)}'")
        return canonical_path

    def build_payload(self, path: Path) -> MarkdownFolderPayload:
        return build_folder_payload(path)


__all__ = ["FolderWatchCoordinator"]
