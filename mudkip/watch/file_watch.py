"""Live watch on the single markdown file currently shown."""

from __future__ import annotations

from pathlib import Path

from ..events import FILE_CHANGED
from ..payloads import MarkdownFilePayload, build_file_payload
from ..targets import canonicalize, display_path, is_markdown_path
from .coordinator import ChangeKind, WatchCoordinator, WatchError


class FileWatchCoordinator(WatchCoordinator):
    """Republishes ``file:changed`` whenever the watched file is written.

    Removal is not a trigger: a deleted file has no content to rebuild, and
    a recreate arrives as its own create event.
    """

    target_label = "markdown file"
    event_name = FILE_CHANGED
    reacts_to = frozenset({ChangeKind.CREATE, ChangeKind.MODIFY})

    def resolve_target(self, path: Path | str) -> Path:
        try:
            canonical_path = canonicalize(path)
        except (OSError, RuntimeError, ValueError) as exc:
            raise WatchError(f"Failed to resolve file path '{display_path(path)}': {exc}") from exc
        if not canonical_path.is_file() or not is_markdown_path(canonical_path):
            raise WatchError(f"Can only watch markdown files: '{display_path(canonical_path)}'")
        return canonical_path

    def build_payload(self, path: Path) -> MarkdownFilePayload:
        return build_file_payload(path)


__all__ = ["FileWatchCoordinator"]
