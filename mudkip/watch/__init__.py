"""Filesystem watch coordinators for the open file and the open folder.

Each coordinator keeps at most one active OS watch. The watchdog adapter in
``observer`` is imported lazily so the state machines stay importable and
testable without starting observer threads.
"""

from __future__ import annotations

from .coordinator import AttachWatch, ChangeCallback, ChangeKind, WatchCoordinator, WatchError, WatchHandle
from .file_watch import FileWatchCoordinator
from .folder_watch import FolderWatchCoordinator

__all__ = [
    "AttachWatch",
    "ChangeCallback",
    "ChangeKind",
    "FileWatchCoordinator",
    "FolderWatchCoordinator",
    "WatchCoordinator",
    "WatchError",
    "WatchHandle",
]
