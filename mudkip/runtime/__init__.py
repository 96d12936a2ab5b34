"""Primary-instance runtime.

This package groups the process-wide state (``AppContext``), the command
surface, the JSON-lines bridge to the GUI shell, and single-instance
hand-off between processes.
"""

from __future__ import annotations


def run_app(*args, **kwargs):
    """Lazily import the runtime entrypoint to avoid heavy imports at package import."""
    from .app import run_app as _run_app

    return _run_app(*args, **kwargs)


__all__ = ["run_app"]
