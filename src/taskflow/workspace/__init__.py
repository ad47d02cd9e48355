"""In-memory workspace and its JSON store.

The controller lives in :mod:`taskflow.workspace.controller`.
"""

from taskflow.workspace.state import WorkspaceState, WorkspaceStore

__all__ = [
    "WorkspaceState",
    "WorkspaceStore",
]
