"""Undo/redo history of workspace edits."""

from taskflow.history.actions import Action, ActionKind, UnknownActionError, describe_action
from taskflow.history.log import MAX_HISTORY_SIZE, ActionLog
from taskflow.history.reversal import apply_redo, apply_undo

__all__ = [
    "Action",
    "ActionKind",
    "ActionLog",
    "MAX_HISTORY_SIZE",
    "UnknownActionError",
    "describe_action",
    "apply_undo",
    "apply_redo",
]
