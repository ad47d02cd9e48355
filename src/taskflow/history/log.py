"""Bounded undo/redo history."""

import threading
from collections import deque
from typing import Deque, List, Optional

import structlog

from taskflow.history.actions import BaseAction, describe_action

logger = structlog.get_logger(__name__)

MAX_HISTORY_SIZE = 50


class ActionLog:
    """Two-stack undo/redo history of committed edits.

    The undo stack holds at most ``max_size`` actions; pushing beyond that
    evicts the oldest one. Pushing a new action always clears the redo
    stack. The log only moves actions between its stacks: applying an
    action's effect to the workspace is the caller's job (see
    :mod:`taskflow.history.reversal`).

    ``add_action``, ``undo`` and ``redo`` hold an internal lock, since each
    touches both stacks.
    """

    def __init__(self, max_size: int = MAX_HISTORY_SIZE) -> None:
        """Initialize an empty log.

        Args:
            max_size: Maximum number of undoable actions kept

        Raises:
            ValueError: If max_size is not positive
        """
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")

        self.max_size = max_size
        self._undo_stack: Deque[BaseAction] = deque(maxlen=max_size)
        self._redo_stack: List[BaseAction] = []
        self._lock = threading.Lock()

    def add_action(self, action: BaseAction) -> None:
        """Record a newly committed action."""
        with self._lock:
            evicted = len(self._undo_stack) == self.max_size
            self._undo_stack.append(action)
            self._redo_stack.clear()
            depth = len(self._undo_stack)

        logger.debug(
            "action_recorded",
            kind=action.kind.value,
            action_id=action.id,
            depth=depth,
            evicted=evicted,
        )

    def undo(self) -> Optional[BaseAction]:
        """Move the most recent action to the redo stack and return it.

        Returns:
            The action whose effect must now be reversed, or None if there
            is nothing to undo
        """
        with self._lock:
            if not self._undo_stack:
                return None
            action = self._undo_stack.pop()
            self._redo_stack.append(action)
        return action

    def redo(self) -> Optional[BaseAction]:
        """Move the most recently undone action back and return it.

        Returns:
            The action whose effect must be re-applied, or None if there is
            nothing to redo
        """
        with self._lock:
            if not self._redo_stack:
                return None
            action = self._redo_stack.pop()
            self._undo_stack.append(action)
        return action

    def can_undo(self) -> bool:
        """Whether there is an action to undo."""
        return len(self._undo_stack) > 0

    def can_redo(self) -> bool:
        """Whether there is an action to redo."""
        return len(self._redo_stack) > 0

    def describe_last_undo(self) -> str:
        """Label of the action ``undo`` would return, or an empty string."""
        if not self._undo_stack:
            return ""
        return describe_action(self._undo_stack[-1])

    def describe_next_redo(self) -> str:
        """Label of the action ``redo`` would return, or an empty string."""
        if not self._redo_stack:
            return ""
        return describe_action(self._redo_stack[-1])

    @property
    def undo_actions(self) -> List[BaseAction]:
        """Snapshot of the undo stack, oldest first."""
        return list(self._undo_stack)

    @property
    def redo_actions(self) -> List[BaseAction]:
        """Snapshot of the redo stack, the next action to redo last."""
        return list(self._redo_stack)

    def clear(self) -> None:
        """Forget all history."""
        with self._lock:
            self._undo_stack.clear()
            self._redo_stack.clear()

    def __len__(self) -> int:
        return len(self._undo_stack)
