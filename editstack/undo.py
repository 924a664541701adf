"""Undo/redo history for the editor.

Keeps two stacks of commands: the undo stack (applied edits, most recent
last) and the redo stack (reverted edits). Recording a new edit asks the
top of the undo stack whether it absorbs the new command, which is how a
fader drag or a point drag collapses into a single undo step.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Callable, Optional

from .commands import Command, CompoundCommand
from .core.settings import DEFAULTS

logger = logging.getLogger(__name__)


class HistoryStack:
    """Manages undo/redo history with mergeable commands."""

    def __init__(self, max_size: int = DEFAULTS['max_history']):
        if max_size < 1:
            raise ValueError(f'max_size must be positive, got {max_size}')
        self.max_size = max_size
        self.undo_stack: list[Command] = []
        self.redo_stack: list[Command] = []
        self._batch: Optional[CompoundCommand] = None
        self._listeners: list[Callable] = []

    def on_change(self, callback: Callable):
        self._listeners.append(callback)

    def notify(self, source=None):
        for cb in self._listeners:
            cb(source)

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return bool(self.undo_stack)

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return bool(self.redo_stack)

    def record(self, cmd: Command):
        """Execute a command against live state and record it."""
        if cmd is None:
            raise ValueError('command is required')
        cmd.execute()
        self.push(cmd)

    def push(self, cmd: Command):
        """Record a command that the caller has already executed."""
        if cmd is None:
            raise ValueError('command is required')
        if self._batch is not None:
            self._batch.commands.append(cmd)
            return

        # New forward work invalidates everything that was undone
        self.redo_stack.clear()

        top = self.undo_stack[-1] if self.undo_stack else None
        if top is not None and top.can_merge_with(cmd):
            merged = top.merge_with(cmd)
            self.undo_stack[-1] = merged
            logger.debug('[HISTORY] merged %s into %s', cmd, merged)
            self.notify('merge')
            return

        self.undo_stack.append(cmd)
        if len(self.undo_stack) > self.max_size:
            self.undo_stack.pop(0)
        logger.debug('[HISTORY] recorded %s', cmd)
        self.notify('record')

    def undo(self) -> Optional[Command]:
        """Revert the most recent command and return it."""
        if not self.can_undo():
            return None
        cmd = self.undo_stack.pop()
        cmd.undo()
        self.redo_stack.append(cmd)
        logger.debug('[HISTORY] undo %s', cmd)
        self.notify('undo')
        return cmd

    def redo(self) -> Optional[Command]:
        """Re-apply the most recently undone command and return it."""
        if not self.can_redo():
            return None
        cmd = self.redo_stack.pop()
        cmd.execute()
        self.undo_stack.append(cmd)
        logger.debug('[HISTORY] redo %s', cmd)
        self.notify('redo')
        return cmd

    def undo_many(self, count: int) -> int:
        done = 0
        while done < count and self.undo() is not None:
            done += 1
        return done

    def redo_many(self, count: int) -> int:
        done = 0
        while done < count and self.redo() is not None:
            done += 1
        return done

    def clear(self):
        """Clear all history."""
        self.undo_stack.clear()
        self.redo_stack.clear()
        self.notify('clear')

    @contextmanager
    def batch(self, description: str):
        """Group every command recorded inside the block into one step.

        Commands still execute as they are recorded. If the block raises,
        the collected commands are undone before the exception propagates.
        """
        if self._batch is not None:
            # Nested batches fold into the outer one
            yield self._batch
            return
        self._batch = CompoundCommand(label=description)
        try:
            yield self._batch
        except BaseException:
            collected, self._batch = self._batch, None
            collected.undo()
            raise
        collected, self._batch = self._batch, None
        if collected.commands:
            self.push(collected)

    # Menu text helpers
    @property
    def undo_description(self) -> Optional[str]:
        return self.undo_stack[-1].description if self.undo_stack else None

    @property
    def redo_description(self) -> Optional[str]:
        return self.redo_stack[-1].description if self.redo_stack else None

    @property
    def undo_text(self) -> str:
        return f'Undo {self.undo_description}' if self.can_undo() else 'Undo'

    @property
    def redo_text(self) -> str:
        return f'Redo {self.redo_description}' if self.can_redo() else 'Redo'

    def undo_history(self) -> list[str]:
        """Descriptions of undoable commands, most recent first."""
        return [c.description for c in reversed(self.undo_stack)]

    def redo_history(self) -> list[str]:
        return [c.description for c in reversed(self.redo_stack)]
