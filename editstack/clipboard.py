"""Clipboard for automation points.

The clipboard is an ordinary object owned by the editing context and
handed to copy/paste commands, so separate documents (and separate tests)
can each have their own buffer. Only one buffer exists per clipboard;
the last copy wins.
"""

from __future__ import annotations
import logging
from dataclasses import replace
from typing import Iterable, Optional

from .state import PointSnapshot

logger = logging.getLogger(__name__)


class AutomationClipboard:
    """Holds copied points with times relative to the first copied point."""

    def __init__(self):
        self.points: list[PointSnapshot] = []
        self.source_time: Optional[float] = None

    def store(self, snapshots: Iterable[PointSnapshot]):
        """Replace the buffer with normalized copies of *snapshots*."""
        snaps = sorted(snapshots, key=lambda s: s.time)
        if not snaps:
            self.points = []
            self.source_time = None
            logger.info('[CLIPBOARD] Copied 0 automation points')
            return
        base = snaps[0].time
        self.points = [replace(s, id=None, time=s.time - base) for s in snaps]
        self.source_time = base
        logger.info('[CLIPBOARD] Copied %d automation points', len(self.points))

    @property
    def span(self) -> float:
        """Time from the first to the last copied point."""
        return self.points[-1].time if self.points else 0.0

    def has_data(self) -> bool:
        """Check if clipboard has points."""
        return len(self.points) > 0

    def clear(self):
        """Clear clipboard."""
        self.points = []
        self.source_time = None
