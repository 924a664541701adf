"""Automation thinning: drop points that don't change the curve's shape."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from ..commands import Command, require
from ..core.settings import DEFAULTS
from ..core.simplify import MIN_THRESHOLD, simplify
from ..state import AutomationLane

logger = logging.getLogger(__name__)


@dataclass(eq=False, repr=False)
class ThinLane(Command):
    """Reduce point density with Ramer-Douglas-Peucker.

    The lane is captured when the command is created. The reduced set is
    computed once and reused across undo/redo.
    """
    kind: ClassVar[str] = 'automation.thin'

    lane: AutomationLane
    threshold: float
    original: tuple
    _reduced: Optional[tuple] = field(default=None, init=False)

    @classmethod
    def create(cls, lane, threshold=DEFAULTS['thin_threshold']):
        require(lane, 'lane')
        return cls(lane, max(MIN_THRESHOLD, float(threshold)),
                   tuple(lane.snapshot()))

    @property
    def reduced(self) -> tuple:
        if self._reduced is None:
            self._reduced = tuple(simplify(self.original, self.threshold))
            logger.info('[THIN] %s: %d -> %d points (threshold %g)',
                        self.lane.parameter, len(self.original),
                        len(self._reduced), self.threshold)
        return self._reduced

    @property
    def description(self):
        return (f'Thin Automation ({len(self.original)} -> '
                f'{len(self.reduced)} points)')

    @property
    def removed_count(self) -> int:
        return len(self.original) - len(self.reduced)

    def _replace_all(self, snaps):
        self.lane.clear_points()
        for snap in snaps:
            self.lane.add_snapshot(snap)

    def execute(self):
        if len(self.original) <= 2:
            return
        self._replace_all(self.reduced)

    def undo(self):
        if len(self.original) <= 2:
            return
        self._replace_all(self.original)
